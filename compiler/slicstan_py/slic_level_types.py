#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from slic_ast import (
    Stmt, Block, DeclStmt, AssignStmt, SampleStmt, FuncDecl, Program,
    Expr, IntLiteral, RealLiteral, VarRef, UnaryOp, BinaryOp, IndexExpr, CallExpr,
)
from slic_constraints import ConstraintGraph, LevelSolver, NodeBounds
from slic_context import CompilationContext
from slic_diagnostics import ErrorKind, raise_error
from slic_env import RETURN_SLOT, TypeEnvironment, TypeEnvResolver, VarKind, level_node
from slic_internal_error import ICELocation, InternalCompilerError
from slic_levels import Level
from slic_logger import log_debug
from slic_signatures import CalleeKind, FunctionSignature, SignatureResolver
from slic_types import builtin_function_names


@dataclass
class LevelTypes:
    """
    Result of level-type inference.

    Keys are level nodes: plain names for top-level variables, `f.x` for the
    parameters and locals of function `f`, and `f.<return>` for its return
    expression.
    """
    levels: Dict[str, Level] = field(default_factory=dict)
    assigned: Dict[str, bool] = field(default_factory=dict)
    bounds: Dict[str, NodeBounds] = field(default_factory=dict)
    signatures: Dict[str, FunctionSignature] = field(default_factory=dict)
    top_env: Optional[TypeEnvironment] = None
    func_envs: Dict[str, TypeEnvironment] = field(default_factory=dict)

    def level_of(self, name: str, scope: Optional[str] = None) -> Level:
        return self.levels[level_node(scope, name)]


@dataclass
class LevelTypeChecker:
    """Level-type inference for a SlicStan program.

    Generates one constraint graph for the whole program:

      - external data is pinned to Data
      - an unassigned, non-data variable is at least Model
      - every assignment or initializer makes the target at least as high
        as everything its value reads
      - every sample statement keeps its target and everything its arguments
        read at most Model

    Function bodies are checked once per definition. Their parameters and
    locals are single level variables shared by every call site, and each
    call site's arguments flow into the shared parameters.
    """
    program: Program
    context: CompilationContext = field(default_factory=CompilationContext.default)

    def __post_init__(self) -> None:
        self.graph = ConstraintGraph()
        self.signatures = SignatureResolver(
            self.program, builtin_function_names(self.context.extra_builtins)
        )

        # Per-scope state (set in _check_scope)
        self._env: Optional[TypeEnvironment] = None
        self._declared: Set[str] = set()

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def check(self) -> LevelTypes:
        funcs = self.signatures.resolve()
        top_env, func_envs = TypeEnvResolver(self.program).resolve()

        for env in [top_env, *func_envs.values()]:
            self._declare_nodes(env)
        for func in funcs.values():
            self.graph.add_node(level_node(func.name, RETURN_SLOT), func.ret)

        for func in funcs.values():
            self._check_function(func, func_envs[func.name])
        self._check_scope(self.program.stmts, top_env)

        log_debug(
            self.context,
            f"Level constraints: {len(self.graph.nodes)} node(s), {len(self.graph.constraints)} constraint(s)",
        )
        solution = LevelSolver(self.graph).solve()

        violated = solution.violations(self.graph)
        if violated:
            raise InternalCompilerError(
                f"[ICE-0010] level solution violates {len(violated)} constraint(s), first: {violated[0]!r}",
                ICELocation(violated[0].lhs, None),
            )

        assigned: Dict[str, bool] = {}
        for env in [top_env, *func_envs.values()]:
            for info in env:
                assigned[info.node_id] = info.assigned

        return LevelTypes(
            levels=solution.levels,
            assigned=assigned,
            bounds=solution.bounds,
            signatures=self.signatures.build_signatures(solution.levels, func_envs),
            top_env=top_env,
            func_envs=func_envs,
        )

    # ------------------------------------------------------------------
    # Declarations (rules 1 and 2)
    # ------------------------------------------------------------------

    def _declare_nodes(self, env: TypeEnvironment) -> None:
        for info in env:
            self.graph.add_node(info.node_id, info.decl)
            if info.is_data:
                self.graph.pin(info.node_id, Level.DATA, info.decl)
            elif not info.assigned:
                self.graph.at_least(info.node_id, Level.MODEL, info.decl)

    # ------------------------------------------------------------------
    # Function / block / statement traversal
    # ------------------------------------------------------------------

    def _check_function(self, func: FuncDecl, env: TypeEnvironment) -> None:
        self._check_scope(func.body.stmts, env)
        ret_node = level_node(func.name, RETURN_SLOT)
        for src in self._expr_sources(func.ret):
            self.graph.flows(src, ret_node, func.ret)
        self._env = None

    def _check_scope(self, stmts: Tuple[Stmt, ...], env: TypeEnvironment) -> None:
        self._env = env
        self._declared = {info.name for info in env if info.kind is VarKind.PARAM}
        for stmt in stmts:
            self._check_stmt(stmt)

    def _check_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, Block):
            for inner in stmt.stmts:
                self._check_stmt(inner)
            return

        if isinstance(stmt, DeclStmt):
            target = self._env.lookup(stmt.name).node_id
            if stmt.value is not None:
                for src in self._expr_sources(stmt.value):
                    self.graph.flows(src, target, stmt)
            self._declared.add(stmt.name)
            return

        if isinstance(stmt, AssignStmt):
            target = self._lookup(stmt.target, stmt)
            for src in self._expr_sources(stmt.value):
                self.graph.flows(src, target, stmt)
            return

        if isinstance(stmt, SampleStmt):
            target = self._lookup(stmt.target, stmt)
            self.graph.at_most(target, Level.MODEL, stmt)
            for arg in stmt.args:
                for src in self._expr_sources(arg):
                    self.graph.at_most(src, Level.MODEL, stmt)
            return

        raise InternalCompilerError(
            f"[ICE-0011] unexpected statement {type(stmt).__name__} in statement list",
            ICELocation(getattr(stmt, "name", None), stmt.span),
        )

    def _lookup(self, name: str, node) -> str:
        info = self._env.lookup(name)
        if info is None or name not in self._declared:
            where = f" in function '{self._env.scope}'" if self._env.scope is not None else ""
            raise_error(
                ErrorKind.UNDEFINED_VARIABLE,
                f"[LVL-0010] use of undeclared variable '{name}'{where}",
                node=node,
                name=name,
                details={"scope": self._env.scope},
            )
        return info.node_id

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _expr_sources(self, expr: Expr) -> List[str]:
        """Level nodes read by `expr`, in evaluation order, without duplicates."""
        out: List[str] = []
        self._collect_sources(expr, out)
        return list(dict.fromkeys(out))

    def _collect_sources(self, expr: Expr, out: List[str]) -> None:
        if isinstance(expr, (IntLiteral, RealLiteral)):
            return

        if isinstance(expr, VarRef):
            out.append(self._lookup(expr.name, expr))
            return

        if isinstance(expr, UnaryOp):
            self._collect_sources(expr.operand, out)
            return

        if isinstance(expr, BinaryOp):
            self._collect_sources(expr.left, out)
            self._collect_sources(expr.right, out)
            return

        if isinstance(expr, IndexExpr):
            self._collect_sources(expr.array, out)
            self._collect_sources(expr.index, out)
            return

        if isinstance(expr, CallExpr):
            callee = self.signatures.resolve_callee(expr)
            if callee.kind is CalleeKind.BUILTIN:
                for arg in expr.args:
                    self._collect_sources(arg, out)
                return
            # Arguments raise the callee's shared parameters; the call itself
            # reads the callee's return slot.
            for param, arg in zip(callee.func.params, expr.args):
                param_node = level_node(callee.name, param.name)
                for src in self._expr_sources(arg):
                    self.graph.flows(src, param_node, expr)
            out.append(level_node(callee.name, RETURN_SLOT))
            return

        raise InternalCompilerError(
            f"[ICE-0012] unexpected expression {type(expr).__name__}",
            ICELocation(None, expr.span),
        )
