#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from slic_ast import (
    Program, Stmt, Block, DeclStmt, AssignStmt, SampleStmt, FuncDecl,
    Expr, IntLiteral, RealLiteral, VarRef, UnaryOp, BinaryOp, IndexExpr, CallExpr, iter_stmts,
)
from slic_context import CompilationContext
from slic_diagnostics import CompileError, Diagnostic, ErrorKind, diag_from_node, raise_error
from slic_env import VarKind, level_node
from slic_internal_error import ICELocation, InternalCompilerError
from slic_level_types import LevelTypeChecker, LevelTypes
from slic_levels import PERFORMANCE_ORDER, Level, format_level
from slic_logger import log_debug
from slic_names import NameAllocator, program_names


@dataclass
class ElaboratedProgram:
    """
    A program with every user-defined call inlined.

    `origins` maps each fresh name to the level node of the callee parameter
    or local it was copied from (e.g. `r_2` -> `f.r`).
    """
    stmts: Tuple[Stmt, ...]
    origins: Dict[str, str] = field(default_factory=dict)
    inlined_calls: int = 0

    def as_program(self) -> Program:
        return Program(funcs=(), stmts=self.stmts)


class Elaborator:
    """
    Statically inlines every call to a user-defined function.

    For a call `f(a1, ..., an)`:

      1. the arguments are elaborated first, left to right (nested calls are
         expanded depth-first);
      2. every parameter and local of `f` gets a fresh name for this call site;
      3. each parameter is bound by a declaration `p_n = ai` placed before the
         body;
      4. the renamed, elaborated body is spliced in at the call site;
      5. the call is replaced by the renamed, elaborated return expression.

    Calls to Stan built-ins are kept as they are.
    """

    def __init__(
            self,
            program: Program,
            funcs: Mapping[str, FuncDecl],
            context: Optional[CompilationContext] = None,
            allocator: Optional[NameAllocator] = None,
    ) -> None:
        self.program = program
        self.funcs = funcs
        self.context = context or CompilationContext.default()
        self.allocator = allocator or NameAllocator(program_names(program))
        self.origins: Dict[str, str] = {}
        self._active: List[str] = []
        self._inlined = 0

    # --- public API ---

    def elaborate(self) -> ElaboratedProgram:
        out: List[Stmt] = []
        for stmt in self.program.stmts:
            out.extend(self._elab_stmt(stmt, {}))
        return ElaboratedProgram(stmts=tuple(out), origins=self.origins, inlined_calls=self._inlined)

    # --- statements ---

    def _elab_stmt(self, stmt: Stmt, renaming: Mapping[str, str]) -> List[Stmt]:
        if isinstance(stmt, Block):
            inner: List[Stmt] = []
            for s in stmt.stmts:
                inner.extend(self._elab_stmt(s, renaming))
            return [Block(tuple(inner), span=stmt.span)]

        if isinstance(stmt, DeclStmt):
            prelude: List[Stmt] = []
            value = None
            if stmt.value is not None:
                prelude, value = self._elab_expr(stmt.value, renaming)
            name = renaming.get(stmt.name, stmt.name)
            return prelude + [DeclStmt(stmt.type, name, stmt.is_data, value, span=stmt.span)]

        if isinstance(stmt, AssignStmt):
            prelude, value = self._elab_expr(stmt.value, renaming)
            target = renaming.get(stmt.target, stmt.target)
            return prelude + [AssignStmt(target, value, span=stmt.span)]

        if isinstance(stmt, SampleStmt):
            prelude, args = self._elab_exprs(stmt.args, renaming)
            target = renaming.get(stmt.target, stmt.target)
            return prelude + [SampleStmt(target, stmt.dist, args, span=stmt.span)]

        raise InternalCompilerError(
            f"[ICE-0020] cannot elaborate statement {type(stmt).__name__}",
            ICELocation(getattr(stmt, "name", None), stmt.span),
        )

    # --- expressions ---

    def _elab_exprs(
            self, exprs: Tuple[Expr, ...], renaming: Mapping[str, str]
    ) -> Tuple[List[Stmt], Tuple[Expr, ...]]:
        prelude: List[Stmt] = []
        out: List[Expr] = []
        for expr in exprs:
            pre, e = self._elab_expr(expr, renaming)
            prelude.extend(pre)
            out.append(e)
        return prelude, tuple(out)

    def _elab_expr(self, expr: Expr, renaming: Mapping[str, str]) -> Tuple[List[Stmt], Expr]:
        if isinstance(expr, (IntLiteral, RealLiteral)):
            return [], expr

        if isinstance(expr, VarRef):
            return [], VarRef(renaming.get(expr.name, expr.name), span=expr.span)

        if isinstance(expr, UnaryOp):
            pre, operand = self._elab_expr(expr.operand, renaming)
            return pre, UnaryOp(expr.op, operand, span=expr.span)

        if isinstance(expr, BinaryOp):
            pre, (left, right) = self._elab_exprs((expr.left, expr.right), renaming)
            return pre, BinaryOp(expr.op, left, right, span=expr.span)

        if isinstance(expr, IndexExpr):
            pre, (array, index) = self._elab_exprs((expr.array, expr.index), renaming)
            return pre, IndexExpr(array, index, span=expr.span)

        if isinstance(expr, CallExpr):
            pre, args = self._elab_exprs(expr.args, renaming)
            func = self.funcs.get(expr.callee)
            if func is None:
                return pre, CallExpr(expr.callee, args, span=expr.span)
            body, result = self._inline(func, args, expr)
            return pre + body, result

        raise InternalCompilerError(
            f"[ICE-0021] cannot elaborate expression {type(expr).__name__}",
            ICELocation(None, expr.span),
        )

    # --- inlining ---

    def _inline(self, func: FuncDecl, args: Tuple[Expr, ...], call: CallExpr) -> Tuple[List[Stmt], Expr]:
        if func.name in self._active:
            chain = self._active[self._active.index(func.name):] + [func.name]
            raise_error(
                ErrorKind.NON_TERMINATING_ELABORATION,
                f"[ELB-0010] recursive call chain {' -> '.join(chain)} cannot be unrolled statically",
                node=call,
                name=func.name,
                details={"call_chain": tuple(chain)},
            )
        if len(self._active) >= self.context.max_inline_depth:
            chain = self._active + [func.name]
            raise_error(
                ErrorKind.NON_TERMINATING_ELABORATION,
                f"[ELB-0020] inlining '{func.name}' exceeds the maximum depth of "
                f"{self.context.max_inline_depth} nested call(s)",
                node=call,
                name=func.name,
                details={"call_chain": tuple(chain), "max_depth": self.context.max_inline_depth},
            )

        locals_ = [s.name for s in iter_stmts(func.body.stmts) if isinstance(s, DeclStmt)]
        renaming = self.allocator.allocate([p.name for p in func.params] + locals_)
        for base, fresh in renaming.items():
            self.origins[fresh] = level_node(func.name, base)
        self._inlined += 1
        log_debug(self.context, f"Inlining call to '{func.name}' as suffix _{self.allocator.counter}")

        out: List[Stmt] = [
            DeclStmt(param.type, renaming[param.name], False, arg, span=call.span)
            for param, arg in zip(func.params, args)
        ]
        self._active.append(func.name)
        try:
            for stmt in iter_stmts(func.body.stmts):
                out.extend(self._elab_stmt(stmt, renaming))
            prelude, result = self._elab_expr(func.ret, renaming)
        finally:
            self._active.pop()
        out.extend(prelude)
        return out, result


def thread_levels(level_types: LevelTypes, elaborated: ElaboratedProgram) -> Dict[str, Level]:
    """
    Level of every variable declared in the elaborated program.

    Inlined names take the level of the callee variable they were copied
    from, so all call sites of a function share one level per parameter and
    local. Other names keep their own level.
    """
    levels: Dict[str, Level] = {}
    for stmt in iter_stmts(elaborated.stmts):
        if not isinstance(stmt, DeclStmt):
            continue
        node_id = elaborated.origins.get(stmt.name, stmt.name)
        level = level_types.levels.get(node_id)
        if level is None:
            raise InternalCompilerError(
                f"[ICE-0022] no level inferred for '{node_id}'",
                ICELocation(stmt.name, stmt.span),
            )
        levels[stmt.name] = level
    return levels


def solve_elaborated(elaborated: ElaboratedProgram, context: CompilationContext) -> LevelTypes:
    """Level inference on the elaborated program, one level per inlined copy."""
    try:
        return LevelTypeChecker(elaborated.as_program(), context).check()
    except CompileError as e:
        # Threaded levels already satisfy every constraint of the elaborated program.
        raise InternalCompilerError(
            f"[ICE-0023] elaborated program fails level inference: {e.diagnostic.message}",
            ICELocation(e.diagnostic.name, None),
        ) from e


def find_level_promotions(
        level_types: LevelTypes,
        elaborated: ElaboratedProgram,
        threaded: Mapping[str, Level],
        resolved: LevelTypes,
) -> List[Diagnostic]:
    """
    Warn about function variables whose shared level costs some call site.

    An inlined copy is promoted when `resolved` (its call site solved on its
    own, see solve_elaborated) places it earlier in the performance order
    than the shared level it was threaded with. There is one warning per
    function variable, listing its promoted copies. A function with one
    call site is reported only through a shared callee.
    """
    promoted: Dict[str, Dict[str, Level]] = {}
    for stmt in iter_stmts(elaborated.stmts):
        if not isinstance(stmt, DeclStmt) or stmt.name not in elaborated.origins:
            continue
        alone = resolved.levels[stmt.name]
        if PERFORMANCE_ORDER.lt(alone, threaded[stmt.name]):
            promoted.setdefault(elaborated.origins[stmt.name], {})[stmt.name] = alone

    diagnostics: List[Diagnostic] = []
    for node_id, copies in promoted.items():
        func_name, _, base = node_id.partition(".")
        info = level_types.func_envs[func_name].lookup(base)
        shared = level_types.levels[node_id]
        what = "parameter" if info.kind is VarKind.PARAM else "local"
        sites = ", ".join(f"'{name}' needs only {format_level(level)}" for name, level in copies.items())
        diagnostics.append(
            diag_from_node(
                "warning",
                f"[LVL-0100] {what} '{base}' of function '{func_name}' is {format_level(shared)} "
                f"at every call site, but solved alone {sites}",
                node=info.decl,
                error_kind=ErrorKind.LEVEL_PROMOTION,
                name=node_id,
                details={"function": func_name, "shared": shared, "call_sites": copies},
            )
        )
    return diagnostics
