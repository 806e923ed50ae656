#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, Optional, Tuple

from slic_ast import Node, TypeRef, FuncDecl, Program, Stmt, DeclStmt, AssignStmt, iter_stmts
from slic_diagnostics import ErrorKind, raise_error

RETURN_SLOT = "<return>"


def level_node(scope: Optional[str], name: str) -> str:
    """
    Key of the level variable for `name` declared in `scope`.

    Top-level variables use their own name; function parameters and locals
    are qualified by the function name, so every call site of a function
    shares them.
    """
    if scope is None:
        return name
    return f"{scope}.{name}"


class VarKind(Enum):
    GLOBAL = auto()
    PARAM = auto()
    LOCAL = auto()


@dataclass
class VarInfo:
    """
    A single variable binding: top-level declaration, function parameter or
    function local.
    """
    name: str
    kind: VarKind
    type_ref: TypeRef
    is_data: bool
    assigned: bool
    decl: Node  # DeclStmt | Param
    node_id: str


@dataclass
class TypeEnvironment:
    """
    Variable table for one scope: the top-level program (scope=None) or a
    single function body. Nested blocks do not open scopes.
    """
    scope: Optional[str]
    vars: Dict[str, VarInfo] = field(default_factory=dict)

    def lookup(self, name: str) -> Optional[VarInfo]:
        return self.vars.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.vars

    def __iter__(self) -> Iterator[VarInfo]:
        return iter(self.vars.values())


class TypeEnvResolver:
    """
    Builds type environments for the top-level statements and for every
    function body in isolation.

    Public API:

        resolver = TypeEnvResolver(program)
        top_env, func_envs = resolver.resolve()

    The assigned-anywhere flag of a variable is true when it has an
    initializer or is the target of an assignment anywhere in its scope.
    Parameters are always assigned: every call site binds them.
    """

    def __init__(self, program: Program) -> None:
        self.program = program

    # --- public API ---

    def resolve(self) -> Tuple[TypeEnvironment, Dict[str, TypeEnvironment]]:
        top_env = self._build_env(None, self.program.stmts)
        func_envs: Dict[str, TypeEnvironment] = {}
        for func in self.program.funcs:
            func_envs[func.name] = self._build_function_env(func)
        return top_env, func_envs

    # --- internal helpers ---

    def _build_function_env(self, func: FuncDecl) -> TypeEnvironment:
        env = TypeEnvironment(scope=func.name)
        for param in func.params:
            if param.name in env:
                raise_error(
                    ErrorKind.REDECLARATION,
                    f"[LVL-0040] duplicate parameter '{param.name}' in function '{func.name}'",
                    node=param,
                    name=param.name,
                    details={"function": func.name},
                )
            env.vars[param.name] = VarInfo(
                name=param.name,
                kind=VarKind.PARAM,
                type_ref=param.type,
                is_data=False,
                assigned=True,
                decl=param,
                node_id=level_node(func.name, param.name),
            )
        return self._build_env(func.name, func.body.stmts, env)

    def _build_env(
            self,
            scope: Optional[str],
            stmts: Tuple[Stmt, ...],
            env: Optional[TypeEnvironment] = None,
    ) -> TypeEnvironment:
        if env is None:
            env = TypeEnvironment(scope=scope)
        kind = VarKind.GLOBAL if scope is None else VarKind.LOCAL

        assigned = set()
        for stmt in iter_stmts(stmts):
            if isinstance(stmt, FuncDecl):
                where = f"the body of function '{scope}'" if scope is not None else "the program statements"
                raise_error(
                    ErrorKind.NESTED_FUNCTION_DEFINITION,
                    f"[LVL-0060] function '{stmt.name}' is defined in {where}; "
                    f"functions are defined only before the program statements",
                    node=stmt,
                    name=stmt.name,
                    details={"scope": scope},
                )
            if isinstance(stmt, AssignStmt):
                assigned.add(stmt.target)

        for stmt in iter_stmts(stmts):
            if not isinstance(stmt, DeclStmt):
                continue
            if stmt.name in env:
                where = f"function '{scope}'" if scope is not None else "program"
                raise_error(
                    ErrorKind.REDECLARATION,
                    f"[LVL-0040] variable '{stmt.name}' already declared in {where}",
                    node=stmt,
                    name=stmt.name,
                    details={"scope": scope},
                )
            env.vars[stmt.name] = VarInfo(
                name=stmt.name,
                kind=kind,
                type_ref=stmt.type,
                is_data=stmt.is_data,
                assigned=stmt.value is not None or stmt.name in assigned,
                decl=stmt,
                node_id=level_node(scope, stmt.name),
            )
        return env
