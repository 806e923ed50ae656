#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from typing import Dict, Iterable, Set

from slic_ast import (
    Program, Stmt, Expr, Block, DeclStmt, AssignStmt, SampleStmt, FuncDecl,
    VarRef, UnaryOp, BinaryOp, IndexExpr, CallExpr,
)


class NameAllocator:
    """
    Fresh, deterministic names for one compilation.

    Every inlined call site takes the next counter value `n` and renames each
    callee variable `x` to `x_n`. A counter value is skipped when any of the
    candidate names is already used by the program or was issued before, so
    fresh names never capture or shadow anything.

    Owned by a single compile call; never share an instance.
    """

    def __init__(self, reserved: Iterable[str] = ()) -> None:
        self._taken: Set[str] = set(reserved)
        self._counter = 0

    @property
    def counter(self) -> int:
        return self._counter

    def allocate(self, bases: Iterable[str]) -> Dict[str, str]:
        bases = list(dict.fromkeys(bases))
        n = self._counter
        while True:
            n += 1
            candidates = {base: f"{base}_{n}" for base in bases}
            if not any(name in self._taken for name in candidates.values()):
                break
        self._counter = n
        self._taken.update(candidates.values())
        return candidates


def program_names(program: Program) -> Set[str]:
    """Every variable and function name mentioned anywhere in `program`."""
    names: Set[str] = set()
    for func in program.funcs:
        names.add(func.name)
        names.update(p.name for p in func.params)
        _stmt_names(func.body, names)
        _expr_names(func.ret, names)
    for stmt in program.stmts:
        _stmt_names(stmt, names)
    return names


def _stmt_names(stmt: Stmt, names: Set[str]) -> None:
    if isinstance(stmt, Block):
        for inner in stmt.stmts:
            _stmt_names(inner, names)
    elif isinstance(stmt, DeclStmt):
        names.add(stmt.name)
        if stmt.value is not None:
            _expr_names(stmt.value, names)
    elif isinstance(stmt, AssignStmt):
        names.add(stmt.target)
        _expr_names(stmt.value, names)
    elif isinstance(stmt, SampleStmt):
        names.add(stmt.target)
        for arg in stmt.args:
            _expr_names(arg, names)
    elif isinstance(stmt, FuncDecl):
        names.add(stmt.name)


def _expr_names(expr: Expr, names: Set[str]) -> None:
    if isinstance(expr, VarRef):
        names.add(expr.name)
    elif isinstance(expr, UnaryOp):
        _expr_names(expr.operand, names)
    elif isinstance(expr, BinaryOp):
        _expr_names(expr.left, names)
        _expr_names(expr.right, names)
    elif isinstance(expr, IndexExpr):
        _expr_names(expr.array, names)
        _expr_names(expr.index, names)
    elif isinstance(expr, CallExpr):
        names.add(expr.callee)
        for arg in expr.args:
            _expr_names(arg, names)
