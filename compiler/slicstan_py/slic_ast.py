#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from typing import Optional, Tuple


# ==========================
# AST definitions
# ==========================


@dataclass(frozen=True)
class Span:
    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass(frozen=True)
class Node:
    span: Optional[Span] = field(default=None, repr=False, compare=False, kw_only=True)


# --- types ---

@dataclass(frozen=True)
class TypeRef(Node):
    name: str  # e.g. "real", "int", "vector[N]"


# --- expressions ---

class Expr(Node):
    pass


@dataclass(frozen=True)
class IntLiteral(Expr):
    value: int


@dataclass(frozen=True)
class RealLiteral(Expr):
    value: float


@dataclass(frozen=True)
class VarRef(Expr):
    name: str


@dataclass(frozen=True)
class UnaryOp(Expr):
    op: str
    operand: Expr


@dataclass(frozen=True)
class BinaryOp(Expr):
    op: str
    left: Expr
    right: Expr


@dataclass(frozen=True)
class IndexExpr(Expr):
    array: Expr
    index: Expr


@dataclass(frozen=True)
class CallExpr(Expr):
    callee: str
    args: Tuple[Expr, ...]


# --- statements ---

class Stmt(Node):
    pass


@dataclass(frozen=True)
class Block(Stmt):
    stmts: Tuple[Stmt, ...]


@dataclass(frozen=True)
class DeclStmt(Stmt):
    type: TypeRef
    name: str
    is_data: bool = False
    value: Optional[Expr] = None


@dataclass(frozen=True)
class AssignStmt(Stmt):
    target: str
    value: Expr


@dataclass(frozen=True)
class SampleStmt(Stmt):
    target: str
    dist: str
    args: Tuple[Expr, ...]


# --- declarations ---

@dataclass(frozen=True)
class Param(Node):
    type: TypeRef
    name: str


@dataclass(frozen=True)
class FuncDecl(Stmt):
    name: str
    params: Tuple[Param, ...]
    body: Block
    ret: Expr


@dataclass(frozen=True)
class Program(Node):
    funcs: Tuple[FuncDecl, ...]
    stmts: Tuple[Stmt, ...]


# --- traversal helpers ---

def iter_stmts(stmts):
    """Yield statements in source order, descending into nested blocks."""
    for stmt in stmts:
        if isinstance(stmt, Block):
            yield from iter_stmts(stmt.stmts)
        else:
            yield stmt


def iter_calls(expr: Expr):
    """Yield every call expression in `expr`, in evaluation order (arguments first)."""
    if isinstance(expr, CallExpr):
        for arg in expr.args:
            yield from iter_calls(arg)
        yield expr
    elif isinstance(expr, UnaryOp):
        yield from iter_calls(expr.operand)
    elif isinstance(expr, BinaryOp):
        yield from iter_calls(expr.left)
        yield from iter_calls(expr.right)
    elif isinstance(expr, IndexExpr):
        yield from iter_calls(expr.array)
        yield from iter_calls(expr.index)


def stmt_exprs(stmt: Stmt) -> Tuple[Expr, ...]:
    """Expressions directly owned by a non-block statement, in evaluation order."""
    if isinstance(stmt, DeclStmt):
        return (stmt.value,) if stmt.value is not None else ()
    if isinstance(stmt, AssignStmt):
        return (stmt.value,)
    if isinstance(stmt, SampleStmt):
        return stmt.args
    return ()
