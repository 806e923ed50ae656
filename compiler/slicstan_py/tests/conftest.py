#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from slic_ast import (
    Program, Block, DeclStmt, AssignStmt, SampleStmt, FuncDecl, Param, TypeRef,
    IntLiteral, RealLiteral, VarRef, UnaryOp, BinaryOp, IndexExpr, CallExpr, iter_stmts,
)
from slic_context import CompilationContext, LogLevel
from slic_driver import SlicDriver


# ============================================================================
# AST builders: the parser is not part of the core, so tests build trees.
# ============================================================================


def lit(value):
    if isinstance(value, float):
        return RealLiteral(value)
    return IntLiteral(value)


def ex(value):
    """Coerce str -> VarRef, number -> literal; pass expressions through."""
    if isinstance(value, str):
        return VarRef(value)
    if isinstance(value, (int, float)):
        return lit(value)
    return value


def var(name: str) -> VarRef:
    return VarRef(name)


def binop(op: str, left, right) -> BinaryOp:
    return BinaryOp(op, ex(left), ex(right))


def add(left, right) -> BinaryOp:
    return binop("+", left, right)


def mul(left, right) -> BinaryOp:
    return binop("*", left, right)


def div(left, right) -> BinaryOp:
    return binop("/", left, right)


def neg(operand) -> UnaryOp:
    return UnaryOp("-", ex(operand))


def index(array, idx) -> IndexExpr:
    return IndexExpr(ex(array), ex(idx))


def call(callee: str, *args) -> CallExpr:
    return CallExpr(callee, tuple(ex(a) for a in args))


def decl(name: str, value=None, *, data: bool = False, type_name: str = "real") -> DeclStmt:
    return DeclStmt(TypeRef(type_name), name, data, ex(value) if value is not None else None)


def data(name: str, type_name: str = "real") -> DeclStmt:
    return decl(name, data=True, type_name=type_name)


def assign(target: str, value) -> AssignStmt:
    return AssignStmt(target, ex(value))


def sample(target: str, dist: str, *args) -> SampleStmt:
    return SampleStmt(target, dist, tuple(ex(a) for a in args))


def block(*stmts) -> Block:
    return Block(tuple(stmts))


def func(name: str, params, body, ret) -> FuncDecl:
    """params: iterable of names (typed real) or (type, name) pairs."""
    ps = []
    for p in params:
        if isinstance(p, str):
            ps.append(Param(TypeRef("real"), p))
        else:
            ps.append(Param(TypeRef(p[0]), p[1]))
    return FuncDecl(name, tuple(ps), Block(tuple(body)), ex(ret))


def program(*stmts, funcs=()) -> Program:
    return Program(tuple(funcs), tuple(stmts))


def declared_names(stmts) -> list:
    return [s.name for s in iter_stmts(stmts) if isinstance(s, DeclStmt)]


def bucket_names(stmts) -> list:
    """Declared name, assignment target or sample target of each statement."""
    out = []
    for s in stmts:
        if isinstance(s, DeclStmt):
            out.append(s.name)
        else:
            out.append(s.target)
    return out


def has_error_code(diagnostics, code: str) -> bool:
    """Check if any diagnostic contains the given error code.

    Args:
        diagnostics: List of Diagnostic objects
        code: Error code string like "LVL-0050" or "[LVL-0050]"

    Returns:
        True if any diagnostic message contains the error code
    """
    if not code.startswith("["):
        code = f"[{code}]"
    return any(code in d.message for d in diagnostics)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def context() -> CompilationContext:
    return CompilationContext(log_level=LogLevel.SILENT)


@pytest.fixture
def compile_program(context):
    """Run the whole core pipeline on a Program.

    Usage:
        def test_something(compile_program):
            result = compile_program(program(data("y"), decl("mu"), sample("y", "normal", "mu", 1)))
            assert not result.has_errors()
    """

    def _compile(prog: Program, ctx: CompilationContext | None = None):
        return SlicDriver(ctx or context).compile(prog)

    return _compile


# Reusable programs from the worked examples ------------------------------


@pytest.fixture
def normal_model() -> Program:
    # data real y; real mu; real sigma; y ~ normal(mu, sigma);
    return program(
        data("y"),
        decl("mu"),
        decl("sigma"),
        sample("y", "normal", "mu", "sigma"),
    )


@pytest.fixture
def variance_model() -> Program:
    # real mu; real sigma; data real y ~ normal(mu, sigma); real variance = sigma*sigma;
    return program(
        decl("mu"),
        decl("sigma"),
        data("y"),
        sample("y", "normal", "mu", "sigma"),
        decl("variance", mul("sigma", "sigma")),
    )


@pytest.fixture
def reparam_model() -> Program:
    # def f(real m, real s) { real r ~ normal(0, 1); return s*r + m; }
    # real y = f(0, 3); real x = f(0, exp(y/2));
    f = func(
        "f",
        ["m", "s"],
        [decl("r"), sample("r", "normal", 0, 1)],
        add(mul("s", "r"), "m"),
    )
    return program(
        decl("y", call("f", 0, 3)),
        decl("x", call("f", 0, call("exp", div("y", 2)))),
        funcs=[f],
    )
