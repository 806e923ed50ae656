#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import is_dataclass, fields
from typing import List, Any

from slic_ast import (
    Span, Node, Program, Stmt, Block, DeclStmt, AssignStmt, SampleStmt, FuncDecl,
    Expr, IntLiteral, RealLiteral, VarRef, UnaryOp, BinaryOp, IndexExpr, CallExpr,
)


def _format_span(span: Span | None) -> str:
    if span is None:
        return ""
    return f" @{span.start_line}:{span.start_column}-{span.end_line}:{span.end_column}"


def format_node(node: Any, indent: int = 0) -> List[str]:
    """
    Generic, reflection-based AST pretty-printer.

    - Shows the node class name.
    - Prints simple scalar fields inline (excluding `span`).
    - Recursively prints child Node / tuple-of-Node fields on new indented lines.
    - Appends a concise span annotation like `@1:1-7:1` when available.
    """
    ind = "  " * indent

    # Sequences: print each element at same indentation
    if isinstance(node, (list, tuple)):
        lines: List[str] = []
        for elem in node:
            lines.extend(format_node(elem, indent))
        return lines

    # AST nodes (dataclasses derived from Node)
    if isinstance(node, Node) and is_dataclass(node):
        span = node.span
        # Split fields into "simple scalars" vs "children"
        data_fields = [f for f in fields(node) if f.name != "span"]
        simple_parts = []
        child_fields = []

        for f in data_fields:
            value = getattr(node, f.name)
            if isinstance(value, (Node, list, tuple)):
                child_fields.append((f.name, value))
            else:
                simple_parts.append((f.name, value))

        # Header: ClassName(field1=..., field2=...) @line:col-line:col
        header = node.__class__.__name__
        if simple_parts:
            inner = ", ".join(f"{name}={value!r}" for name, value in simple_parts if value is not None)
            header = f"{header}({inner})"
        header += _format_span(span)

        lines: List[str] = [ind + header]

        # Child fields on separate indented lines
        for name, value in child_fields:
            if isinstance(value, (list, tuple)):
                if not value:
                    continue
                lines.append(ind + "  " + f"{name}:")
                for elem in value:
                    lines.extend(format_node(elem, indent + 2))
            else:
                lines.append(ind + "  " + f"{name}:")
                lines.extend(format_node(value, indent + 2))

        return lines

    # Fallback for unexpected values
    return [ind + repr(node)]


def format_program(program: Program) -> str:
    """
    Convenience: pretty-print a whole Program as a string.
    """
    return "\n".join(format_node(program, indent=0))


# --- compact surface syntax, one statement per line ---

_PRECEDENCE = {
    "||": 1, "&&": 2,
    "==": 3, "!=": 3, "<": 4, "<=": 4, ">": 4, ">=": 4,
    "+": 5, "-": 5,
    "*": 6, "/": 6, "%": 6,
    "^": 8,
}


def format_expr(expr: Expr, parent_prec: int = 0) -> str:
    if isinstance(expr, IntLiteral):
        return str(expr.value)
    if isinstance(expr, RealLiteral):
        return repr(float(expr.value))
    if isinstance(expr, VarRef):
        return expr.name
    if isinstance(expr, UnaryOp):
        return f"{expr.op}{format_expr(expr.operand, 7)}"
    if isinstance(expr, BinaryOp):
        prec = _PRECEDENCE.get(expr.op, 5)
        text = f"{format_expr(expr.left, prec)} {expr.op} {format_expr(expr.right, prec + 1)}"
        return f"({text})" if prec < parent_prec else text
    if isinstance(expr, IndexExpr):
        return f"{format_expr(expr.array, 9)}[{format_expr(expr.index)}]"
    if isinstance(expr, CallExpr):
        return f"{expr.callee}({', '.join(format_expr(a) for a in expr.args)})"
    return repr(expr)


def format_stmt(stmt: Stmt, indent: int = 0) -> List[str]:
    ind = "  " * indent
    if isinstance(stmt, DeclStmt):
        prefix = "data " if stmt.is_data else ""
        init = f" = {format_expr(stmt.value)}" if stmt.value is not None else ""
        return [f"{ind}{prefix}{stmt.type.name} {stmt.name}{init};"]
    if isinstance(stmt, AssignStmt):
        return [f"{ind}{stmt.target} = {format_expr(stmt.value)};"]
    if isinstance(stmt, SampleStmt):
        return [f"{ind}{stmt.target} ~ {stmt.dist}({', '.join(format_expr(a) for a in stmt.args)});"]
    if isinstance(stmt, Block):
        lines = [f"{ind}{{"]
        for inner in stmt.stmts:
            lines.extend(format_stmt(inner, indent + 1))
        lines.append(f"{ind}}}")
        return lines
    if isinstance(stmt, FuncDecl):
        params = ", ".join(f"{p.type.name} {p.name}" for p in stmt.params)
        lines = [f"{ind}def {stmt.name}({params}) {{"]
        for inner in stmt.body.stmts:
            lines.extend(format_stmt(inner, indent + 1))
        lines.append(f"{ind}  return {format_expr(stmt.ret)};")
        lines.append(f"{ind}}}")
        return lines
    return [ind + repr(stmt)]
