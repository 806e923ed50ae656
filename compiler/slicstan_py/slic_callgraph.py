#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from typing import Dict, List, Mapping

from slic_ast import FuncDecl, iter_calls, iter_stmts, stmt_exprs
from slic_diagnostics import ErrorKind, raise_error


class CallGraph:
    """
    Calls between user functions, in source order.

    Elaboration unrolls every call statically, so the graph must be acyclic:
    any recursion, direct or mutual, has no finite expansion.
    """

    def __init__(self, funcs: Mapping[str, FuncDecl]) -> None:
        self.funcs = funcs
        self.edges: Dict[str, List[str]] = {name: [] for name in funcs}
        for name, func in funcs.items():
            exprs = [e for s in iter_stmts(func.body.stmts) for e in stmt_exprs(s)]
            exprs.append(func.ret)
            for expr in exprs:
                for call in iter_calls(expr):
                    if call.callee in funcs and call.callee not in self.edges[name]:
                        self.edges[name].append(call.callee)

    def check_bounded(self) -> None:
        """Raise NonTerminatingElaboration on the first cycle found."""
        done = set()
        stack: List[str] = []

        def visit(name: str) -> None:
            if name in done:
                return
            if name in stack:
                chain = stack[stack.index(name):] + [name]
                raise_error(
                    ErrorKind.NON_TERMINATING_ELABORATION,
                    f"[ELB-0010] recursive call chain {' -> '.join(chain)} cannot be unrolled statically",
                    node=self.funcs[name],
                    name=name,
                    details={"call_chain": tuple(chain)},
                )
            stack.append(name)
            for callee in self.edges[name]:
                visit(callee)
            stack.pop()
            done.add(name)

        for name in self.funcs:
            visit(name)

    def topological_order(self) -> List[str]:
        """Callees before callers; only meaningful once check_bounded() passed."""
        order: List[str] = []
        seen = set()

        def visit(name: str) -> None:
            if name in seen:
                return
            seen.add(name)
            for callee in self.edges[name]:
                visit(callee)
            order.append(name)

        for name in self.funcs:
            visit(name)
        return order
