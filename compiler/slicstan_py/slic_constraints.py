"""
Level constraint graph and solver.

Nodes are level variables (see slic_env.level_node); edges are inequalities
`level(a) <= level(b)` under the correctness order. Constant bounds hang off
single nodes. Solving propagates lower bounds forward and upper bounds
backward to a fixpoint, rejects any node whose bounds cross, and only then
picks, per node, the feasible level that is cheapest in the performance order.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from slic_ast import Node
from slic_diagnostics import ErrorKind, raise_error
from slic_levels import CORRECTNESS_ORDER, PERFORMANCE_ORDER, Level, LevelOrder


class ConstraintKind(Enum):
    FLOWS = "flows"        # level(lhs) <= level(rhs)
    AT_LEAST = "at_least"  # level(lhs) >= level
    AT_MOST = "at_most"    # level(lhs) <= level


@dataclass(frozen=True)
class Constraint:
    kind: ConstraintKind
    lhs: str
    rhs: Optional[str] = None
    level: Optional[Level] = None
    order: LevelOrder = field(default=CORRECTNESS_ORDER, repr=False)
    origin: Optional[Node] = field(default=None, repr=False, compare=False)

    def holds(self, levels: Dict[str, Level]) -> bool:
        if self.kind is ConstraintKind.FLOWS:
            return self.order.leq(levels[self.lhs], levels[self.rhs])
        if self.kind is ConstraintKind.AT_LEAST:
            return self.order.leq(self.level, levels[self.lhs])
        return self.order.leq(levels[self.lhs], self.level)


@dataclass
class NodeBounds:
    lower: Level
    upper: Level
    # Node whose constant bound produced this bound (None = lattice bottom/top)
    lower_origin: Optional[str] = None
    upper_origin: Optional[str] = None


class ConstraintGraph:
    """
    A fresh constraint set for one compilation.

    Nodes keep insertion order, which fixes the order of propagation and of
    error reporting.
    """

    def __init__(self) -> None:
        self.nodes: Dict[str, Optional[Node]] = {}
        self.constraints: List[Constraint] = []
        self._succ: Dict[str, List[str]] = {}
        self._pred: Dict[str, List[str]] = {}

    def add_node(self, node_id: str, anchor: Optional[Node] = None) -> None:
        if node_id not in self.nodes:
            self.nodes[node_id] = anchor
            self._succ[node_id] = []
            self._pred[node_id] = []
        elif self.nodes[node_id] is None and anchor is not None:
            self.nodes[node_id] = anchor

    def flows(self, src: str, dst: str, origin: Optional[Node] = None) -> None:
        """level(src) <= level(dst)"""
        self.add_node(src)
        self.add_node(dst)
        if src == dst:
            return
        self.constraints.append(Constraint(ConstraintKind.FLOWS, src, dst, origin=origin))
        if dst not in self._succ[src]:
            self._succ[src].append(dst)
            self._pred[dst].append(src)

    def at_least(self, node_id: str, level: Level, origin: Optional[Node] = None) -> None:
        self.add_node(node_id)
        self.constraints.append(Constraint(ConstraintKind.AT_LEAST, node_id, level=level, origin=origin))

    def at_most(self, node_id: str, level: Level, origin: Optional[Node] = None) -> None:
        self.add_node(node_id)
        self.constraints.append(Constraint(ConstraintKind.AT_MOST, node_id, level=level, origin=origin))

    def pin(self, node_id: str, level: Level, origin: Optional[Node] = None) -> None:
        self.at_least(node_id, level, origin)
        self.at_most(node_id, level, origin)

    def successors(self, node_id: str) -> List[str]:
        return self._succ[node_id]

    def predecessors(self, node_id: str) -> List[str]:
        return self._pred[node_id]


@dataclass
class Solution:
    levels: Dict[str, Level]
    bounds: Dict[str, NodeBounds]

    def violations(self, graph: ConstraintGraph) -> List[Constraint]:
        return [c for c in graph.constraints if not c.holds(self.levels)]


class LevelSolver:
    """
    Solves a ConstraintGraph.

    Usage:

        solution = LevelSolver(graph).solve()

    Raises CompileError (InconsistentLevelConstraints) when some node's lower
    bound exceeds its upper bound after propagation.
    """

    def __init__(
            self,
            graph: ConstraintGraph,
            order: LevelOrder = CORRECTNESS_ORDER,
            preference: LevelOrder = PERFORMANCE_ORDER,
    ) -> None:
        self.graph = graph
        self.order = order
        self.preference = preference
        self.bounds: Dict[str, NodeBounds] = {}

    def solve(self) -> Solution:
        self._seed_bounds()
        self._propagate_lower()
        self._propagate_upper()
        self._check_consistency()

        # Tie-break only once every bound has reached its fixpoint.
        levels: Dict[str, Level] = {}
        for node_id, b in self.bounds.items():
            feasible = self.order.between(b.lower, b.upper)
            levels[node_id] = self.preference.meet(feasible)
        return Solution(levels=levels, bounds=self.bounds)

    # --- internal helpers ---

    def _seed_bounds(self) -> None:
        for node_id in self.graph.nodes:
            self.bounds[node_id] = NodeBounds(lower=self.order.bottom, upper=self.order.top)

        for c in self.graph.constraints:
            b = self.bounds[c.lhs]
            if c.kind is ConstraintKind.AT_LEAST and self.order.lt(b.lower, c.level):
                b.lower = c.level
                b.lower_origin = c.lhs
            elif c.kind is ConstraintKind.AT_MOST and self.order.lt(c.level, b.upper):
                b.upper = c.level
                b.upper_origin = c.lhs

    def _propagate_lower(self) -> None:
        work = deque(self.graph.nodes)
        while work:
            node_id = work.popleft()
            src = self.bounds[node_id]
            for succ in self.graph.successors(node_id):
                dst = self.bounds[succ]
                if self.order.lt(dst.lower, src.lower):
                    dst.lower = src.lower
                    dst.lower_origin = src.lower_origin
                    work.append(succ)

    def _propagate_upper(self) -> None:
        work = deque(self.graph.nodes)
        while work:
            node_id = work.popleft()
            dst = self.bounds[node_id]
            for pred in self.graph.predecessors(node_id):
                src = self.bounds[pred]
                if self.order.lt(dst.upper, src.upper):
                    src.upper = dst.upper
                    src.upper_origin = dst.upper_origin
                    work.append(pred)

    def _check_consistency(self) -> None:
        for node_id, b in self.bounds.items():
            if self.order.leq(b.lower, b.upper):
                continue
            lower_from = f" (from '{b.lower_origin}')" if b.lower_origin else ""
            upper_from = f" (from '{b.upper_origin}')" if b.upper_origin else ""
            raise_error(
                ErrorKind.INCONSISTENT_LEVEL_CONSTRAINTS,
                f"[LVL-0050] level of '{node_id}' must be at least {b.lower}{lower_from} "
                f"and at most {b.upper}{upper_from}",
                node=self.graph.nodes.get(node_id),
                name=node_id,
                details={
                    "lower": b.lower,
                    "upper": b.upper,
                    "lower_origin": b.lower_origin,
                    "upper_origin": b.upper_origin,
                },
            )
