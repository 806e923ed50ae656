"""
Tests for the level constraint graph and its solver.
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import random

import pytest

from slic_constraints import ConstraintGraph, LevelSolver
from slic_diagnostics import CompileError, ErrorKind
from slic_levels import CORRECTNESS_ORDER, Level

D, M, G = Level.DATA, Level.MODEL, Level.GENQUANT


def test_unconstrained_node_is_data():
    g = ConstraintGraph()
    g.add_node("x")

    solution = LevelSolver(g).solve()

    assert solution.levels["x"] is D


def test_lower_bound_propagates_forward():
    g = ConstraintGraph()
    g.at_least("a", M)
    g.flows("a", "b")
    g.flows("b", "c")

    solution = LevelSolver(g).solve()

    assert solution.bounds["c"].lower is M
    assert solution.bounds["c"].lower_origin == "a"


def test_upper_bound_propagates_backward():
    g = ConstraintGraph()
    g.flows("a", "b")
    g.flows("b", "c")
    g.at_most("c", M)

    solution = LevelSolver(g).solve()

    assert solution.bounds["a"].upper is M
    assert solution.bounds["a"].upper_origin == "c"


def test_tie_break_prefers_generated_quantities():
    g = ConstraintGraph()
    g.at_least("sigma", M)
    g.at_most("sigma", M)
    g.flows("sigma", "variance")

    solution = LevelSolver(g).solve()

    assert solution.levels["sigma"] is M
    assert solution.levels["variance"] is G


def test_tie_break_runs_after_full_propagation():
    # A greedy per-node choice would put `t` at GenQuantity before seeing the
    # upper bound that arrives through `u`.
    g = ConstraintGraph()
    g.at_least("p", M)
    g.flows("p", "t")
    g.flows("t", "u")
    g.at_most("u", M)

    solution = LevelSolver(g).solve()

    assert solution.levels["t"] is M
    assert solution.levels["u"] is M
    assert solution.violations(g) == []


def test_pinned_node_stays_data():
    g = ConstraintGraph()
    g.pin("y", D)
    g.flows("y", "z")

    solution = LevelSolver(g).solve()

    assert solution.levels["y"] is D
    assert solution.levels["z"] is D


def test_crossed_bounds_raise_inconsistent_level_constraints():
    g = ConstraintGraph()
    g.pin("d", D)
    g.at_least("m", M)
    g.flows("m", "d")

    with pytest.raises(CompileError) as info:
        LevelSolver(g).solve()

    diag = info.value.diagnostic
    assert info.value.error_kind is ErrorKind.INCONSISTENT_LEVEL_CONSTRAINTS
    assert diag.code == "LVL-0050"
    assert diag.name == "d"
    assert diag.details["lower"] is M
    assert diag.details["upper"] is D
    assert diag.details["lower_origin"] == "m"


def test_self_edge_is_ignored():
    g = ConstraintGraph()
    g.flows("x", "x")

    assert g.constraints == []
    assert g.successors("x") == []


def _random_graph(rng: random.Random, n_nodes: int, n_edges: int) -> ConstraintGraph:
    g = ConstraintGraph()
    names = [f"v{i}" for i in range(n_nodes)]
    for name in names:
        g.add_node(name)
    for _ in range(n_edges):
        g.flows(rng.choice(names), rng.choice(names))
    for name in names:
        roll = rng.random()
        if roll < 0.15:
            g.at_least(name, M)
        elif roll < 0.30:
            g.at_most(name, M)
        elif roll < 0.35:
            g.pin(name, D)
    return g


@pytest.mark.parametrize("seed", range(40))
def test_solutions_never_flow_backwards(seed):
    """Noninterference: any solution the solver returns satisfies every edge."""
    rng = random.Random(seed)
    g = _random_graph(rng, n_nodes=rng.randint(2, 12), n_edges=rng.randint(0, 20))

    try:
        solution = LevelSolver(g).solve()
    except CompileError as e:
        # A rejection must point at a node whose bounds really cross.
        assert e.error_kind is ErrorKind.INCONSISTENT_LEVEL_CONSTRAINTS
        return

    assert solution.violations(g) == []
    for c in g.constraints:
        if c.rhs is not None:
            assert CORRECTNESS_ORDER.leq(solution.levels[c.lhs], solution.levels[c.rhs])
    for node_id, b in solution.bounds.items():
        assert CORRECTNESS_ORDER.leq(b.lower, solution.levels[node_id])
        assert CORRECTNESS_ORDER.leq(solution.levels[node_id], b.upper)


@pytest.mark.parametrize("seed", range(10))
def test_solving_is_deterministic(seed):
    a = LevelSolver(_random_graph(random.Random(seed), 10, 15))
    b = LevelSolver(_random_graph(random.Random(seed), 10, 15))
    try:
        first = a.solve().levels
    except CompileError as e:
        with pytest.raises(CompileError) as again:
            b.solve()
        assert again.value.diagnostic.message == e.diagnostic.message
        return
    assert b.solve().levels == first
