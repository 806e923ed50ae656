#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

import pytest

from slic_levels import CORRECTNESS_ORDER, PERFORMANCE_ORDER, Level, format_level

D, M, G = Level.DATA, Level.MODEL, Level.GENQUANT


def test_correctness_order_chain():
    assert CORRECTNESS_ORDER.lt(D, M)
    assert CORRECTNESS_ORDER.lt(M, G)
    assert CORRECTNESS_ORDER.bottom is D
    assert CORRECTNESS_ORDER.top is G


def test_performance_order_prefers_generated_quantities_to_model():
    assert PERFORMANCE_ORDER.lt(D, G)
    assert PERFORMANCE_ORDER.lt(G, M)
    assert PERFORMANCE_ORDER.top is M


def test_orders_are_distinct_values():
    assert CORRECTNESS_ORDER != PERFORMANCE_ORDER
    assert CORRECTNESS_ORDER.join([M, G]) is G
    assert PERFORMANCE_ORDER.join([M, G]) is M


@pytest.mark.parametrize(
    "low, high, expected",
    [
        (D, G, (D, M, G)),
        (M, G, (M, G)),
        (D, D, (D,)),
        (G, M, ()),
    ],
)
def test_between(low, high, expected):
    assert CORRECTNESS_ORDER.between(low, high) == expected


def test_join_and_meet_of_nothing():
    assert CORRECTNESS_ORDER.join([]) is D
    assert CORRECTNESS_ORDER.meet([]) is G


def test_level_names():
    assert str(G) == "GenQuantity"
    assert format_level(M) == "Model"
    assert format_level(None) == "<none>"
