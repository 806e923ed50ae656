#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple

# ========================================
# Level types and their two total orders.
# ========================================


class Level(Enum):
    DATA = "data"
    MODEL = "model"
    GENQUANT = "genquant"

    def __str__(self) -> str:
        return {
            Level.DATA: "Data",
            Level.MODEL: "Model",
            Level.GENQUANT: "GenQuantity",
        }[self]


@dataclass(frozen=True)
class LevelOrder:
    """
    A total order over the three levels, listed from bottom to top.

    The correctness order and the performance order are kept as two separate
    values so that information-flow checks and the tie-break can never be
    mixed up.
    """
    name: str
    chain: Tuple[Level, ...]

    def rank(self, level: Level) -> int:
        return self.chain.index(level)

    def leq(self, a: Level, b: Level) -> bool:
        return self.rank(a) <= self.rank(b)

    def lt(self, a: Level, b: Level) -> bool:
        return self.rank(a) < self.rank(b)

    @property
    def bottom(self) -> Level:
        return self.chain[0]

    @property
    def top(self) -> Level:
        return self.chain[-1]

    def join(self, levels: Iterable[Level]) -> Level:
        result = self.bottom
        for level in levels:
            if self.rank(level) > self.rank(result):
                result = level
        return result

    def meet(self, levels: Iterable[Level]) -> Level:
        result = self.top
        for level in levels:
            if self.rank(level) < self.rank(result):
                result = level
        return result

    def between(self, low: Level, high: Level) -> Tuple[Level, ...]:
        """All levels `l` with low <= l <= high, bottom first."""
        return tuple(lv for lv in self.chain if self.leq(low, lv) and self.leq(lv, high))


# Information may only flow upwards along this order.
CORRECTNESS_ORDER = LevelOrder("correctness", (Level.DATA, Level.MODEL, Level.GENQUANT))

# Cheapest evaluation frequency first: data once, generated quantities once per
# draw, model once per leapfrog step.
PERFORMANCE_ORDER = LevelOrder("performance", (Level.DATA, Level.GENQUANT, Level.MODEL))


def format_level(level) -> str:
    if level is None:
        return "<none>"
    return str(level)
