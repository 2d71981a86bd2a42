from __future__ import annotations

import random
from typing import List, Mapping, Optional, Protocol, Sequence

from .models import Grid


ROWS = 3
COLUMNS = 3
DEFAULT_SYMBOL_WEIGHT = 10


class RandomSource(Protocol):
    """Anything that can pick an integer in ``[0, stop)``; `random.Random` qualifies."""

    def randrange(self, stop: int) -> int:
        ...


def symbol_weight(symbol: str, weights: Mapping[str, int]) -> int:
    return weights.get(symbol, DEFAULT_SYMBOL_WEIGHT)


def build_pool(symbols: Sequence[str], weights: Mapping[str, int]) -> List[str]:
    """
    Expand `symbols` into a draw pool where each symbol appears as many
    times as its weight.

    A symbol listed twice contributes its weight twice.
    """

    pool: List[str] = []
    for symbol in symbols:
        pool.extend([symbol] * symbol_weight(symbol, weights))
    return pool


class ReelGenerator:
    """
    Builds 3x3 grids by drawing every cell independently from the weighted
    pool of a machine's symbols. Holds no state between spins.
    """

    def __init__(
        self,
        weights: Mapping[str, int],
        rng: Optional[RandomSource] = None,
    ) -> None:
        self._weights = dict(weights)
        self._rng = rng or random.SystemRandom()

    @property
    def weights(self) -> Mapping[str, int]:
        return dict(self._weights)

    def draw(self, pool: Sequence[str]) -> str:
        return pool[self._rng.randrange(len(pool))]

    def generate(self, symbols: Sequence[str]) -> Grid:
        if not symbols:
            raise ValueError("Cannot spin a machine without symbols.")

        pool = build_pool(symbols, self._weights)
        if not pool:
            raise ValueError("All symbols have zero weight.")

        return tuple(
            tuple(self.draw(pool) for _ in range(COLUMNS))
            for _ in range(ROWS)
        )
