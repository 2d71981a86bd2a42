from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Tuple

from .models import Grid


Cell = Tuple[int, int]

# Rows 0-2, columns 0-2 (indices 3-5), then the two diagonals.
LINES: Tuple[Tuple[Cell, Cell, Cell], ...] = (
    ((0, 0), (0, 1), (0, 2)),
    ((1, 0), (1, 1), (1, 2)),
    ((2, 0), (2, 1), (2, 2)),
    ((0, 0), (1, 0), (2, 0)),
    ((0, 1), (1, 1), (2, 1)),
    ((0, 2), (1, 2), (2, 2)),
    ((0, 0), (1, 1), (2, 2)),
    ((0, 2), (1, 1), (2, 0)),
)

JACKPOT_THRESHOLD = 500


def pattern(symbol: str) -> str:
    """Payout-table key for three of `symbol` in a line."""

    return symbol * 3


@dataclass(frozen=True)
class LineEvaluation:
    winning_lines: Tuple[int, ...]
    payout: int
    is_jackpot: bool


def line_symbols(grid: Grid, line_index: int) -> Tuple[str, str, str]:
    (r1, c1), (r2, c2), (r3, c3) = LINES[line_index]
    return grid[r1][c1], grid[r2][c2], grid[r3][c3]


def line_multiplier(grid: Grid, line_index: int, payouts: Mapping[str, int]) -> int:
    """
    Multiplier won by a single line, or 0.

    Only three identical symbols can win, and only when the payout table
    has a positive entry for their pattern.
    """

    first, second, third = line_symbols(grid, line_index)
    if not (first == second == third):
        return 0
    multiplier = payouts.get(pattern(first), 0)
    return multiplier if multiplier > 0 else 0


def evaluate_grid(grid: Grid, payouts: Mapping[str, int], bet: int) -> LineEvaluation:
    """
    Score every line of `grid` against `payouts`.

    Each winning line pays ``multiplier * bet`` on its own, so one symbol
    can pay several times (e.g. on both diagonals). The spin is a jackpot
    when any winning line's multiplier reaches `JACKPOT_THRESHOLD`,
    however small the total payout.
    """

    winning_lines: List[int] = []
    total = 0
    is_jackpot = False

    for index in range(len(LINES)):
        multiplier = line_multiplier(grid, index, payouts)
        if multiplier <= 0:
            continue

        winning_lines.append(index)
        total += multiplier * bet
        if multiplier >= JACKPOT_THRESHOLD:
            is_jackpot = True

    return LineEvaluation(
        winning_lines=tuple(winning_lines),
        payout=total,
        is_jackpot=is_jackpot,
    )
