from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


Grid = Tuple[Tuple[str, ...], ...]

TRANSACTION_LOG_LIMIT = 1000


@dataclass(frozen=True)
class Machine:
    """
    A configured slot machine.

    `payouts` maps a pattern (one symbol repeated three times) to a
    multiplier applied to the bet. `jackpot` is a display figure only and
    is never paid out automatically.
    """

    id: str
    name: str
    theme: str
    min_bet: int
    max_bet: int
    symbols: Tuple[str, ...]
    payouts: Mapping[str, int]
    jackpot: int


@dataclass(frozen=True)
class SpinResult:
    """Outcome of a single spin, already scaled by the bet."""

    symbols: Grid
    winning_lines: Tuple[int, ...]
    payout: int
    is_jackpot: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbols": [list(row) for row in self.symbols],
            "winning_lines": list(self.winning_lines),
            "payout": self.payout,
            "is_jackpot": self.is_jackpot,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpinResult":
        return cls(
            symbols=tuple(tuple(row) for row in data["symbols"]),
            winning_lines=tuple(int(i) for i in data["winning_lines"]),
            payout=int(data["payout"]),
            is_jackpot=bool(data["is_jackpot"]),
        )


@dataclass
class Player:
    """
    A casino player and their running totals.

    Demo players live only for the lifetime of the process and carry no
    password hash.
    """

    id: str
    username: str
    email: str
    password_hash: str
    balance: int
    total_winnings: int
    total_spins: int
    join_date: datetime
    is_demo: bool = False


@dataclass(frozen=True)
class PlayerUpdate:
    """Absolute values written to a player after a settled spin."""

    balance: int
    total_winnings: int
    total_spins: int


class TransactionKind(str, Enum):
    SPIN = "spin"
    WIN = "win"
    # Reserved, nothing produces these yet.
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


@dataclass(frozen=True)
class SpinDetails:
    """The spin a transaction was produced by."""

    machine_id: str
    spin_result: SpinResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "machine_id": self.machine_id,
            "spin_result": self.spin_result.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SpinDetails":
        return cls(
            machine_id=str(data["machine_id"]),
            spin_result=SpinResult.from_dict(data["spin_result"]),
        )


@dataclass(frozen=True)
class Transaction:
    id: str
    player_id: str
    kind: TransactionKind
    amount: int
    game: str
    timestamp: datetime
    details: Optional[SpinDetails] = None


@dataclass(frozen=True)
class LeaderboardEntry:
    player_id: str
    username: str
    winnings: int
    winning_spins: int


@dataclass(frozen=True)
class DailyStats:
    day: date
    spins: int
    winnings: int


@dataclass
class PlayerStats:
    total_spins: int
    total_winnings: int
    total_won: int
    total_spent: int
    biggest_win: int
    win_rate: float
    daily: List[DailyStats] = field(default_factory=list)
