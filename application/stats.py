from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from domain.models import (
    DailyStats,
    LeaderboardEntry,
    Player,
    PlayerStats,
    Transaction,
    TransactionKind,
)


LEADERBOARD_WINDOW = timedelta(hours=24)
LEADERBOARD_SIZE = 10
DAILY_STATS_DAYS = 7


def build_leaderboard(
    transactions: Iterable[Transaction],
    resolve_username: Callable[[str], Optional[str]],
    now: datetime,
) -> List[LeaderboardEntry]:
    """
    Rank players by what they won in the last 24 hours.

    Only `win` transactions count; `winning_spins` is the number of them.
    """

    cutoff = now - LEADERBOARD_WINDOW
    totals: Dict[str, List[int]] = {}
    for tx in transactions:
        if tx.kind is not TransactionKind.WIN or tx.timestamp <= cutoff:
            continue
        winnings_and_count = totals.setdefault(tx.player_id, [0, 0])
        winnings_and_count[0] += tx.amount
        winnings_and_count[1] += 1

    entries = [
        LeaderboardEntry(
            player_id=player_id,
            username=resolve_username(player_id) or "Unknown",
            winnings=winnings,
            winning_spins=count,
        )
        for player_id, (winnings, count) in totals.items()
    ]
    entries.sort(key=lambda e: e.winnings, reverse=True)
    return entries[:LEADERBOARD_SIZE]


def player_rank(leaderboard: List[LeaderboardEntry], player_id: str) -> Optional[int]:
    for position, entry in enumerate(leaderboard, start=1):
        if entry.player_id == player_id:
            return position
    return None


def build_player_stats(
    player: Player,
    transactions: Iterable[Transaction],
    now: datetime,
) -> PlayerStats:
    own = [tx for tx in transactions if tx.player_id == player.id]
    wins = [tx.amount for tx in own if tx.kind is TransactionKind.WIN]

    win_rate = len(wins) / player.total_spins * 100 if player.total_spins > 0 else 0.0

    today = now.date()
    days = [today - timedelta(days=offset) for offset in range(DAILY_STATS_DAYS - 1, -1, -1)]
    daily = []
    for day in days:
        on_day = [tx for tx in own if tx.timestamp.date() == day]
        daily.append(
            DailyStats(
                day=day,
                spins=sum(1 for tx in on_day if tx.kind is TransactionKind.SPIN),
                winnings=sum(tx.amount for tx in on_day if tx.kind is TransactionKind.WIN),
            )
        )

    return PlayerStats(
        total_spins=player.total_spins,
        total_winnings=player.total_winnings,
        total_won=sum(wins),
        total_spent=sum(-tx.amount for tx in own if tx.kind is TransactionKind.SPIN),
        biggest_win=max(wins, default=0),
        win_rate=win_rate,
        daily=daily,
    )


def filter_transactions(
    transactions: Iterable[Transaction],
    kind: Optional[TransactionKind] = None,
    search: str = "",
) -> List[Transaction]:
    """Keep transactions of `kind` (all kinds when None) whose game name contains `search`."""

    needle = search.lower()
    return [
        tx
        for tx in transactions
        if (kind is None or tx.kind is kind) and needle in tx.game.lower()
    ]
