from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from application.services import SpinOutcome, StatsResult
from domain.models import Grid, LeaderboardEntry, Machine, Transaction, TransactionKind
from domain.reels import build_pool


LINE_NAMES = (
    "top row",
    "middle row",
    "bottom row",
    "left column",
    "middle column",
    "right column",
    "diagonal \\",
    "diagonal /",
)

HISTORY_PAGE_SIZE = 10


def format_grid(symbols: Grid) -> str:
    return "\n".join(" | ".join(row) for row in symbols)


def format_spin_outcome(outcome: SpinOutcome) -> str:
    if not outcome.success:
        return outcome.error_message or "Spin failed."

    result = outcome.result
    lines = [f"🎰 {outcome.machine.name}", format_grid(result.symbols), ""]
    if result.payout > 0:
        names = ", ".join(LINE_NAMES[i] for i in result.winning_lines)
        lines.append(f"You won {result.payout:,} on {names}!")
        if result.is_jackpot:
            lines.append("💥 JACKPOT! 💥")
    else:
        lines.append("No win this time.")
    lines.append(f"Balance: {outcome.player.balance:,}")
    return "\n".join(lines)


def format_machines(machines: Iterable[Machine]) -> str:
    lines = [
        f"{m.id}: {m.name} ({m.theme}), bet {m.min_bet}-{m.max_bet}, jackpot {m.jackpot:,}"
        for m in machines
    ]
    return "\n".join(lines) if lines else "No machines available."


def format_machine_details(machine: Machine, weights: Mapping[str, int]) -> str:
    """Bet limits, paytable and the chance of each symbol landing on a cell."""

    pool = build_pool(machine.symbols, weights)
    lines = [
        f"🎰 {machine.name} ({machine.theme})",
        f"Bet: {machine.min_bet}-{machine.max_bet}, jackpot {machine.jackpot:,}",
        "",
        "Pays (x bet, per line):",
    ]
    for key, multiplier in sorted(machine.payouts.items(), key=lambda item: item[1]):
        lines.append(f"{key} x{multiplier}")

    lines.append("")
    lines.append("Odds per cell:")
    for symbol in dict.fromkeys(machine.symbols):
        lines.append(f"{symbol} {pool.count(symbol) / len(pool):.1%}")
    return "\n".join(lines)


def format_history(transactions: Sequence[Transaction], limit: int = HISTORY_PAGE_SIZE) -> str:
    if not transactions:
        return "No transactions found."

    lines = [
        f"{tx.timestamp:%Y-%m-%d %H:%M} {tx.kind.value:<4} {tx.game}: {tx.amount:+,}"
        for tx in transactions[:limit]
    ]
    if len(transactions) > limit:
        lines.append(f"... and {len(transactions) - limit} more")
    return "\n".join(lines)


def format_leaderboard(entries: Sequence[LeaderboardEntry]) -> str:
    if not entries:
        return "Nobody has won anything in the last 24 hours."

    return "\n".join(
        f"{position}. {e.username}: {e.winnings:,} ({e.winning_spins} wins)"
        for position, e in enumerate(entries, start=1)
    )


def format_stats(result: StatsResult) -> str:
    if not result.success:
        return result.error_message or "Could not load stats."

    player, stats = result.player, result.stats
    lines = [
        f"{player.username}{' (demo)' if player.is_demo else ''}",
        f"Balance: {player.balance:,}",
        f"Total spins: {stats.total_spins:,}",
        f"Total winnings: {stats.total_winnings:,}",
        f"Total spent: {stats.total_spent:,}",
        f"Biggest win: {stats.biggest_win:,}",
        f"Win rate: {stats.win_rate:.1f}%",
    ]
    if result.rank is not None:
        lines.append(f"Leaderboard rank: #{result.rank}")
    return "\n".join(lines)


def parse_spin_args(args: Sequence[str]) -> Tuple[Optional[str], Optional[int], Optional[str]]:
    """
    Parse ``<machine> <bet>``.

    Returns (machine_id, bet, error_message). On failure the first two are
    None and error_message says what was wrong.
    """

    if len(args) < 2:
        return None, None, "Usage: spin <machine> <bet>"
    try:
        bet = int(args[1])
    except ValueError:
        return None, None, "Bet must be a number."
    return args[0], bet, None


def parse_history_args(args: Sequence[str]) -> Tuple[Optional[TransactionKind], str]:
    """Parse ``[spin|win|all] [search words...]``."""

    words: List[str] = list(args)
    kind = None
    if words and words[0].lower() in ("spin", "win", "all"):
        first = words.pop(0).lower()
        kind = None if first == "all" else TransactionKind(first)
    return kind, " ".join(words)
