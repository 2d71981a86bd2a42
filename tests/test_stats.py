import unittest
from datetime import datetime, timedelta, timezone

from application.stats import (
    LEADERBOARD_SIZE,
    build_leaderboard,
    build_player_stats,
    filter_transactions,
    player_rank,
)
from domain.models import Player, Transaction, TransactionKind


NOW = datetime(2024, 5, 8, 18, 0, tzinfo=timezone.utc)


def tx(player_id, kind, amount, ago=timedelta(minutes=5), game="Classic Slots", tx_id=None):
    return Transaction(
        id=tx_id or f"{player_id}-{kind.value}-{amount}-{ago.total_seconds()}",
        player_id=player_id,
        kind=kind,
        amount=amount,
        game=game,
        timestamp=NOW - ago,
    )


class LeaderboardTests(unittest.TestCase):
    def setUp(self) -> None:
        self.names = {"a": "Alice", "b": "Bob"}

    def _build(self, transactions):
        return build_leaderboard(transactions, self.names.get, NOW)

    def test_sums_wins_per_player_and_sorts_descending(self):
        board = self._build(
            [
                tx("a", TransactionKind.WIN, 100),
                tx("b", TransactionKind.WIN, 300),
                tx("a", TransactionKind.WIN, 50, ago=timedelta(hours=1)),
                tx("a", TransactionKind.SPIN, -10),
            ]
        )

        self.assertEqual([(e.username, e.winnings, e.winning_spins) for e in board], [
            ("Bob", 300, 1),
            ("Alice", 150, 2),
        ])

    def test_ignores_wins_older_than_a_day(self):
        board = self._build(
            [
                tx("a", TransactionKind.WIN, 1000, ago=timedelta(hours=25)),
                tx("b", TransactionKind.WIN, 10),
            ]
        )

        self.assertEqual([e.player_id for e in board], ["b"])

    def test_unknown_players_are_named_unknown(self):
        board = self._build([tx("ghost", TransactionKind.WIN, 10)])

        self.assertEqual(board[0].username, "Unknown")

    def test_keeps_top_ten(self):
        transactions = [
            tx(f"p{i}", TransactionKind.WIN, (i + 1) * 10) for i in range(LEADERBOARD_SIZE + 3)
        ]

        board = self._build(transactions)

        self.assertEqual(len(board), LEADERBOARD_SIZE)
        self.assertEqual(board[0].player_id, f"p{LEADERBOARD_SIZE + 2}")
        self.assertEqual(board[-1].player_id, "p3")

    def test_rank(self):
        board = self._build(
            [tx("a", TransactionKind.WIN, 100), tx("b", TransactionKind.WIN, 300)]
        )

        self.assertEqual(player_rank(board, "b"), 1)
        self.assertEqual(player_rank(board, "a"), 2)
        self.assertIsNone(player_rank(board, "c"))

    def test_empty(self):
        self.assertEqual(self._build([]), [])


class PlayerStatsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.player = Player(
            id="a",
            username="Alice",
            email="alice@example.com",
            password_hash="",
            balance=900,
            total_winnings=300,
            total_spins=4,
            join_date=NOW - timedelta(days=30),
        )

    def test_totals_and_win_rate(self):
        stats = build_player_stats(
            self.player,
            [
                tx("a", TransactionKind.SPIN, -10, tx_id="1"),
                tx("a", TransactionKind.WIN, 200, tx_id="2"),
                tx("a", TransactionKind.SPIN, -10, tx_id="3"),
                tx("a", TransactionKind.WIN, 100, tx_id="4"),
                tx("b", TransactionKind.WIN, 9999, tx_id="5"),
            ],
            NOW,
        )

        self.assertEqual(stats.total_spins, 4)
        self.assertEqual(stats.total_winnings, 300)
        self.assertEqual(stats.total_won, 300)
        self.assertEqual(stats.total_spent, 20)
        self.assertEqual(stats.biggest_win, 200)
        self.assertEqual(stats.win_rate, 50.0)

    def test_no_spins_means_zero_win_rate(self):
        self.player.total_spins = 0

        stats = build_player_stats(self.player, [], NOW)

        self.assertEqual(stats.win_rate, 0.0)
        self.assertEqual(stats.biggest_win, 0)

    def test_daily_stats_cover_last_week_oldest_first(self):
        stats = build_player_stats(
            self.player,
            [
                tx("a", TransactionKind.SPIN, -10, tx_id="1"),
                tx("a", TransactionKind.WIN, 40, tx_id="2"),
                tx("a", TransactionKind.SPIN, -10, ago=timedelta(days=2), tx_id="3"),
                tx("a", TransactionKind.SPIN, -10, ago=timedelta(days=10), tx_id="4"),
            ],
            NOW,
        )

        self.assertEqual(len(stats.daily), 7)
        self.assertEqual(stats.daily[-1].day, NOW.date())
        self.assertEqual(stats.daily[0].day, NOW.date() - timedelta(days=6))
        self.assertEqual((stats.daily[-1].spins, stats.daily[-1].winnings), (1, 40))
        self.assertEqual(stats.daily[-3].spins, 1)
        self.assertEqual(sum(day.spins for day in stats.daily), 2)


class FilterTransactionsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.transactions = [
            tx("a", TransactionKind.SPIN, -10, game="Diamond Deluxe", tx_id="1"),
            tx("a", TransactionKind.WIN, 50, game="Diamond Deluxe", tx_id="2"),
            tx("a", TransactionKind.SPIN, -5, game="Classic Slots", tx_id="3"),
        ]

    def test_no_filter_keeps_everything(self):
        self.assertEqual(filter_transactions(self.transactions), self.transactions)

    def test_filter_by_kind(self):
        result = filter_transactions(self.transactions, kind=TransactionKind.SPIN)

        self.assertEqual([t.id for t in result], ["1", "3"])

    def test_search_is_case_insensitive(self):
        result = filter_transactions(self.transactions, search="diamond")

        self.assertEqual([t.id for t in result], ["1", "2"])

    def test_kind_and_search_combine(self):
        result = filter_transactions(
            self.transactions, kind=TransactionKind.WIN, search="CLASSIC"
        )

        self.assertEqual(result, [])


if __name__ == "__main__":
    unittest.main()
