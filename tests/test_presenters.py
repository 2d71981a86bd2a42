import unittest
from datetime import datetime, timezone

from application.services import SpinOutcome, StatsResult
from domain.catalog import default_catalog
from domain.models import Machine, Player, PlayerStats, SpinResult, Transaction, TransactionKind
from interfaces.presenters import (
    format_history,
    format_leaderboard,
    format_machine_details,
    format_spin_outcome,
    format_stats,
    parse_history_args,
    parse_spin_args,
)
from interfaces.telegram.callback_data import encode_spin_again, parse_spin_again


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
SEVEN = "7️⃣"


def make_player(balance=3490, is_demo=False) -> Player:
    return Player(
        id="p1",
        username="Jane",
        email="jane@example.com",
        password_hash="",
        balance=balance,
        total_winnings=2500,
        total_spins=3,
        join_date=NOW,
        is_demo=is_demo,
    )


class SpinOutcomeFormattingTests(unittest.TestCase):
    def test_jackpot(self):
        result = SpinResult(
            symbols=((SEVEN, "🍒", "🍋"), ("🍊", SEVEN, "🍇"), ("⭐", "💎", SEVEN)),
            winning_lines=(6,),
            payout=2500,
            is_jackpot=True,
        )
        outcome = SpinOutcome(
            success=True,
            machine=default_catalog().get("classic"),
            result=result,
            player=make_player(),
        )

        text = format_spin_outcome(outcome)

        self.assertIn("Classic Slots", text)
        self.assertIn(f"{SEVEN} | 🍒 | 🍋", text)
        self.assertIn("You won 2,500 on diagonal \\!", text)
        self.assertIn("JACKPOT", text)
        self.assertIn("Balance: 3,490", text)

    def test_loss(self):
        result = SpinResult(
            symbols=(("a", "b", "c"), ("d", "e", "f"), ("g", "h", "i")),
            winning_lines=(),
            payout=0,
            is_jackpot=False,
        )
        outcome = SpinOutcome(
            success=True,
            machine=default_catalog().get("classic"),
            result=result,
            player=make_player(balance=90),
        )

        text = format_spin_outcome(outcome)

        self.assertIn("No win this time.", text)
        self.assertNotIn("JACKPOT", text)

    def test_failure_shows_error(self):
        outcome = SpinOutcome(success=False, error_message="Not authenticated")

        self.assertEqual(format_spin_outcome(outcome), "Not authenticated")


class OtherFormattingTests(unittest.TestCase):
    def test_history_is_paged(self):
        transactions = [
            Transaction(
                id=str(i),
                player_id="p1",
                kind=TransactionKind.SPIN,
                amount=-5,
                game="Classic Slots",
                timestamp=NOW,
            )
            for i in range(12)
        ]

        text = format_history(transactions, limit=10)

        self.assertEqual(text.count("Classic Slots"), 10)
        self.assertIn("... and 2 more", text)
        self.assertEqual(format_history([]), "No transactions found.")

    def test_machine_details_show_paytable_and_odds(self):
        machine = Machine(
            id="fruit",
            name="Fruit Bowl",
            theme="fresh",
            min_bet=2,
            max_bet=20,
            symbols=("A", "B"),
            payouts={"BBB": 50, "AAA": 5},
            jackpot=1000,
        )

        text = format_machine_details(machine, {"A": 3, "B": 1})

        self.assertIn("Fruit Bowl (fresh)", text)
        self.assertIn("Bet: 2-20, jackpot 1,000", text)
        self.assertLess(text.index("AAA x5"), text.index("BBB x50"))
        self.assertIn("A 75.0%", text)
        self.assertIn("B 25.0%", text)

    def test_empty_leaderboard(self):
        self.assertIn("Nobody", format_leaderboard([]))

    def test_stats_for_demo_player(self):
        stats = PlayerStats(
            total_spins=3,
            total_winnings=2500,
            total_won=2500,
            total_spent=30,
            biggest_win=2500,
            win_rate=33.3333,
        )
        result = StatsResult(success=True, player=make_player(is_demo=True), stats=stats, rank=1)

        text = format_stats(result)

        self.assertIn("Jane (demo)", text)
        self.assertIn("Total spent: 30", text)
        self.assertIn("Win rate: 33.3%", text)
        self.assertIn("Leaderboard rank: #1", text)


class ParseArgsTests(unittest.TestCase):
    def test_parse_spin_args(self):
        self.assertEqual(parse_spin_args(["classic", "10"]), ("classic", 10, None))
        self.assertEqual(parse_spin_args(["classic"]), (None, None, "Usage: spin <machine> <bet>"))
        self.assertEqual(parse_spin_args(["classic", "ten"]), (None, None, "Bet must be a number."))

    def test_parse_history_args(self):
        self.assertEqual(parse_history_args([]), (None, ""))
        self.assertEqual(parse_history_args(["win"]), (TransactionKind.WIN, ""))
        self.assertEqual(parse_history_args(["ALL", "diamond"]), (None, "diamond"))
        self.assertEqual(
            parse_history_args(["classic", "slots"]), (None, "classic slots")
        )


class CallbackDataTests(unittest.TestCase):
    def test_encode_and_parse(self):
        data = encode_spin_again("classic", 25)

        self.assertEqual(data, "again:classic:25")
        self.assertEqual(parse_spin_again(data), ("classic", 25))

    def test_machine_id_with_separator_is_rejected(self):
        with self.assertRaises(ValueError):
            encode_spin_again("a:b", 1)

    def test_invalid_data(self):
        for data in ("again:classic", "other:classic:1", "again::1", "again:classic:x"):
            with self.assertRaises(ValueError, msg=data):
                parse_spin_again(data)


if __name__ == "__main__":
    unittest.main()
