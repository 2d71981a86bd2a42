import unittest

from domain.paylines import JACKPOT_THRESHOLD, LINES, evaluate_grid, line_multiplier, pattern


CHERRY = "🍒"
LEMON = "🍋"
ORANGE = "🍊"
GRAPE = "🍇"
STAR = "⭐"
DIAMOND = "💎"
SEVEN = "7️⃣"

CLASSIC_PAYOUTS = {
    pattern(CHERRY): 10,
    pattern(LEMON): 15,
    pattern(ORANGE): 20,
    pattern(GRAPE): 25,
    pattern(STAR): 50,
    pattern(DIAMOND): 100,
    pattern(SEVEN): 500,
}


class PatternTests(unittest.TestCase):
    def test_pattern_repeats_symbol_three_times(self):
        self.assertEqual(pattern(CHERRY), CHERRY + CHERRY + CHERRY)
        self.assertEqual(pattern(SEVEN), "7️⃣7️⃣7️⃣")


class LineDefinitionTests(unittest.TestCase):
    def test_eight_lines_in_fixed_order(self):
        self.assertEqual(len(LINES), 8)
        self.assertEqual(LINES[0], ((0, 0), (0, 1), (0, 2)))
        self.assertEqual(LINES[2], ((2, 0), (2, 1), (2, 2)))
        self.assertEqual(LINES[3], ((0, 0), (1, 0), (2, 0)))
        self.assertEqual(LINES[5], ((0, 2), (1, 2), (2, 2)))
        self.assertEqual(LINES[6], ((0, 0), (1, 1), (2, 2)))
        self.assertEqual(LINES[7], ((0, 2), (1, 1), (2, 0)))

    def test_each_line_wins_on_its_own(self):
        for index, cells in enumerate(LINES):
            rows = [["a", "b", "c"], ["d", "e", "f"], ["g", "h", "i"]]
            for r, c in cells:
                rows[r][c] = CHERRY
            grid = tuple(tuple(row) for row in rows)

            evaluation = evaluate_grid(grid, CLASSIC_PAYOUTS, 1)

            self.assertEqual(evaluation.winning_lines, (index,), msg=f"line {index}")
            self.assertEqual(evaluation.payout, 10)


class EvaluateGridTests(unittest.TestCase):
    def test_cherry_top_row(self):
        grid = (
            (CHERRY, CHERRY, CHERRY),
            (LEMON, ORANGE, GRAPE),
            (STAR, DIAMOND, LEMON),
        )

        evaluation = evaluate_grid(grid, CLASSIC_PAYOUTS, 10)

        self.assertIn(0, evaluation.winning_lines)
        self.assertEqual(evaluation.winning_lines, (0,))
        self.assertEqual(evaluation.payout, 100)
        self.assertFalse(evaluation.is_jackpot)

    def test_sevens_on_main_diagonal_is_a_jackpot(self):
        grid = (
            (SEVEN, CHERRY, LEMON),
            (ORANGE, SEVEN, GRAPE),
            (STAR, DIAMOND, SEVEN),
        )

        evaluation = evaluate_grid(grid, CLASSIC_PAYOUTS, 5)

        self.assertEqual(evaluation.winning_lines, (6,))
        self.assertEqual(evaluation.payout, 2500)
        self.assertTrue(evaluation.is_jackpot)

    def test_one_symbol_can_win_both_diagonals(self):
        grid = (
            (CHERRY, LEMON, CHERRY),
            (ORANGE, CHERRY, GRAPE),
            (CHERRY, DIAMOND, CHERRY),
        )

        evaluation = evaluate_grid(grid, CLASSIC_PAYOUTS, 3)

        self.assertEqual(evaluation.winning_lines, (6, 7))
        self.assertEqual(evaluation.payout, 2 * 10 * 3)

    def test_full_grid_wins_every_line_in_order(self):
        grid = ((STAR,) * 3,) * 3

        evaluation = evaluate_grid(grid, CLASSIC_PAYOUTS, 2)

        self.assertEqual(evaluation.winning_lines, tuple(range(8)))
        self.assertEqual(evaluation.payout, 8 * 50 * 2)
        self.assertFalse(evaluation.is_jackpot)

    def test_matched_triple_without_payout_entry_does_not_win(self):
        grid = (("x", "x", "x"), ("y", "z", "w"), ("v", "u", "t"))

        evaluation = evaluate_grid(grid, CLASSIC_PAYOUTS, 10)

        self.assertEqual(evaluation.winning_lines, ())
        self.assertEqual(evaluation.payout, 0)
        self.assertEqual(line_multiplier(grid, 0, CLASSIC_PAYOUTS), 0)

    def test_zero_multiplier_entry_does_not_win(self):
        grid = ((CHERRY,) * 3, ("a", "b", "c"), ("d", "e", "f"))

        evaluation = evaluate_grid(grid, {pattern(CHERRY): 0}, 10)

        self.assertEqual(evaluation.winning_lines, ())

    def test_two_of_a_kind_does_not_win(self):
        grid = ((CHERRY, CHERRY, LEMON), ("a", "b", "c"), ("d", "e", "f"))

        self.assertEqual(evaluate_grid(grid, CLASSIC_PAYOUTS, 10).winning_lines, ())

    def test_jackpot_depends_on_multiplier_not_total(self):
        big_total = ((DIAMOND,) * 3,) * 3
        evaluation = evaluate_grid(big_total, CLASSIC_PAYOUTS, 100)
        self.assertEqual(evaluation.payout, 8 * 100 * 100)
        self.assertFalse(evaluation.is_jackpot)

        grid = ((SEVEN,) * 3, ("a", "b", "c"), ("d", "e", "f"))
        evaluation = evaluate_grid(grid, CLASSIC_PAYOUTS, 1)
        self.assertEqual(evaluation.payout, JACKPOT_THRESHOLD)
        self.assertTrue(evaluation.is_jackpot)


if __name__ == "__main__":
    unittest.main()
