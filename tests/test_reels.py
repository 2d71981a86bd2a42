import random
import unittest
from collections import Counter

from domain.reels import DEFAULT_SYMBOL_WEIGHT, ReelGenerator, build_pool


class ScriptedRandom:
    """Returns pre-set indices and records the pool sizes it was asked about."""

    def __init__(self, picks):
        self.picks = list(picks)
        self.stops = []

    def randrange(self, stop):
        self.stops.append(stop)
        return self.picks.pop(0)


class BuildPoolTests(unittest.TestCase):
    def test_symbol_appears_weight_times(self):
        pool = build_pool(["a", "b"], {"a": 2, "b": 3})
        self.assertEqual(pool, ["a", "a", "b", "b", "b"])

    def test_missing_symbol_uses_default_weight(self):
        pool = build_pool(["a", "z"], {"a": 1})
        self.assertEqual(pool.count("z"), DEFAULT_SYMBOL_WEIGHT)
        self.assertEqual(len(pool), 1 + DEFAULT_SYMBOL_WEIGHT)

    def test_duplicate_symbols_add_weight(self):
        pool = build_pool(["a", "a", "b"], {"a": 2, "b": 1})
        self.assertEqual(pool.count("a"), 4)

    def test_weight_table_larger_than_symbol_set(self):
        pool = build_pool(["b"], {"a": 5, "b": 2, "c": 9})
        self.assertEqual(pool, ["b", "b"])


class ReelGeneratorTests(unittest.TestCase):
    def test_grid_is_three_by_three_of_machine_symbols(self):
        reels = ReelGenerator({"a": 1, "b": 1}, random.Random(7))
        grid = reels.generate(["a", "b"])

        self.assertEqual(len(grid), 3)
        for row in grid:
            self.assertEqual(len(row), 3)
            for symbol in row:
                self.assertIn(symbol, ("a", "b"))

    def test_cells_are_drawn_row_by_row_from_the_pool(self):
        # Pool is ["a", "b", "b"]; indices pick a, b, b, a, ...
        rng = ScriptedRandom([0, 1, 2, 0, 0, 1, 2, 2, 0])
        reels = ReelGenerator({"a": 1, "b": 2}, rng)

        grid = reels.generate(["a", "b"])

        self.assertEqual(
            grid,
            (("a", "b", "b"), ("a", "a", "b"), ("b", "b", "a")),
        )
        self.assertEqual(rng.stops, [3] * 9)

    def test_empty_symbol_list_is_rejected(self):
        reels = ReelGenerator({}, random.Random(1))
        with self.assertRaises(ValueError):
            reels.generate([])

    def test_sampling_converges_to_weight_ratios(self):
        reels = ReelGenerator({"a": 1, "b": 3}, random.Random(1234))
        counts = Counter()
        for _ in range(3000):
            for row in reels.generate(["a", "b"]):
                counts.update(row)

        total = sum(counts.values())
        self.assertAlmostEqual(counts["b"] / total, 0.75, delta=0.02)
        self.assertAlmostEqual(counts["a"] / total, 0.25, delta=0.02)

    def test_unweighted_symbol_competes_with_default_weight(self):
        reels = ReelGenerator({"a": 30}, random.Random(99))
        counts = Counter()
        for _ in range(2000):
            for row in reels.generate(["a", "new"]):
                counts.update(row)

        total = sum(counts.values())
        self.assertAlmostEqual(counts["new"] / total, 10 / 40, delta=0.02)


if __name__ == "__main__":
    unittest.main()
