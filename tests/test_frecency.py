from __future__ import annotations

import unittest

from frecd.frecency import (
    DEFAULT_MODEL,
    HALF_LIFE_SECONDS,
    VISIT_INCREMENT,
    FrecencyModel,
    score_for_ranking,
    score_on_visit,
)

NOW = 1_700_000_000.0


class FrecencyScoringTests(unittest.TestCase):
    def test_first_visit_starts_at_one_increment(self) -> None:
        self.assertEqual(score_on_visit(0.0, NOW, NOW), VISIT_INCREMENT)

    def test_score_halves_after_one_half_life(self) -> None:
        self.assertAlmostEqual(score_for_ranking(8.0, NOW, NOW + HALF_LIFE_SECONDS), 4.0)
        self.assertAlmostEqual(score_for_ranking(8.0, NOW, NOW + 2 * HALF_LIFE_SECONDS), 2.0)

    def test_no_elapsed_time_keeps_score(self) -> None:
        self.assertEqual(score_for_ranking(3.5, NOW, NOW), 3.5)

    def test_clock_skew_is_clamped_to_zero_elapsed(self) -> None:
        self.assertEqual(score_for_ranking(5.0, NOW + 3600, NOW), 5.0)
        self.assertEqual(score_on_visit(5.0, NOW + 3600, NOW), 5.0 + VISIT_INCREMENT)

    def test_visit_never_lowers_the_current_effective_score(self) -> None:
        score = 0.0
        last_visit = NOW
        for step in range(1, 50):
            now = NOW + step * 7_919.0 * step
            before = score_for_ranking(score, last_visit, now)
            score = score_on_visit(score, last_visit, now)
            last_visit = now
            self.assertGreaterEqual(score, before)
            self.assertAlmostEqual(score - before, VISIT_INCREMENT)

    def test_reading_later_never_exceeds_value_at_last_visit(self) -> None:
        score = score_on_visit(score_on_visit(0.0, NOW, NOW), NOW, NOW + 60)
        for elapsed in (0.0, 1.0, 3600.0, HALF_LIFE_SECONDS, 10 * HALF_LIFE_SECONDS):
            self.assertLessEqual(score_for_ranking(score, NOW + 60, NOW + 60 + elapsed), score)

    def test_two_visits_in_the_same_instant_add_two_increments(self) -> None:
        score = score_on_visit(0.0, NOW, NOW)
        score = score_on_visit(score, NOW, NOW)
        self.assertAlmostEqual(score, 2 * VISIT_INCREMENT)


class FrecencyModelTests(unittest.TestCase):
    def test_module_functions_use_default_model(self) -> None:
        self.assertEqual(
            score_for_ranking(2.0, NOW, NOW + 100),
            DEFAULT_MODEL.score_for_ranking(2.0, NOW, NOW + 100),
        )

    def test_custom_half_life_and_increment(self) -> None:
        model = FrecencyModel(half_life=10.0, visit_increment=0.25)

        self.assertAlmostEqual(model.score_for_ranking(1.0, NOW, NOW + 10.0), 0.5)
        self.assertAlmostEqual(model.score_on_visit(1.0, NOW, NOW + 10.0), 0.75)

    def test_invalid_parameters_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            FrecencyModel(half_life=0.0)
        with self.assertRaises(ValueError):
            FrecencyModel(decay_factor=1.5)
        with self.assertRaises(ValueError):
            FrecencyModel(decay_factor=0.0)
        with self.assertRaises(ValueError):
            FrecencyModel(visit_increment=-1.0)


if __name__ == "__main__":
    unittest.main()
