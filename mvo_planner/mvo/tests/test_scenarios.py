"""
PURPOSE: Tests for the headcount scenario evaluator.

Tests verify:
- Deadline risk after 1/sqrt(h) rescaling
- Minimum headcount floor rejection regardless of risk
- Budget rejection and cost scaling
- Failure risk never increases with headcount
- The scan extends past the initial window until a headcount qualifies
"""

import dataclasses
import unittest

import numpy as np

from mvo_planner.errors import ConfigurationError
from mvo_planner.monte_carlo.config import CALENDAR_DAYS_PER_MONTH
from mvo_planner.monte_carlo.simulation import MonteCarloEngine
from mvo_planner.monte_carlo.variables import DEFAULT_MONTE_CARLO_INPUTS
from mvo_planner.mvo.scenarios import candidate_headcounts, evaluate, qualifies, scan


def _by_headcount(results):
    return {r.headcount: r for r in results}


class TestEvaluate(unittest.TestCase):

    def setUp(self):
        # One FTE needs 40 days; two need 40 / sqrt(2) = 28.3
        self.durations = np.full(100, 40.0)

    def test_deadline_risk(self):
        rows = _by_headcount(evaluate(self.durations, [1, 2, 3], 1, 30.0, 5000.0))
        self.assertEqual(rows[1].failure_risk, 100.0)
        self.assertEqual(rows[1].deadline_met_probability, 0.0)
        self.assertEqual(rows[1].risk_level, "high")
        self.assertTrue(rows[1].rejected)
        self.assertIn("Failure risk 100.0% exceeds threshold 15%", rows[1].rejection_reason)
        self.assertEqual(rows[2].failure_risk, 0.0)
        self.assertEqual(rows[2].risk_level, "low")
        self.assertFalse(rows[2].rejected)
        self.assertIsNone(rows[2].rejection_reason)
        self.assertAlmostEqual(rows[2].avg_duration, 40.0 / np.sqrt(2))

    def test_floor_rejects_regardless_of_risk(self):
        rows = _by_headcount(evaluate(self.durations, [1, 2, 3, 4], 3, 30.0, 5000.0))
        self.assertEqual(rows[2].failure_risk, 0.0)
        self.assertTrue(rows[2].rejected)
        self.assertIn("minimum headcount floor", rows[2].rejection_reason)
        self.assertIn("minimum headcount floor", rows[1].rejection_reason)
        self.assertFalse(rows[3].rejected)

    def test_floor_binding_flags(self):
        rows = _by_headcount(evaluate(self.durations, [1, 2, 3, 4], 3, 30.0, 5000.0))
        self.assertTrue(rows[3].min_headcount_applied)
        self.assertFalse(rows[4].min_headcount_applied)
        self.assertEqual(rows[2].min_headcount_value, 3)
        self.assertEqual(rows[3].min_headcount_value, 3)
        self.assertIsNone(rows[4].min_headcount_value)

    def test_floor_not_binding_when_smaller_fails_anyway(self):
        rows = _by_headcount(evaluate(self.durations, [1, 2], 2, 30.0, 5000.0))
        self.assertFalse(rows[2].min_headcount_applied)
        self.assertIsNone(rows[2].min_headcount_value)

    def test_no_deadline(self):
        rows = evaluate(self.durations, [1, 2], 1, None, 5000.0)
        for row in rows:
            self.assertEqual(row.failure_risk, 0.0)
            self.assertEqual(row.deadline_met_probability, 100.0)

    def test_cost_scaling(self):
        # two months / sqrt(4) = one calendar month for four people
        row = evaluate(np.full(10, 2 * CALENDAR_DAYS_PER_MONTH), [4], 1, None, 5000.0)[0]
        self.assertAlmostEqual(row.avg_cost, 20000.0)
        self.assertAlmostEqual(row.min_cost, row.max_cost)
        self.assertEqual(row.within_budget_probability, 100.0)

    def test_budget_rejection(self):
        row = evaluate(np.full(10, 2 * CALENDAR_DAYS_PER_MONTH), [4], 1, None, 5000.0, max_budget=15000.0)[0]
        self.assertTrue(row.rejected)
        self.assertEqual(row.within_budget_probability, 0.0)
        self.assertIn("exceeds budget RM15,000", row.rejection_reason)

    def test_medium_risk_bucket(self):
        durations = np.array([10.0] * 80 + [100.0] * 20)
        row = evaluate(durations, [1], 1, 30.0, 1000.0, acceptable_failure_risk=25.0)[0]
        self.assertEqual(row.failure_risk, 20.0)
        self.assertEqual(row.risk_level, "medium")
        self.assertFalse(row.rejected)

    def test_failure_risk_monotonic(self):
        durations = np.random.default_rng(0).gamma(shape=4.0, scale=15.0, size=5000)
        results = evaluate(durations, range(1, 12), 1, 30.0, 5000.0)
        risks = [r.failure_risk for r in results]
        self.assertEqual(risks, sorted(risks, reverse=True))

    def test_percentiles_ordered(self):
        durations = np.random.default_rng(1).uniform(10, 60, size=1000)
        row = evaluate(durations, [2], 1, 30.0, 5000.0)[0]
        self.assertLessEqual(row.min_duration, row.p50_duration)
        self.assertLessEqual(row.p50_duration, row.p75_duration)
        self.assertLessEqual(row.p75_duration, row.p90_duration)
        self.assertLessEqual(row.p90_duration, row.max_duration)

    def test_sorted_unique_headcounts(self):
        results = evaluate(self.durations, [3, 1, 3, 2], 1, 30.0, 5000.0)
        self.assertEqual([r.headcount for r in results], [1, 2, 3])
        self.assertEqual(results[0].iterations, 100)

    def test_accepts_monte_carlo_output(self):
        output = MonteCarloEngine(seed=2).run(400.0, 1.0, 1.0, 0.3, 1.0, DEFAULT_MONTE_CARLO_INPUTS.with_iterations(300))
        from_output = evaluate(output, [2], 1, 30.0, 5000.0)[0]
        from_results = evaluate(output.results, [2], 1, 30.0, 5000.0)[0]
        self.assertEqual(from_output, from_results)
        self.assertEqual(from_output.iterations, 300)

    def test_rows_are_immutable(self):
        row = evaluate(self.durations, [2], 1, 30.0, 5000.0)[0]
        with self.assertRaises(dataclasses.FrozenInstanceError):
            row.rejected = True

    def test_invalid_arguments(self):
        with self.assertRaises(ConfigurationError):
            evaluate(np.array([]), [1], 1, 30.0, 5000.0)
        with self.assertRaises(ConfigurationError):
            evaluate(self.durations, [0, 1], 1, 30.0, 5000.0)
        with self.assertRaises(ConfigurationError):
            evaluate(self.durations, [1], 1, 30.0, -1.0)

    def test_to_dict(self):
        data = evaluate(self.durations, [2], 3, 30.0, 5000.0)[0].to_dict()
        self.assertEqual(data["headcount"], 2)
        self.assertTrue(data["rejected"])
        self.assertEqual(data["min_headcount_value"], 3)
        self.assertEqual(data["avg_duration"], 28.3)


class TestCandidateHeadcounts(unittest.TestCase):

    def test_offsets_by_size(self):
        self.assertEqual(candidate_headcounts(4, 1, "medium_standard"), list(range(2, 10)))
        self.assertEqual(candidate_headcounts(4, 1, "small_lean"), list(range(3, 8)))
        self.assertEqual(candidate_headcounts(4, 1, "large_extended"), list(range(1, 12)))

    def test_never_below_one(self):
        self.assertEqual(candidate_headcounts(1, 1, "medium_standard")[0], 1)

    def test_covers_floor(self):
        headcounts = candidate_headcounts(2, 6, "large_extended")
        self.assertIn(6, headcounts)
        self.assertEqual(headcounts[-1], 13)

    def test_unknown_size(self):
        with self.assertRaises(ConfigurationError):
            candidate_headcounts(2, 1, "huge")


class TestScan(unittest.TestCase):

    def test_extends_until_a_headcount_qualifies(self):
        # 100 / sqrt(h) <= 30 needs h >= 12, beyond the initial 2..9
        rows = scan(np.full(50, 100.0), 4, 1, 30.0, 5000.0)
        self.assertEqual([r.headcount for r in rows], list(range(2, 15)))
        passing = [r.headcount for r in rows if qualifies(r, 85.0)]
        self.assertEqual(passing[0], 12)

    def test_initial_window_is_enough(self):
        rows = scan(np.full(50, 40.0), 2, 1, 30.0, 5000.0)
        self.assertEqual([r.headcount for r in rows], candidate_headcounts(2, 1))

    def test_stops_at_scan_limit(self):
        rows = scan(np.full(50, 10000.0), 4, 1, 30.0, 5000.0)
        self.assertEqual(rows[-1].headcount, 4 * 9)
        self.assertTrue(all(r.rejected for r in rows))

    def test_stops_once_over_budget(self):
        rows = scan(np.full(50, 300.0), 4, 1, 30.0, 5000.0, max_budget=60000.0)
        self.assertEqual(rows[-1].headcount, 9)
        self.assertIn("exceeds budget", rows[-1].rejection_reason)

    def test_confidence_target_drives_extension(self):
        durations = np.array([30.0] * 90 + [90.0] * 10)
        default = scan(durations, 1, 1, 30.0, 5000.0, operation_size="small_lean")
        self.assertEqual(default[-1].headcount, 4)
        self.assertTrue(qualifies(default[0], 85.0))

        # the slow tenth needs 90 / sqrt(h) <= 30, so h >= 9
        strict = scan(durations, 1, 1, 30.0, 5000.0, operation_size="small_lean", confidence_target=99.0)
        self.assertEqual(strict[-1].headcount, 10)
        self.assertEqual([r.headcount for r in strict if qualifies(r, 99.0)], [9, 10])


if __name__ == "__main__":
    unittest.main()
