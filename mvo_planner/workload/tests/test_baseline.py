"""
PURPOSE: Tests for the workload model and the deterministic baseline.

Tests verify:
- Base workload hours from each driver, time-zone surcharge and the 100 h floor
- Known baseline scenario (750 units at 15 per day -> 2 FTE)
- Baseline determinism and monotonicity in workload
- Work-type coefficients scale the baseline like the simulation
- Rationale text
"""

import unittest

from mvo_planner.errors import ConfigurationError
from mvo_planner.monte_carlo.config import CALENDAR_DAYS_PER_MONTH
from mvo_planner.workload.baseline import compute_baseline
from mvo_planner.workload.inputs import RangeValue, WorkloadInputs
from mvo_planner.workload.model import (
    base_workload_hours,
    compute_required_hours,
    TrialRanges,
    people_capacity_factor,
    required_fte,
    trial_duration_days,
    workload_factors,
)
from mvo_planner.workload.work_types import DEFAULT_CATALOG


def _inputs(**changes):
    base = WorkloadInputs(volume=RangeValue(500, 750, 1000), productivity=RangeValue(12, 15, 18))
    return base.with_changes(**changes)


class TestWorkloadModel(unittest.TestCase):

    def test_work_unit_hours(self):
        # 750 units / 15 per day = 50 person-days = 400 h
        self.assertAlmostEqual(base_workload_hours(_inputs()), 400.0)

    def test_drivers_are_additive(self):
        inputs = _inputs(employees_supported=100, transactions_per_month=1200, sites=2)
        # 400 + 50 + 100 + 40
        self.assertAlmostEqual(base_workload_hours(inputs), 590.0)

    def test_time_zone_surcharge(self):
        self.assertAlmostEqual(base_workload_hours(_inputs(time_zones=3)), 400.0 * 1.3)

    def test_minimum_workload(self):
        inputs = WorkloadInputs(volume=None, productivity=None)
        self.assertEqual(base_workload_hours(inputs), 100.0)

    def test_factor_lookup(self):
        factors = workload_factors(_inputs(complexity="complex", coverage="twenty_four_seven", automation_level="manual"))
        self.assertEqual(factors.complexity, 1.4)
        self.assertEqual(factors.coverage, 3.0)
        self.assertEqual(factors.automation, 0.0)

    def test_required_hours_with_sample_and_coefficients(self):
        factors = workload_factors(_inputs())
        coefficients = DEFAULT_CATALOG.get_coefficients("analysis_reporting")
        hours = compute_required_hours(
            400.0,
            factors,
            sample={"workload_volume": 1.1, "complexity_factor": 1.0, "automation_factor": 0.5},
            coefficients=coefficients,
            noise=2.0,
        )
        # 400 x 1.1 x 0.9 complexity x 0.5 remaining x 2.0 noise x 1.0 risk
        self.assertAlmostEqual(hours, 396.0)

    def test_fte_and_duration(self):
        self.assertAlmostEqual(required_fte(272.0, 0.85), 2.0)
        self.assertEqual(required_fte(10.0, 0.85), 1.0)
        self.assertAlmostEqual(required_fte(10.0, 0.85, floor=False), 10.0 / 136.0)
        self.assertAlmostEqual(trial_duration_days(4.0), 2 * CALENDAR_DAYS_PER_MONTH)

    def test_people_capacity(self):
        # 5% absent, 20% ramp-up loss for the 10% of new joiners
        self.assertAlmostEqual(people_capacity_factor(5, 20, 10), 0.95 * 0.98)
        self.assertEqual(people_capacity_factor(0, 50, 0), 1.0)

    def test_trial_ranges_from_inputs(self):
        ranges = TrialRanges.from_inputs(_inputs(employees_supported=100))
        # 400 of 450 base hours come from volume / productivity
        self.assertAlmostEqual(ranges.work_unit_share, 400 / 450)
        self.assertAlmostEqual(ranges.workload_multiplier(750, 15), 1.0)
        self.assertAlmostEqual(ranges.workload_multiplier(1000, 15), 1 + (400 / 450) * (1000 / 750 - 1))
        self.assertAlmostEqual(ranges.typical_people_capacity(), 0.95 * 0.98)
        self.assertTrue(ranges.has_work_units)

    def test_trial_ranges_without_work_units(self):
        ranges = TrialRanges.from_inputs(WorkloadInputs(volume=None, productivity=None, sites=10))
        self.assertFalse(ranges.has_work_units)
        self.assertTrue(ranges.has_people_risk)


class TestBaseline(unittest.TestCase):

    def test_known_scenario(self):
        """750 units, 15 per day, normal complexity, partial automation -> 2."""
        result = compute_baseline(_inputs())
        self.assertEqual(result.fte, 2)
        self.assertEqual(result.headcount, 2)
        self.assertAlmostEqual(result.workload_hours, 400.0)
        self.assertAlmostEqual(result.adjusted_hours, 280.0)
        self.assertAlmostEqual(result.effective_capacity, 136.0)

    def test_deterministic(self):
        inputs = _inputs(complexity="complex", service_level="high")
        self.assertEqual(compute_baseline(inputs), compute_baseline(inputs))

    def test_complex_round_the_clock(self):
        # 400 x 1.4 x 3.0 x 0.7 = 1176 h / 136 = 8.65 -> 9
        result = compute_baseline(_inputs(complexity="complex", coverage="twenty_four_seven"))
        self.assertEqual(result.fte, 9)

    def test_monotonic_in_volume(self):
        previous = 0
        for typical in (100, 500, 1000, 2000, 4000, 8000):
            fte = compute_baseline(_inputs(volume=RangeValue(typical, typical, typical))).fte
            self.assertGreaterEqual(fte, previous)
            previous = fte

    def test_never_below_one(self):
        self.assertEqual(compute_baseline(WorkloadInputs(volume=None, productivity=None, automation_level="highly_automated")).fte, 1)

    def test_work_type_coefficients(self):
        coefficients = DEFAULT_CATALOG.get_coefficients("security_safety")
        result = compute_baseline(_inputs(), coefficients=coefficients)
        # 400 x 1.2 x 0.7 = 336 h over 160 x 0.85 x 0.5 = 68 h -> 4.94
        self.assertAlmostEqual(result.adjusted_hours, 336.0)
        self.assertAlmostEqual(result.effective_capacity, 68.0)
        self.assertEqual(result.fte, 5)
        self.assertEqual(result.factors["work_type_productivity"], 0.5)
        self.assertIn("Work type complexity (Security / Safety / Emergency Response): 1.2×", result.rationale)
        self.assertIn("Work type productivity (Security / Safety / Emergency Response): 0.5×", result.rationale)

    def test_workload_scale(self):
        result = compute_baseline(_inputs(), workload_scale=1.4)
        self.assertAlmostEqual(result.workload_hours, 560.0)
        self.assertEqual(result.fte, 3)
        self.assertIn("Size of operation scale: 1.4×", result.rationale)

    def test_rationale(self):
        rationale = compute_baseline(_inputs()).rationale
        self.assertTrue(rationale.startswith("Baseline Calculation (Deterministic):"))
        self.assertIn("Base Workload: 400 hours/month", rationale)
        self.assertIn("Automation (partially automated): -30%", rationale)
        self.assertIn("Capacity per FTE: 136 hrs (85% utilization)", rationale)
        self.assertIn("Baseline FTE: 2", rationale)

    def test_to_dict(self):
        data = compute_baseline(_inputs()).to_dict()
        self.assertEqual(data["fte"], 2)
        self.assertEqual(data["factors"]["utilization"], 0.85)
        self.assertEqual(data["adjusted_hours"], 280.0)

    def test_invalid_arguments(self):
        with self.assertRaises(ConfigurationError):
            compute_baseline(None)
        with self.assertRaises(ConfigurationError):
            compute_baseline(_inputs(), utilization=0)


if __name__ == "__main__":
    unittest.main()
