"""
Tests for sensitivity ranking and output serialization.
"""

import unittest

from mvo_planner.monte_carlo.outputs import SimulationResult
from mvo_planner.monte_carlo.sensitivity import SensitivityAnalyzer
from mvo_planner.monte_carlo.simulation import MonteCarloEngine
from mvo_planner.monte_carlo.variables import DEFAULT_MONTE_CARLO_INPUTS

BASE_ARGS = (400.0, 1.0, 1.0, 0.3, 1.0)


def _only_enabled(key, iterations=3000):
    inputs = DEFAULT_MONTE_CARLO_INPUTS.with_iterations(iterations).all_disabled()
    return inputs.with_variable(key, DEFAULT_MONTE_CARLO_INPUTS.variable(key))


class TestSensitivityAnalyzer(unittest.TestCase):

    def test_single_enabled_variable_ranks_first(self):
        output = MonteCarloEngine(seed=3).run(*BASE_ARGS, inputs=_only_enabled("complexity_factor"))
        drivers = SensitivityAnalyzer().analyze(output)
        self.assertEqual(len(drivers), 5)
        self.assertEqual(drivers[0].name, "complexity_factor")
        self.assertEqual(drivers[0].label, "Complexity Factor")
        self.assertEqual(drivers[0].rank, 1)
        self.assertGreater(drivers[0].sensitivity_score, 0.5)
        for driver in drivers[1:]:
            self.assertEqual(driver.sensitivity_score, 0.0)

    def test_deterministic_run_scores_zero(self):
        inputs = DEFAULT_MONTE_CARLO_INPUTS.with_iterations(200).all_disabled()
        output = MonteCarloEngine().run(*BASE_ARGS, inputs=inputs)
        drivers = SensitivityAnalyzer().analyze(output)
        self.assertTrue(all(d.sensitivity_score == 0.0 for d in drivers))
        self.assertEqual([d.rank for d in drivers], [1, 2, 3, 4, 5])

    def test_top_n_and_table(self):
        output = MonteCarloEngine(seed=8).run(*BASE_ARGS, inputs=DEFAULT_MONTE_CARLO_INPUTS.with_iterations(1000))
        drivers = SensitivityAnalyzer(top_n=2).analyze(output)
        self.assertEqual(len(drivers), 2)
        self.assertGreaterEqual(drivers[0].sensitivity_score, drivers[1].sensitivity_score)
        table = SensitivityAnalyzer.to_table(drivers)
        self.assertEqual(table["rank"], [1, 2])
        self.assertEqual(set(table), {"rank", "driver", "sensitivity_score", "variance_contribution"})

    def test_empty_output_raises(self):
        output = MonteCarloEngine(seed=1).run(*BASE_ARGS, inputs=DEFAULT_MONTE_CARLO_INPUTS.with_iterations(10))
        empty = output.__class__(
            results=[],
            statistics=output.statistics,
            confidence_interval=output.confidence_interval,
            distribution=output.distribution,
        )
        with self.assertRaises(ValueError):
            SensitivityAnalyzer().analyze(empty)


class TestOutputSerialization(unittest.TestCase):

    def setUp(self):
        self.output = MonteCarloEngine(seed=5).run(*BASE_ARGS, inputs=DEFAULT_MONTE_CARLO_INPUTS.with_iterations(100))

    def test_to_dict_omits_results_by_default(self):
        data = self.output.to_dict()
        self.assertEqual(data["iterations"], 100)
        self.assertNotIn("results", data)
        self.assertEqual(
            set(data["statistics"]),
            {"mean", "median", "mode", "std_dev", "min", "max", "p10", "p25", "p75", "p90"},
        )
        self.assertEqual(data["anomaly_count"], 0)

    def test_to_dict_with_results(self):
        data = self.output.to_dict(include_results=True)
        self.assertEqual(len(data["results"]), 100)
        self.assertEqual(data["results"][0]["iteration"], 1)

    def test_simulation_result_rounding(self):
        result = SimulationResult(iteration=1, fte=2.123456, duration_days=30.06, variables={"complexity_factor": 1.234567})
        self.assertEqual(
            result.to_dict(),
            {"iteration": 1, "fte": 2.123, "duration_days": 30.1, "variables": {"complexity_factor": 1.2346}},
        )


if __name__ == "__main__":
    unittest.main()
