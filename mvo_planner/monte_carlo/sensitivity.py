"""
PURPOSE: Rank the uncertain workload variables by how much of the FTE variance
each one explains.

Uses a first-order, between-group variance decomposition: each variable is
binned into quartiles, and the variance of the per-bin mean FTE is compared
with the total FTE variance. Disabled variables are constant and score 0.

SRP/DRY: Single responsibility = sensitivity analysis only.
         No simulation, no formatting, no recommendation logic.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from mvo_planner.monte_carlo.outputs import MonteCarloOutput

# Display names for the recorded trial variables
VARIABLE_LABELS = {
    "workload_variance": "Workload Volume Variance",
    "complexity_factor": "Complexity Factor",
    "service_factor": "Service Level Factor",
    "automation_reduction": "Automation Impact",
    "utilization_rate": "Utilization Rate",
    "work_unit_load": "Volume / Productivity",
    "people_capacity": "People Risk Capacity",
}


@dataclass(frozen=True)
class SensitivityDriver:
    """One uncertain variable and its share of the FTE variance.

    Attributes:
        name (str): Recorded variable key, e.g. "complexity_factor".
        label (str): Display name.
        sensitivity_score (float): Normalized index in [0, 1].
        variance_contribution (float): Between-group variance of FTE.
        rank (int): 1 = most influential.
    """
    name: str
    label: str
    sensitivity_score: float
    variance_contribution: float
    rank: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "sensitivity_score": round(self.sensitivity_score, 4),
            "variance_contribution": round(self.variance_contribution, 4),
            "rank": self.rank,
        }


class SensitivityAnalyzer:
    """Variance-based ranking of the sampled variables of a Monte Carlo run."""

    def __init__(self, top_n: Optional[int] = None):
        self.top_n = top_n

    def analyze(self, output: MonteCarloOutput) -> List[SensitivityDriver]:
        """
        Rank the recorded variables of a run.

        Args:
            output: A completed MonteCarloOutput.

        Returns:
            Drivers sorted by sensitivity (descending), ties broken by name.

        Raises:
            ValueError: If the run has no trials.
        """
        if not output.results:
            raise ValueError("Monte Carlo output has no results")

        fte = output.fte_values()
        keys = sorted(output.results[0].variables)
        total_variance = float(np.var(fte))

        scores = []
        for key in keys:
            values = np.array([r.variables[key] for r in output.results], dtype=float)
            if total_variance < 1e-10:
                contribution = 0.0
            else:
                contribution = self._between_group_variance(values, fte)
            scores.append((key, contribution))

        scores.sort(key=lambda item: (-item[1], item[0]))
        if self.top_n is not None:
            scores = scores[: self.top_n]

        drivers = []
        for rank, (key, contribution) in enumerate(scores, 1):
            score = 0.0 if total_variance < 1e-10 else min(1.0, max(0.0, contribution / total_variance))
            drivers.append(
                SensitivityDriver(
                    name=key,
                    label=VARIABLE_LABELS.get(key, key),
                    sensitivity_score=score,
                    variance_contribution=contribution,
                    rank=rank,
                )
            )
        return drivers

    @staticmethod
    def _between_group_variance(values: np.ndarray, output: np.ndarray) -> float:
        """Variance of per-quartile mean output, weighted by group size."""
        if np.ptp(values) == 0:
            return 0.0
        edges = np.unique(np.percentile(values, [25, 50, 75]))
        groups = np.digitize(values, edges)
        overall_mean = np.mean(output)
        between = 0.0
        for group_id in np.unique(groups):
            mask = groups == group_id
            between += np.sum(mask) * (np.mean(output[mask]) - overall_mean) ** 2
        return float(between / len(output))

    @staticmethod
    def to_table(drivers: List[SensitivityDriver]) -> Dict[str, List]:
        """Column-oriented form for CSV export."""
        return {
            "rank": [d.rank for d in drivers],
            "driver": [d.label for d in drivers],
            "sensitivity_score": [round(d.sensitivity_score, 4) for d in drivers],
            "variance_contribution": [round(d.variance_contribution, 4) for d in drivers],
        }
