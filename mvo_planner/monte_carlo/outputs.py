"""
PURPOSE: Structured Monte Carlo outputs and their JSON-compatible form.

This module holds the value objects produced by the simulation engine:
per-trial results, summary statistics, the confidence interval and the
histogram. Presentation, export and persistence layers consume to_dict().

SRP/DRY: Single responsibility = output structure and serialization.
         No sampling, no statistics computation.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

import numpy as np

from mvo_planner.monte_carlo.config import ROUND_DURATION, ROUND_FTE, ROUND_PROBABILITY


@dataclass(frozen=True)
class SimulationResult:
    """One Monte Carlo trial.

    Attributes:
        iteration (int): 1-based trial index.
        fte (float): Required FTE for the trial, floored at 1.
        duration_days (float): Working days one FTE needs for the monthly workload.
        variables (dict): Sampled (or base) value of every workload variable.
    """
    iteration: int
    fte: float
    duration_days: float
    variables: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "iteration": self.iteration,
            "fte": round(self.fte, ROUND_FTE),
            "duration_days": round(self.duration_days, ROUND_DURATION),
            "variables": {k: round(v, 4) for k, v in self.variables.items()},
        }


@dataclass(frozen=True)
class MonteCarloStatistics:
    """Summary statistics over the trial FTE values (population std dev)."""
    mean: float
    median: float
    mode: float
    std_dev: float
    min: float
    max: float
    p10: float
    p25: float
    p75: float
    p90: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "mean": round(self.mean, ROUND_FTE),
            "median": round(self.median, ROUND_FTE),
            "mode": round(self.mode, ROUND_FTE),
            "std_dev": round(self.std_dev, ROUND_FTE),
            "min": round(self.min, ROUND_FTE),
            "max": round(self.max, ROUND_FTE),
            "p10": round(self.p10, ROUND_FTE),
            "p25": round(self.p25, ROUND_FTE),
            "p75": round(self.p75, ROUND_FTE),
            "p90": round(self.p90, ROUND_FTE),
        }


@dataclass(frozen=True)
class ConfidenceInterval:
    """Symmetric two-tailed interval: level percent of trials fall in [lower, upper]."""
    level: float
    lower: float
    upper: float

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper

    def to_dict(self) -> Dict[str, float]:
        return {
            "level": self.level,
            "lower": round(self.lower, ROUND_FTE),
            "upper": round(self.upper, ROUND_FTE),
        }


@dataclass(frozen=True)
class Histogram:
    """Equal-width bins over [min, max]; frequencies are percent of all trials."""
    bins: List[float]
    frequencies: List[float]

    def to_dict(self) -> Dict[str, List[float]]:
        return {
            "bins": [round(b, ROUND_FTE) for b in self.bins],
            "frequencies": [round(f, ROUND_PROBABILITY) for f in self.frequencies],
        }


@dataclass(frozen=True)
class MonteCarloOutput:
    """Everything one Monte Carlo run produced.

    Attributes:
        results (list): Per-trial SimulationResult objects.
        statistics (MonteCarloStatistics): Summary of the FTE distribution.
        confidence_interval (ConfidenceInterval): Interval at the configured level.
        distribution (Histogram): FTE histogram.
        anomaly_count (int): Sampled or derived values clamped because they were NaN/inf.
    """
    results: List[SimulationResult]
    statistics: MonteCarloStatistics
    confidence_interval: ConfidenceInterval
    distribution: Histogram
    anomaly_count: int = 0

    @property
    def iterations(self) -> int:
        return len(self.results)

    def fte_values(self) -> np.ndarray:
        return np.array([r.fte for r in self.results], dtype=float)

    def durations(self) -> np.ndarray:
        return np.array([r.duration_days for r in self.results], dtype=float)

    def to_dict(self, include_results: bool = False) -> Dict[str, Any]:
        """Convert to a JSON-compatible dict. Per-trial results are opt-in."""
        data = {
            "iterations": self.iterations,
            "statistics": self.statistics.to_dict(),
            "confidence_interval": self.confidence_interval.to_dict(),
            "distribution": self.distribution.to_dict(),
            "anomaly_count": self.anomaly_count,
        }
        if include_results:
            data["results"] = [r.to_dict() for r in self.results]
        return data
