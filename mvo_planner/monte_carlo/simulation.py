"""
PURPOSE: Core Monte Carlo engine for required-FTE estimation.

Runs N independent trials of the workload model and summarises the resulting
FTE distribution (statistics, percentiles, confidence interval, histogram).

SINGLE RESPONSIBILITY:
- Execute N independent trials for one sub-function
- Sample the enabled uncertain variables, keep disabled ones at base value
- Aggregate results and compute statistics
- Return a MonteCarloOutput (no I/O, no formatting)

CONSTRAINTS:
- No adaptive stopping: exactly inputs.iterations trials
- Configuration is validated once, before the loop
- NaN/inf values are clamped and counted, never abort the batch
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

import numpy as np

from mvo_planner.errors import ConfigurationError
from mvo_planner.monte_carlo.config import HISTOGRAM_BINS, MIN_FTE, RANDOM_SEED, TARGET_UTILIZATION
from mvo_planner.monte_carlo.distributions import DistributionSampler, ProbabilityRange, clamp_non_finite
from mvo_planner.monte_carlo.outputs import (
    ConfidenceInterval,
    Histogram,
    MonteCarloOutput,
    MonteCarloStatistics,
    SimulationResult,
)
from mvo_planner.monte_carlo.variables import DEFAULT_MONTE_CARLO_INPUTS, MonteCarloInputs
from mvo_planner.workload.model import (
    TrialRanges,
    WorkloadFactors,
    compute_required_hours,
    effective_utilization,
    people_capacity_factor,
    required_fte,
    trial_duration_days,
)
from mvo_planner.workload.work_types import WorkTypeCoefficients

logger = logging.getLogger(__name__)


def calculate_percentile(sorted_data: np.ndarray, percentile: float) -> float:
    """Linear interpolation between order statistics at index p/100 x (n - 1)."""
    index = (percentile / 100) * (len(sorted_data) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    if lower == upper:
        return float(sorted_data[lower])
    weight = index - lower
    return float(sorted_data[lower] * (1 - weight) + sorted_data[upper] * weight)


def _bin_indices(data: np.ndarray, low: float, bin_size: float, bin_count: int) -> np.ndarray:
    indices = np.floor((data - low) / bin_size).astype(int)
    return np.clip(indices, 0, bin_count - 1)


def calculate_mode(data: np.ndarray, bin_count: int = HISTOGRAM_BINS) -> float:
    """Midpoint of the most populated of bin_count equal-width bins."""
    low, high = float(np.min(data)), float(np.max(data))
    if high == low:
        return low
    bin_size = (high - low) / bin_count
    counts = np.bincount(_bin_indices(data, low, bin_size, bin_count), minlength=bin_count)
    return low + (int(np.argmax(counts)) + 0.5) * bin_size


def create_histogram(data: np.ndarray, bin_count: int = HISTOGRAM_BINS) -> Histogram:
    """Equal-width histogram over [min, max] with frequencies in percent of trials."""
    low, high = float(np.min(data)), float(np.max(data))
    total = len(data)
    if high == low:
        frequencies = [0.0] * bin_count
        frequencies[0] = 100.0
        return Histogram(bins=[low] * bin_count, frequencies=frequencies)

    bin_size = (high - low) / bin_count
    bins = [low + i * bin_size + bin_size / 2 for i in range(bin_count)]
    counts = np.bincount(_bin_indices(data, low, bin_size, bin_count), minlength=bin_count)
    frequencies = [float(c) / total * 100 for c in counts]
    return Histogram(bins=bins, frequencies=frequencies)


def summarize(fte_values: np.ndarray, confidence_level: float) -> Tuple[MonteCarloStatistics, ConfidenceInterval, Histogram]:
    """Compute statistics, confidence interval and histogram for trial FTEs."""
    sorted_values = np.sort(fte_values)
    mean = float(np.mean(sorted_values))
    statistics = MonteCarloStatistics(
        mean=mean,
        median=calculate_percentile(sorted_values, 50),
        mode=calculate_mode(sorted_values),
        std_dev=float(np.sqrt(np.mean((sorted_values - mean) ** 2))),
        min=float(sorted_values[0]),
        max=float(sorted_values[-1]),
        p10=calculate_percentile(sorted_values, 10),
        p25=calculate_percentile(sorted_values, 25),
        p75=calculate_percentile(sorted_values, 75),
        p90=calculate_percentile(sorted_values, 90),
    )
    alpha = (100 - confidence_level) / 2
    interval = ConfidenceInterval(
        level=confidence_level,
        lower=calculate_percentile(sorted_values, alpha),
        upper=calculate_percentile(sorted_values, 100 - alpha),
    )
    return statistics, interval, create_histogram(sorted_values)


class MonteCarloEngine:
    """
    Monte Carlo engine for required headcount.

    Each trial:
    - Samples every enabled variable from its range (disabled ones use base_value)
    - Applies the workload model to get required hours
    - Converts hours to FTE (floored at 1) and to a calendar-day duration
      calibrated so a team of the unrounded FTE finishes in one month
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = RANDOM_SEED):
        """
        Initialize simulation engine.

        Args:
            rng: numpy Generator to draw from (takes precedence over seed)
            seed: Random seed for reproducibility (None = random)
        """
        self.seed = seed
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def run(
        self,
        base_workload_hours: float,
        complexity: float,
        service: float,
        automation: float,
        coverage: float,
        inputs: MonteCarloInputs = DEFAULT_MONTE_CARLO_INPUTS,
        coefficients: Optional[WorkTypeCoefficients] = None,
        workers: int = 1,
        trial_ranges: Optional[TrialRanges] = None,
    ) -> MonteCarloOutput:
        """
        Execute the simulation.

        Args:
            base_workload_hours: Monthly base workload before factors.
            complexity: Deterministic complexity factor.
            service: Deterministic service level factor.
            automation: Automation reduction used when the automation variable is absent.
            coverage: Coverage factor (never sampled).
            inputs: Iterations, confidence level and uncertain variables.
            coefficients: Optional work-type coefficients (adds work-type noise).
            workers: Number of parallel batches. Each batch gets its own
                SeedSequence child so streams never overlap.
            trial_ranges: Optional per-trial spreads of volume, productivity and
                people risk. Volume and productivity are sampled while the
                workload variable is enabled, people risk while utilization is
                (typical values otherwise).

        Returns:
            MonteCarloOutput with exactly inputs.iterations results.

        Raises:
            ConfigurationError: If iterations/workers are not positive or the
                base workload is not a positive finite number.
        """
        if inputs.iterations <= 0:
            raise ConfigurationError("iterations must be positive")
        if workers < 1:
            raise ConfigurationError("workers must be at least 1")
        if not (math.isfinite(base_workload_hours) and base_workload_hours > 0):
            raise ConfigurationError(f"base workload hours must be positive, got {base_workload_hours}")

        factors = WorkloadFactors(complexity=complexity, service=service, automation=automation, coverage=coverage)
        logger.info(
            "Running Monte Carlo: %s iterations, %s%% confidence, base %.1f hours, workers=%s",
            inputs.iterations,
            inputs.confidence_level,
            base_workload_hours,
            workers,
        )

        if workers == 1:
            batches = [self._simulate_batch(
                self.rng, inputs.iterations, base_workload_hours, factors, inputs, coefficients, trial_ranges
            )]
        else:
            batches = self._run_parallel(workers, base_workload_hours, factors, inputs, coefficients, trial_ranges)

        fte = np.concatenate([b[0] for b in batches])
        durations = np.concatenate([b[1] for b in batches])
        variables = {key: np.concatenate([b[2][key] for b in batches]) for key in batches[0][2]}
        anomaly_count = sum(b[3] for b in batches)

        if anomaly_count:
            logger.warning("Clamped %s non-finite values during Monte Carlo run", anomaly_count)

        results = [
            SimulationResult(
                iteration=i + 1,
                fte=float(fte[i]),
                duration_days=float(durations[i]),
                variables={key: float(values[i]) for key, values in variables.items()},
            )
            for i in range(len(fte))
        ]
        statistics, interval, histogram = summarize(fte, inputs.confidence_level)

        logger.info(
            "Monte Carlo complete: mean %.2f FTE, p10 %.2f, p90 %.2f",
            statistics.mean,
            statistics.p10,
            statistics.p90,
        )
        return MonteCarloOutput(
            results=results,
            statistics=statistics,
            confidence_interval=interval,
            distribution=histogram,
            anomaly_count=anomaly_count,
        )

    def _run_parallel(self, workers, base_workload_hours, factors, inputs, coefficients, trial_ranges):
        if self.seed is not None:
            seed_seq = np.random.SeedSequence(self.seed)
        else:
            seed_seq = np.random.SeedSequence(int(self.rng.integers(0, 2**63 - 1)))
        sizes = [len(chunk) for chunk in np.array_split(np.arange(inputs.iterations), workers)]
        jobs = [
            (np.random.default_rng(child), size)
            for child, size in zip(seed_seq.spawn(workers), sizes)
            if size > 0
        ]
        with ThreadPoolExecutor(max_workers=len(jobs)) as pool:
            futures = [
                pool.submit(
                    self._simulate_batch, rng, size, base_workload_hours, factors, inputs, coefficients, trial_ranges
                )
                for rng, size in jobs
            ]
            return [f.result() for f in futures]

    @staticmethod
    def _simulate_batch(
        rng: np.random.Generator,
        size: int,
        base_workload_hours: float,
        factors: WorkloadFactors,
        inputs: MonteCarloInputs,
        coefficients: Optional[WorkTypeCoefficients],
        trial_ranges: Optional[TrialRanges] = None,
    ) -> Tuple[np.ndarray, np.ndarray, Dict[str, np.ndarray], int]:
        """
        Run one batch of trials.

        Returns:
            Tuple of (fte, duration_days, recorded variables, anomaly count)
        """
        sampler = DistributionSampler(rng=rng)
        anomalies = 0

        def draw(key: str, default: float) -> np.ndarray:
            nonlocal anomalies
            var = inputs.variable(key)
            if var is None:
                return np.full(size, default, dtype=float)
            if not var.enabled:
                return np.full(size, var.base_value, dtype=float)
            values, bad = clamp_non_finite(sampler.sample(var.range, size=size), var.range)
            anomalies += bad
            return values

        def draw_estimate(estimate) -> np.ndarray:
            return sampler.sample(
                ProbabilityRange(estimate.min, estimate.max, estimate.typical, "triangular"), size=size
            )

        sample = {
            "workload_volume": draw("workload_volume", 1.0),
            "complexity_factor": draw("complexity_factor", 1.0),
            "service_factor": draw("service_factor", 1.0),
            "automation_factor": draw("automation_factor", factors.automation),
        }
        utilization = draw("utilization_rate", TARGET_UTILIZATION)
        workload_on = inputs.is_enabled("workload_volume")

        # Work-type noise and risk multiplier follow the workload variance
        # switch, so a run with every variable disabled is fully deterministic.
        noise = None
        if coefficients is not None and workload_on:
            noise = sampler.normal(1.0, coefficients.variance_level, size=size)

        unit_multiplier = np.ones(size)
        people = np.ones(size)
        if trial_ranges is not None:
            if trial_ranges.has_work_units and workload_on:
                unit_multiplier = trial_ranges.workload_multiplier(
                    draw_estimate(trial_ranges.volume), draw_estimate(trial_ranges.productivity)
                )
            if trial_ranges.has_people_risk:
                if inputs.is_enabled("utilization_rate"):
                    people = people_capacity_factor(
                        draw_estimate(trial_ranges.absenteeism),
                        draw_estimate(trial_ranges.ramp_up),
                        draw_estimate(trial_ranges.turnover),
                    )
                else:
                    people = np.full(size, trial_ranges.typical_people_capacity())

        hours = compute_required_hours(base_workload_hours, factors, sample, coefficients, noise) * unit_multiplier
        # Negative noise draws cannot remove more than all the work
        hours = np.maximum(hours, 0.0)

        with np.errstate(divide="ignore", invalid="ignore"):
            raw_fte = required_fte(hours, utilization * people, coefficients, floor=False)
            durations = trial_duration_days(raw_fte)
            fte = np.maximum(raw_fte, MIN_FTE)

        fte, bad_fte = _clamp_derived(fte, MIN_FTE)
        durations, bad_durations = _clamp_derived(durations, 0.0)
        anomalies += bad_fte + bad_durations

        complexity = factors.complexity * sample["complexity_factor"]
        if coefficients is not None:
            complexity = complexity * coefficients.complexity_factor
        recorded = {
            "workload_variance": sample["workload_volume"],
            "complexity_factor": complexity,
            "service_factor": factors.service * sample["service_factor"],
            "automation_reduction": sample["automation_factor"],
            "utilization_rate": effective_utilization(utilization, coefficients),
        }
        if trial_ranges is not None:
            recorded["work_unit_load"] = unit_multiplier
            recorded["people_capacity"] = people
        return fte, durations, recorded, anomalies


def _clamp_derived(values: np.ndarray, floor: float) -> Tuple[np.ndarray, int]:
    """Replace non-finite derived values with the largest finite value (or floor)."""
    bad = ~np.isfinite(values)
    count = int(np.count_nonzero(bad))
    if count == 0:
        return values, 0
    finite = values[~bad]
    fallback = float(np.max(finite)) if finite.size else floor
    values = np.where(bad, fallback, values)
    return np.maximum(values, floor), count


def run_monte_carlo_simulation(
    base_workload_hours: float,
    complexity: float,
    service: float,
    automation: float,
    coverage: float,
    inputs: MonteCarloInputs = DEFAULT_MONTE_CARLO_INPUTS,
    coefficients: Optional[WorkTypeCoefficients] = None,
    random_state: Optional[int] = None,
) -> MonteCarloOutput:
    """Module-level wrapper around MonteCarloEngine.run."""
    engine = MonteCarloEngine(seed=random_state)
    return engine.run(base_workload_hours, complexity, service, automation, coverage, inputs, coefficients)


def calculate_confidence_level(baseline_fte: float, output: MonteCarloOutput) -> float:
    """Percent of trials whose FTE is at or below the baseline headcount."""
    fte = output.fte_values()
    return float(np.count_nonzero(fte <= baseline_fte)) / len(fte) * 100


def assess_risk_level(baseline_fte: float, output: MonteCarloOutput) -> str:
    """
    Rate the baseline against the simulated distribution.

    "low" inside p10..p90, "medium" inside min..max, otherwise "high".
    """
    stats = output.statistics
    if stats.p10 <= baseline_fte <= stats.p90:
        return "low"
    if stats.min <= baseline_fte <= stats.max:
        return "medium"
    return "high"


def trial_durations(results: List[SimulationResult]) -> np.ndarray:
    return np.array([r.duration_days for r in results], dtype=float)
