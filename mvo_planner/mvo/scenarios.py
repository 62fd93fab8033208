"""
PURPOSE: Headcount scenario evaluation.

For each candidate headcount the simulated trial durations (calendar days) are
rescaled by 1/sqrt(h) (doubling staff does not halve duration), costed, and checked
against the deadline, the minimum headcount floor and the budget.

SINGLE RESPONSIBILITY:
- One immutable HeadcountTestResult per candidate
- No selection logic (see selector.py); scan() only widens the candidate
  range until some headcount qualifies
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from mvo_planner.errors import ConfigurationError
from mvo_planner.monte_carlo.config import (
    DEFAULT_ACCEPTABLE_FAILURE_RISK,
    ROUND_COST,
    ROUND_DURATION,
    ROUND_PROBABILITY,
    CALENDAR_DAYS_PER_MONTH,
    MAX_SCAN_MULTIPLE,
    SCAN_OFFSETS,
    risk_bucket,
)
from mvo_planner.monte_carlo.outputs import MonteCarloOutput, SimulationResult
from mvo_planner.monte_carlo.simulation import calculate_percentile

logger = logging.getLogger(__name__)

Trials = Union[MonteCarloOutput, Sequence[SimulationResult], np.ndarray, Sequence[float]]


@dataclass(frozen=True)
class HeadcountTestResult:
    """Outcome of running the simulated trials at one headcount.

    Durations are calendar days, costs are total cost over the simulated
    duration, probabilities are percent.
    """
    headcount: int
    iterations: int
    avg_duration: float
    min_duration: float
    max_duration: float
    p50_duration: float
    p75_duration: float
    p90_duration: float
    avg_cost: float
    min_cost: float
    max_cost: float
    deadline_met_probability: float
    failure_risk: float
    within_budget_probability: float
    risk_level: str
    rejected: bool = False
    rejection_reason: Optional[str] = None
    min_headcount_applied: bool = False
    min_headcount_value: Optional[int] = None

    @property
    def success_rate(self) -> float:
        return self.deadline_met_probability

    def to_dict(self) -> Dict[str, Any]:
        return {
            "headcount": self.headcount,
            "iterations": self.iterations,
            "avg_duration": round(self.avg_duration, ROUND_DURATION),
            "min_duration": round(self.min_duration, ROUND_DURATION),
            "max_duration": round(self.max_duration, ROUND_DURATION),
            "p50_duration": round(self.p50_duration, ROUND_DURATION),
            "p75_duration": round(self.p75_duration, ROUND_DURATION),
            "p90_duration": round(self.p90_duration, ROUND_DURATION),
            "avg_cost": round(self.avg_cost, ROUND_COST),
            "min_cost": round(self.min_cost, ROUND_COST),
            "max_cost": round(self.max_cost, ROUND_COST),
            "deadline_met_probability": round(self.deadline_met_probability, ROUND_PROBABILITY),
            "failure_risk": round(self.failure_risk, ROUND_PROBABILITY),
            "within_budget_probability": round(self.within_budget_probability, ROUND_PROBABILITY),
            "risk_level": self.risk_level,
            "rejected": self.rejected,
            "rejection_reason": self.rejection_reason,
            "min_headcount_applied": self.min_headcount_applied,
            "min_headcount_value": self.min_headcount_value,
        }


def _durations(trials: Trials) -> np.ndarray:
    if isinstance(trials, MonteCarloOutput):
        return trials.durations()
    if isinstance(trials, np.ndarray):
        return trials.astype(float)
    items = list(trials)
    if items and isinstance(items[0], SimulationResult):
        return np.array([r.duration_days for r in items], dtype=float)
    return np.array(items, dtype=float)


def candidate_headcounts(baseline: int, floor: int = 1, operation_size: str = "medium_standard") -> List[int]:
    """
    Headcounts to test around the baseline.

    Scans baseline - lower .. max(baseline, floor) + upper where the offsets
    depend on the size of operation (small 1/3, medium 2/5, large 3/7).
    """
    try:
        lower, upper = SCAN_OFFSETS[operation_size]
    except KeyError:
        raise ConfigurationError(f"Unknown operation size {operation_size!r}") from None
    start = max(1, baseline - lower)
    end = max(baseline, floor) + upper
    return list(range(start, end + 1))


def _measure(durations: np.ndarray, headcount: int, target_deadline_days, cost_per_fte, max_budget) -> Dict[str, Any]:
    scaled = durations / math.sqrt(headcount)
    costs = headcount * cost_per_fte * (scaled / CALENDAR_DAYS_PER_MONTH)
    n = len(scaled)

    if target_deadline_days is None:
        met = 100.0
    else:
        met = float(np.count_nonzero(scaled <= target_deadline_days)) / n * 100
    met = min(100.0, max(0.0, met))
    failure_risk = min(100.0, max(0.0, 100.0 - met))

    if max_budget is None:
        within_budget = 100.0
    else:
        within_budget = float(np.count_nonzero(costs <= max_budget)) / n * 100

    sorted_durations = np.sort(scaled)
    return {
        "headcount": headcount,
        "iterations": n,
        "avg_duration": float(np.mean(scaled)),
        "min_duration": float(sorted_durations[0]),
        "max_duration": float(sorted_durations[-1]),
        "p50_duration": calculate_percentile(sorted_durations, 50),
        "p75_duration": calculate_percentile(sorted_durations, 75),
        "p90_duration": calculate_percentile(sorted_durations, 90),
        "avg_cost": float(np.mean(costs)),
        "min_cost": float(np.min(costs)),
        "max_cost": float(np.max(costs)),
        "deadline_met_probability": met,
        "failure_risk": failure_risk,
        "within_budget_probability": within_budget,
        "risk_level": risk_bucket(failure_risk),
    }


def evaluate(
    trials: Trials,
    candidate_headcounts: Sequence[int],
    min_headcount_rule: int,
    target_deadline_days: Optional[float],
    cost_per_fte: float,
    acceptable_failure_risk: float = DEFAULT_ACCEPTABLE_FAILURE_RISK,
    max_budget: Optional[float] = None,
) -> List[HeadcountTestResult]:
    """
    Evaluate every candidate headcount against the same simulated trials.

    Args:
        trials: Monte Carlo output, its results, or raw trial durations.
        candidate_headcounts: Headcounts to test (any order, duplicates removed).
        min_headcount_rule: Hard floor. Candidates below it are always rejected.
        target_deadline_days: Deadline in calendar days (None = no deadline).
        cost_per_fte: Monthly cost of one FTE.
        acceptable_failure_risk: Maximum failure risk in percent.
        max_budget: Optional budget on average cost.

    Returns:
        One HeadcountTestResult per candidate, ascending by headcount.

    Raises:
        ConfigurationError: On empty trials, a candidate below 1 or a negative cost.
    """
    durations = _durations(trials)
    if durations.size == 0:
        raise ConfigurationError("evaluate requires at least one simulated trial")
    if cost_per_fte < 0:
        raise ConfigurationError(f"cost_per_fte must not be negative, got {cost_per_fte}")
    headcounts = sorted(set(int(h) for h in candidate_headcounts))
    if headcounts and headcounts[0] < 1:
        raise ConfigurationError(f"candidate headcounts must be at least 1, got {headcounts[0]}")

    measured = [_measure(durations, h, target_deadline_days, cost_per_fte, max_budget) for h in headcounts]

    def passes(m):
        over_budget = max_budget is not None and m["avg_cost"] > max_budget
        return m["failure_risk"] <= acceptable_failure_risk and not over_budget

    floor_binding = any(m["headcount"] < min_headcount_rule and passes(m) for m in measured)

    results = []
    for m in measured:
        h = m["headcount"]
        reasons = []
        if h < min_headcount_rule:
            reasons.append(f"Below minimum headcount floor of {min_headcount_rule}")
        if m["failure_risk"] > acceptable_failure_risk:
            reasons.append(
                f"Failure risk {m['failure_risk']:.1f}% exceeds threshold {acceptable_failure_risk:g}%"
            )
        if max_budget is not None and m["avg_cost"] > max_budget:
            reasons.append(f"Average cost RM{round(m['avg_cost']):,} exceeds budget RM{round(max_budget):,}")

        applied = floor_binding and h == min_headcount_rule
        result = HeadcountTestResult(
            **m,
            rejected=bool(reasons),
            rejection_reason="; ".join(reasons) if reasons else None,
            min_headcount_applied=applied,
            min_headcount_value=min_headcount_rule if (h < min_headcount_rule or applied) else None,
        )
        logger.debug(
            "Headcount %s: failure risk %.1f%%, avg duration %.1f days, rejected=%s",
            h,
            result.failure_risk,
            result.avg_duration,
            result.rejected,
        )
        results.append(result)
    return results


def qualifies(result: HeadcountTestResult, confidence_target: float) -> bool:
    """Not rejected and meets the deadline with at least confidence_target percent."""
    return not result.rejected and result.deadline_met_probability >= confidence_target


def scan(
    trials: Trials,
    baseline: int,
    min_headcount_rule: int,
    target_deadline_days: Optional[float],
    cost_per_fte: float,
    acceptable_failure_risk: float = DEFAULT_ACCEPTABLE_FAILURE_RISK,
    max_budget: Optional[float] = None,
    operation_size: str = "medium_standard",
    confidence_target: Optional[float] = None,
) -> List[HeadcountTestResult]:
    """
    Evaluate the candidate range around the baseline, then keep extending it
    upwards until some headcount qualifies.

    Each extension adds the size-of-operation upper offset. Failure risk only
    falls and average cost only rises with headcount, so the scan stops once
    the top row is over budget, and never goes past MAX_SCAN_MULTIPLE times
    the initial top candidate.

    Returns:
        Every evaluated row, ascending by headcount.
    """
    if confidence_target is None:
        confidence_target = 100.0 - acceptable_failure_risk
    candidates = candidate_headcounts(baseline, min_headcount_rule, operation_size)
    step = SCAN_OFFSETS[operation_size][1]
    limit = candidates[-1] * MAX_SCAN_MULTIPLE

    def run(headcounts):
        return evaluate(
            trials,
            headcounts,
            min_headcount_rule,
            target_deadline_days,
            cost_per_fte,
            acceptable_failure_risk=acceptable_failure_risk,
            max_budget=max_budget,
        )

    results = run(candidates)
    while not any(qualifies(r, confidence_target) for r in results):
        top = results[-1]
        over_budget = max_budget is not None and top.avg_cost > max_budget
        if over_budget or top.headcount >= limit:
            break
        extension = range(top.headcount + 1, min(limit, top.headcount + step) + 1)
        logger.info("No headcount up to %s qualifies; extending scan to %s", top.headcount, extension[-1])
        results += run(extension)
    return results
