"""
PURPOSE: One explicit recompute of baseline, Monte Carlo and MVO for a
sub-function.

All three results in a SynchronizedResults come from the same WorkloadInputs
snapshot. Nothing is cached: callers recompute when inputs change, either
inline, for a whole list of sub-functions, or in the background through a
concurrent.futures Future.
"""

import logging
import math
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from mvo_planner.errors import ConfigurationError
from mvo_planner.monte_carlo.config import ROUND_COST, ROUND_PROBABILITY
from mvo_planner.monte_carlo.outputs import MonteCarloOutput
from mvo_planner.monte_carlo.sensitivity import SensitivityAnalyzer, SensitivityDriver
from mvo_planner.monte_carlo.simulation import MonteCarloEngine, assess_risk_level, calculate_confidence_level
from mvo_planner.monte_carlo.variables import DEFAULT_MONTE_CARLO_INPUTS, MonteCarloInputs
from mvo_planner.mvo.costs import CostPerFTE, StaffCostTable, default_staff_cost, with_overtime
from mvo_planner.mvo.scenarios import scan
from mvo_planner.mvo.selector import MVOResult, select
from mvo_planner.mvo.strategy import should_calculate_cost, worker_type_for_strategy
from mvo_planner.workload.baseline import BaselineResult, compute_baseline
from mvo_planner.workload.inputs import WorkloadInputs
from mvo_planner.workload.model import TrialRanges, base_workload_hours, workload_factors
from mvo_planner.workload.planning import operation_size_config, planning_type_config, resolve_min_headcount
from mvo_planner.workload.work_types import DEFAULT_CATALOG, WorkTypeCatalog

logger = logging.getLogger(__name__)

MAX_AUTOMATION = 0.95


@dataclass(frozen=True)
class BaselineComparison:
    """Where the baseline headcount sits in the simulated distribution."""
    baseline_within_range: bool
    probability_of_baseline: float
    risk_level: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "baseline_within_range": self.baseline_within_range,
            "probability_of_baseline": round(self.probability_of_baseline, ROUND_PROBABILITY),
            "risk_level": self.risk_level,
        }


@dataclass(frozen=True)
class SynchronizedResults:
    """Baseline, Monte Carlo and MVO computed from one inputs snapshot.

    Attributes:
        inputs: The WorkloadInputs every result was computed from.
        baseline: Deterministic baseline.
        monte_carlo: Simulated FTE distribution.
        mvo: Selected headcount and scenarios.
        comparison: Baseline versus the simulated distribution.
        min_headcount: Floor applied to the scenarios.
        monthly_cost_per_fte: Cost used to price the scenarios.
        recommended_team_cost: Monthly cost of the recommended team under its strategy.
        sensitivity: Uncertain variables ranked by FTE variance explained.
    """
    inputs: WorkloadInputs
    baseline: BaselineResult
    monte_carlo: MonteCarloOutput
    mvo: MVOResult
    comparison: BaselineComparison
    min_headcount: int
    monthly_cost_per_fte: float
    recommended_team_cost: float
    sensitivity: List[SensitivityDriver]

    def to_dict(self, include_results: bool = False) -> Dict[str, Any]:
        return {
            "inputs": self.inputs.to_dict(),
            "baseline": self.baseline.to_dict(),
            "monte_carlo": self.monte_carlo.to_dict(include_results=include_results),
            "mvo": self.mvo.to_dict(),
            "comparison": self.comparison.to_dict(),
            "min_headcount": self.min_headcount,
            "monthly_cost_per_fte": round(self.monthly_cost_per_fte, ROUND_COST),
            "recommended_team_cost": round(self.recommended_team_cost, ROUND_COST),
            "sensitivity": [d.to_dict() for d in self.sensitivity],
        }


def prepare_monte_carlo_inputs(
    inputs: WorkloadInputs,
    monte_carlo_inputs: MonteCarloInputs,
) -> MonteCarloInputs:
    """
    Fit the generic variable ranges to one sub-function.

    The automation range is shifted so its base value matches the
    sub-function's automation level, and the planning type's variance
    multiplier widens the workload volume range around its mode.
    """
    automation = workload_factors(inputs).automation
    prepared = monte_carlo_inputs

    var = prepared.variable("automation_factor")
    if var is not None:
        shift = automation - var.base_value
        prob_range = var.range

        def clip(value):
            return min(MAX_AUTOMATION, max(0.0, value + shift))

        shifted = replace(
            prob_range,
            min=clip(prob_range.min),
            max=clip(prob_range.max),
            most_likely=None if prob_range.most_likely is None else clip(prob_range.most_likely),
        )
        prepared = prepared.with_variable("automation_factor", replace(var, base_value=automation, range=shifted))

    planning = planning_type_config(inputs.planning_type)
    var = prepared.variable("workload_volume")
    if planning is not None and var is not None and planning.variance_multiplier != 1.0:
        widened = var.range.scaled(planning.variance_multiplier)
        widened = replace(widened, min=max(0.0, widened.min))
        prepared = prepared.with_variable("workload_volume", replace(var, range=widened))
    return prepared


def _monthly_cost(inputs: WorkloadInputs, cost_per_fte: CostPerFTE) -> float:
    cost = cost_per_fte(inputs.staff_type, "permanent")
    if isinstance(cost_per_fte, StaffCostTable):
        cost = with_overtime(cost, cost_per_fte.salary(inputs.staff_type), inputs.overtime_hours.typical)
    return cost


def recompute(
    inputs: WorkloadInputs,
    monte_carlo_inputs: MonteCarloInputs = DEFAULT_MONTE_CARLO_INPUTS,
    catalog: WorkTypeCatalog = DEFAULT_CATALOG,
    cost_per_fte: CostPerFTE = default_staff_cost,
    rng: Optional[np.random.Generator] = None,
    seed: Optional[int] = None,
    workers: int = 1,
) -> SynchronizedResults:
    """
    Recompute every result for one sub-function.

    Args:
        inputs: Sub-function snapshot.
        monte_carlo_inputs: Iterations, confidence level and variables.
        catalog: Work-type catalog used for coefficients and floors.
        cost_per_fte: Callable (staff_type, employment_type) -> monthly cost.
        rng: Optional numpy Generator (takes precedence over seed).
        seed: Optional seed for a reproducible run.
        workers: Parallel batches for the Monte Carlo engine.

    Returns:
        SynchronizedResults built from inputs only.

    Raises:
        ConfigurationError: On an unknown work type, planning type, size or staff type.
    """
    coefficients = catalog.get_coefficients(inputs.work_type_id) if inputs.work_type_id else None
    size = operation_size_config(inputs.operation_size)
    planning = planning_type_config(inputs.planning_type)

    baseline = compute_baseline(inputs, coefficients=coefficients, workload_scale=size.workload_scale)
    factors = workload_factors(inputs)
    simulated_hours = base_workload_hours(inputs) * size.workload_scale

    engine = MonteCarloEngine(rng=rng, seed=seed)
    output = engine.run(
        simulated_hours,
        factors.complexity,
        factors.service,
        factors.automation,
        factors.coverage,
        prepare_monte_carlo_inputs(inputs, monte_carlo_inputs),
        coefficients=coefficients,
        workers=workers,
        trial_ranges=TrialRanges.from_inputs(inputs),
    )

    floor = resolve_min_headcount(
        catalog,
        inputs.work_type_id,
        inputs.operation_size,
        inputs.planning_type,
        inputs.existing_headcount,
    )
    scan_center = baseline.fte
    if planning is not None:
        scan_center = max(math.ceil(baseline.fte * size.productivity_scale), size.min_headcount_base)

    monthly_cost = _monthly_cost(inputs, cost_per_fte)
    test_results = scan(
        output,
        scan_center,
        floor,
        inputs.target_deadline_days,
        monthly_cost,
        acceptable_failure_risk=inputs.acceptable_failure_risk,
        max_budget=inputs.max_budget,
        operation_size=inputs.operation_size,
    )
    mvo = select(
        test_results,
        baseline.fte,
        work_mix=inputs.work_mix,
        acceptable_failure_risk=inputs.acceptable_failure_risk,
        automation_level=inputs.automation_level,
        turnover_risk=inputs.turnover.typical,
    )

    team_cost = 0.0
    if should_calculate_cost(mvo.strategy):
        team_cost = mvo.recommended_headcount * cost_per_fte(
            inputs.staff_type, worker_type_for_strategy(mvo.strategy)
        )

    comparison = BaselineComparison(
        baseline_within_range=output.confidence_interval.contains(baseline.fte),
        probability_of_baseline=calculate_confidence_level(baseline.fte, output),
        risk_level=assess_risk_level(baseline.fte, output),
    )

    logger.info(
        "Recomputed %s: baseline %s, simulated mean %.2f, MVO %s",
        inputs.name,
        baseline.fte,
        output.statistics.mean,
        mvo.recommended_headcount,
    )
    return SynchronizedResults(
        inputs=inputs,
        baseline=baseline,
        monte_carlo=output,
        mvo=mvo,
        comparison=comparison,
        min_headcount=floor,
        monthly_cost_per_fte=monthly_cost,
        recommended_team_cost=team_cost,
        sensitivity=SensitivityAnalyzer().analyze(output),
    )


def recompute_all(
    inputs_list: Sequence[WorkloadInputs],
    seed: Optional[int] = None,
    **kwargs,
) -> Dict[str, SynchronizedResults]:
    """
    Recompute every sub-function, keyed by inputs.id.

    Each sub-function gets its own child of SeedSequence(seed), so a seeded
    call is reproducible and the streams never overlap.
    """
    ids = [i.id for i in inputs_list]
    if len(set(ids)) != len(ids):
        raise ConfigurationError("Sub-function ids must be unique")
    children = np.random.SeedSequence(seed).spawn(len(inputs_list))
    return {
        inputs.id: recompute(inputs, rng=np.random.default_rng(child), **kwargs)
        for inputs, child in zip(inputs_list, children)
    }


def recompute_in_background(
    inputs: WorkloadInputs,
    executor: Optional[Executor] = None,
    **kwargs,
) -> Future:
    """
    Run recompute() off the calling thread.

    The returned Future may be abandoned; a superseded result is simply never
    read. Without an executor a single-use worker thread is started.
    """
    if executor is not None:
        return executor.submit(recompute, inputs, **kwargs)
    pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="mvo-recompute")
    future = pool.submit(recompute, inputs, **kwargs)
    pool.shutdown(wait=False)
    return future
