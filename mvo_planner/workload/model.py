"""
PURPOSE: Workload model shared by the baseline estimator and the Monte Carlo engine.

RESPONSIBILITIES:
- Assemble monthly base workload hours from the raw drivers
- Look up the complexity / service / automation / coverage factors
- Turn base hours plus factors (and optional per-trial samples) into
  required hours, FTE and trial duration
- Carry the per-trial spreads of volume, productivity and people risk

All functions accept floats or numpy arrays so the engine can evaluate every
trial in one vectorised call.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Union

import numpy as np

from mvo_planner.monte_carlo.config import (
    AVAILABLE_HOURS_PER_FTE,
    CALENDAR_DAYS_PER_MONTH,
    HOURS_PER_DAY,
    HOURS_PER_EMPLOYEE_SUPPORTED,
    HOURS_PER_SITE,
    MIN_FTE,
    MIN_WORKLOAD_HOURS,
    MINUTES_PER_TRANSACTION,
    TIMEZONE_SURCHARGE,
)
from mvo_planner.workload.inputs import RangeValue, WorkloadInputs
from mvo_planner.workload.work_types import WorkTypeCoefficients

logger = logging.getLogger(__name__)

Number = Union[float, np.ndarray]

COMPLEXITY_FACTORS = {
    "very_simple": 0.8,
    "normal": 1.0,
    "complex": 1.4,
    "highly_complex": 1.8,
}

SERVICE_LEVEL_FACTORS = {
    "basic": 0.9,
    "normal": 1.0,
    "high": 1.2,
    "critical": 1.5,
}

AUTOMATION_FACTORS = {
    "manual": 0.0,
    "partially_automated": 0.3,
    "highly_automated": 0.6,
}

COVERAGE_FACTORS = {
    "office_hours": 1.0,
    "extended_hours": 1.5,
    "twenty_four_seven": 3.0,
}


@dataclass(frozen=True)
class WorkloadFactors:
    """Deterministic multipliers for one sub-function.

    Attributes:
        complexity: Multiplier on hours.
        service: Service level multiplier on hours.
        automation: Fraction of hours removed by automation (0..1).
        coverage: Coverage pattern multiplier on hours.
    """
    complexity: float
    service: float
    automation: float
    coverage: float

    def to_dict(self):
        return {
            "complexity": self.complexity,
            "service": self.service,
            "automation": self.automation,
            "coverage": self.coverage,
        }


def workload_factors(inputs: WorkloadInputs) -> WorkloadFactors:
    return WorkloadFactors(
        complexity=COMPLEXITY_FACTORS[inputs.complexity],
        service=SERVICE_LEVEL_FACTORS[inputs.service_level],
        automation=AUTOMATION_FACTORS[inputs.automation_level],
        coverage=COVERAGE_FACTORS[inputs.coverage],
    )


def work_unit_hours(inputs: WorkloadInputs) -> float:
    """Monthly hours implied by volume and productivity (typical values)."""
    if inputs.volume is None or inputs.productivity is None:
        return 0.0
    person_days = inputs.volume.typical / inputs.productivity.typical
    return person_days * HOURS_PER_DAY


def base_workload_hours(inputs: WorkloadInputs) -> float:
    """
    Monthly base workload in hours.

    Drivers are additive: employees supported x 0.5 h, transactions x 5 min,
    sites x 20 h, and work units / productivity x 8 h. Each extra time zone
    beyond the first adds 15%. The result is never below 100 hours.
    """
    hours = 0.0
    if inputs.employees_supported:
        hours += inputs.employees_supported * HOURS_PER_EMPLOYEE_SUPPORTED
    if inputs.transactions_per_month:
        hours += inputs.transactions_per_month * MINUTES_PER_TRANSACTION / 60
    if inputs.sites:
        hours += inputs.sites * HOURS_PER_SITE
    hours += work_unit_hours(inputs)

    if inputs.time_zones > 1:
        hours *= 1 + (inputs.time_zones - 1) * TIMEZONE_SURCHARGE

    return max(hours, MIN_WORKLOAD_HOURS)


def compute_required_hours(
    base_hours: float,
    factors: WorkloadFactors,
    sample: Optional[Mapping[str, Number]] = None,
    coefficients: Optional[WorkTypeCoefficients] = None,
    noise: Optional[Number] = None,
) -> Number:
    """
    Apply the factors to the base workload.

    Order: workload variance, then complexity x service x coverage, then
    (1 - automation). With coefficients the complexity is additionally scaled
    by the work type's complexity factor, and when a noise draw is supplied
    the hours are multiplied by noise x risk multiplier. Only the Monte Carlo
    path supplies noise.

    Args:
        base_hours: Monthly base workload.
        factors: Deterministic factors.
        sample: Optional relative multipliers "workload_volume",
            "complexity_factor", "service_factor" and the absolute
            "automation_factor". Missing keys leave the factor unchanged.
        coefficients: Optional work-type coefficients.
        noise: Optional N(1, variance_level) draw(s).

    Returns:
        Required hours (float or array, matching the sample shapes).
    """
    sample = sample or {}
    workload_variance = sample.get("workload_volume", 1.0)
    complexity = factors.complexity * sample.get("complexity_factor", 1.0)
    service = factors.service * sample.get("service_factor", 1.0)
    automation = sample.get("automation_factor", factors.automation)

    if coefficients is not None:
        complexity = complexity * coefficients.complexity_factor

    hours = base_hours * workload_variance
    hours = hours * complexity * service * factors.coverage
    hours = hours * (1 - automation)

    if coefficients is not None and noise is not None:
        hours = hours * noise * coefficients.risk_multiplier
    return hours


def effective_utilization(utilization: Number, coefficients: Optional[WorkTypeCoefficients] = None) -> Number:
    if coefficients is not None:
        return utilization * coefficients.productivity_rate
    return utilization


def required_fte(
    hours: Number,
    utilization: Number,
    coefficients: Optional[WorkTypeCoefficients] = None,
    floor: bool = True,
) -> Number:
    """FTE = hours / (160 x utilization), at least 1 unless floor is False."""
    capacity = AVAILABLE_HOURS_PER_FTE * effective_utilization(utilization, coefficients)
    fte = hours / capacity
    if floor:
        return np.maximum(fte, MIN_FTE) if isinstance(fte, np.ndarray) else max(fte, MIN_FTE)
    return fte


def trial_duration_days(fte: Number) -> Number:
    """
    Calendar days one person would need for the trial's monthly workload.

    Scenario evaluation divides this by sqrt(headcount). The scale is set so a
    team of exactly the trial's unrounded FTE clears the month's work in one
    calendar month: CALENDAR_DAYS_PER_MONTH x sqrt(fte).
    """
    return CALENDAR_DAYS_PER_MONTH * np.sqrt(fte)


def people_capacity_factor(absenteeism: Number, ramp_up: Number, turnover: Number) -> Number:
    """Share of capacity left after absence and new-joiner ramp-up (inputs in percent)."""
    return (1 - absenteeism / 100) * (1 - (ramp_up / 100) * (turnover / 100))


@dataclass(frozen=True)
class TrialRanges:
    """Three-point estimates the engine samples per trial on top of the variables.

    Attributes:
        volume: Work units per month, or None when the workload has no unit driver.
        productivity: Units per person per day, or None with volume.
        work_unit_share: Fraction of base hours that comes from volume / productivity.
        absenteeism: Percent of time absent.
        ramp_up: Percent productivity lost while new joiners ramp up.
        turnover: Percent of the team replaced per year.
    """
    volume: Optional[RangeValue] = None
    productivity: Optional[RangeValue] = None
    work_unit_share: float = 0.0
    absenteeism: Optional[RangeValue] = None
    ramp_up: Optional[RangeValue] = None
    turnover: Optional[RangeValue] = None

    @classmethod
    def from_inputs(cls, inputs: WorkloadInputs) -> "TrialRanges":
        base_hours = base_workload_hours(inputs)
        unit_hours = work_unit_hours(inputs)
        if inputs.time_zones > 1:
            unit_hours *= 1 + (inputs.time_zones - 1) * TIMEZONE_SURCHARGE
        return cls(
            volume=inputs.volume,
            productivity=inputs.productivity,
            work_unit_share=min(1.0, unit_hours / base_hours),
            absenteeism=inputs.absenteeism,
            ramp_up=inputs.ramp_up,
            turnover=inputs.turnover,
        )

    @property
    def has_work_units(self) -> bool:
        return self.volume is not None and self.productivity is not None and self.work_unit_share > 0

    @property
    def has_people_risk(self) -> bool:
        return None not in (self.absenteeism, self.ramp_up, self.turnover)

    def typical_people_capacity(self) -> float:
        if not self.has_people_risk:
            return 1.0
        return people_capacity_factor(self.absenteeism.typical, self.ramp_up.typical, self.turnover.typical)

    def workload_multiplier(self, volume: Number, productivity: Number) -> Number:
        """Scale on base hours for sampled volume and productivity (1.0 at the typical values)."""
        ratio = (volume / self.volume.typical) * (self.productivity.typical / productivity)
        return 1 + self.work_unit_share * (ratio - 1)
