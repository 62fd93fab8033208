"""
PURPOSE: Per-sub-function workload inputs and the questionnaire answer mapping.

RESPONSIBILITIES:
- WorkloadInputs: immutable, fully defaulted description of one sub-function
- Band tables turning questionnaire answers into min/typical/max ranges
- answers_to_workload_inputs(): the only place answers become engine inputs
"""

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from mvo_planner.errors import ConfigurationError

logger = logging.getLogger(__name__)

COMPLEXITY_LEVELS = ("very_simple", "normal", "complex", "highly_complex")
SERVICE_LEVELS = ("basic", "normal", "high", "critical")
AUTOMATION_LEVELS = ("manual", "partially_automated", "highly_automated")
COVERAGE_PATTERNS = ("office_hours", "extended_hours", "twenty_four_seven")
PRIORITIES = ("lowest_cost", "balanced", "fastest")
OPERATION_SIZES = ("small_lean", "medium_standard", "large_extended")
WORK_SIGNALS = ("routine_processing", "knowledge_work", "operational_support")


@dataclass(frozen=True)
class RangeValue:
    """Three-point estimate."""
    min: float
    typical: float
    max: float

    def __post_init__(self):
        if not self.min <= self.typical <= self.max:
            raise ConfigurationError(
                f"Range must satisfy min <= typical <= max, got {self.min}/{self.typical}/{self.max}"
            )

    def to_dict(self):
        return {"min": self.min, "typical": self.typical, "max": self.max}


def _check_choice(label: str, value: Optional[str], choices) -> None:
    if value is not None and value not in choices:
        raise ConfigurationError(f"Unknown {label} {value!r}. Must be one of {', '.join(choices)}")


@dataclass(frozen=True)
class WorkloadInputs:
    """Everything the engine needs to size one sub-function.

    Every field has a default so the model is always computable. Percentages
    (absenteeism, turnover, ramp-up, acceptable_failure_risk, work_mix) are
    in 0..100. Volume is work units per month and productivity is units per
    person per day.
    """
    id: str = "default"
    name: str = "Sub-function"
    work_type_id: Optional[str] = None
    volume: Optional[RangeValue] = RangeValue(1000, 1500, 2000)
    complexity: str = "normal"
    productivity: Optional[RangeValue] = RangeValue(10, 15, 20)
    absenteeism: RangeValue = RangeValue(3, 5, 10)
    ramp_up: RangeValue = RangeValue(10, 20, 40)
    turnover: RangeValue = RangeValue(5, 10, 20)
    overtime_hours: RangeValue = RangeValue(5, 10, 20)
    target_deadline_days: Optional[float] = 30.0
    acceptable_failure_risk: float = 15.0
    priority: str = "balanced"
    employees_supported: Optional[float] = None
    transactions_per_month: Optional[float] = None
    sites: Optional[float] = None
    time_zones: int = 1
    service_level: str = "normal"
    automation_level: str = "partially_automated"
    coverage: str = "office_hours"
    work_mix: Mapping[str, float] = field(default_factory=dict)
    staff_type: str = "executive"
    max_budget: Optional[float] = None
    planning_type: Optional[str] = None
    operation_size: str = "medium_standard"
    existing_headcount: Optional[int] = None

    def __post_init__(self):
        _check_choice("complexity", self.complexity, COMPLEXITY_LEVELS)
        _check_choice("service level", self.service_level, SERVICE_LEVELS)
        _check_choice("automation level", self.automation_level, AUTOMATION_LEVELS)
        _check_choice("coverage", self.coverage, COVERAGE_PATTERNS)
        _check_choice("priority", self.priority, PRIORITIES)
        _check_choice("operation size", self.operation_size, OPERATION_SIZES)
        for key in self.work_mix:
            _check_choice("work signal", key, WORK_SIGNALS)
        if not 0 <= self.acceptable_failure_risk <= 100:
            raise ConfigurationError(
                f"acceptable_failure_risk must be in [0, 100], got {self.acceptable_failure_risk}"
            )
        if self.target_deadline_days is not None and self.target_deadline_days <= 0:
            raise ConfigurationError(f"target_deadline_days must be positive, got {self.target_deadline_days}")
        if self.time_zones < 1:
            raise ConfigurationError(f"time_zones must be at least 1, got {self.time_zones}")
        if self.productivity is not None and self.productivity.min <= 0:
            raise ConfigurationError("productivity must be positive")
        if self.volume is not None and self.volume.min < 0:
            raise ConfigurationError("volume must not be negative")
        for label in ("absenteeism", "ramp_up", "turnover"):
            value = getattr(self, label)
            if not (0 <= value.min and value.max <= 100):
                raise ConfigurationError(f"{label} must be a percentage in [0, 100], got {value.to_dict()}")

    def with_changes(self, **changes) -> "WorkloadInputs":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for name in self.__dataclass_fields__:
            value = getattr(self, name)
            if isinstance(value, RangeValue):
                value = value.to_dict()
            elif name == "work_mix":
                value = dict(value)
            data[name] = value
        return data


# Questionnaire band tables

VOLUME_BANDS = {
    "under_200": RangeValue(80, 120, 200),
    "200_500": RangeValue(200, 350, 500),
    "500_1000": RangeValue(500, 750, 1000),
    "1000_2500": RangeValue(1000, 1800, 2500),
    "over_2500": RangeValue(2500, 3000, 4000),
    "under_100": RangeValue(50, 80, 100),
    "100_300": RangeValue(100, 200, 300),
    "300_800": RangeValue(300, 550, 800),
    "800_1500": RangeValue(800, 1150, 1500),
    "over_1500": RangeValue(1500, 2500, 4000),
}

PRODUCTIVITY_BANDS = {
    "under_5": RangeValue(2, 3, 5),
    "5_10": RangeValue(5, 7, 10),
    "10_20": RangeValue(10, 15, 20),
    "over_20": RangeValue(20, 30, 50),
}

# How much better / worse productivity gets in good / bad conditions
GOOD_CASE_MULTIPLIERS = {"slightly": 1.1, "twenty_percent": 1.2, "fifty_percent": 1.5, "double": 2.0}
BAD_CASE_MULTIPLIERS = {"slightly": 0.9, "twenty_percent": 0.8, "fifty_percent": 0.5, "double": 0.4}

ABSENTEEISM_BANDS = {
    "0": RangeValue(0, 1, 2),
    "1": RangeValue(2, 5, 8),
    "2": RangeValue(5, 10, 15),
    "3_or_more": RangeValue(10, 15, 25),
}

RAMP_UP_BANDS = {
    "under_1_month": RangeValue(5, 10, 15),
    "1_2_months": RangeValue(10, 20, 30),
    "3_6_months": RangeValue(20, 35, 50),
    "over_6_months": RangeValue(30, 50, 70),
}

TEAM_STABILITY_BANDS = {
    "very_stable": RangeValue(2, 5, 10),
    "normal": RangeValue(5, 10, 20),
    "high_turnover": RangeValue(15, 25, 40),
}

OVERTIME_BANDS = {
    "none": RangeValue(0, 0, 5),
    "occasional": RangeValue(5, 10, 20),
    "frequent": RangeValue(15, 30, 50),
}

DEADLINE_DAYS = {
    "1_week": 7,
    "2_weeks": 14,
    "1_month": 30,
    "3_months": 90,
    "ongoing": 90,
}

IMPACT_RISK = {"low": 20, "medium": 15, "high": 10}
PRIORITY_RISK = {"lowest_cost": 20, "balanced": 15, "fastest": 10}

# Questionnaire work types and the catalog entry each one is sized with
HR_WORK_TYPE_CATALOG_IDS = {
    "payroll": "hr_people_ops",
    "recruitment": "hr_people_ops",
    "customer_service": "customer_tenant_support",
    "operations": "operational_onsite",
    "maintenance": "maintenance_engineering",
    "admin": "administrative_compliance",
    "security": "security_safety",
    "finance": "finance_accounting",
    "other": None,
}


@dataclass(frozen=True)
class HRAnswers:
    """Raw questionnaire answers for one sub-function."""
    work_type: str = "other"
    complexity: str = "normal"
    volume: str = "500_1000"
    productivity_rate: str = "10_20"
    productivity_good_case: str = "twenty_percent"
    productivity_bad_case: str = "twenty_percent"
    absentee_rate: str = "1"
    ramp_up_time: str = "1_2_months"
    team_stability: str = "normal"
    staff_type: str = "executive"
    overtime_frequency: str = "occasional"
    deadline: str = "1_month"
    impact_level: str = "medium"
    priority: str = "balanced"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3), unlike round()."""
    return int(math.floor(value + 0.5))


def _lookup(table: Mapping[str, Any], key: str, label: str):
    try:
        return table[key]
    except KeyError:
        raise ConfigurationError(f"Unknown {label} answer {key!r}. Must be one of {', '.join(table)}") from None


def apply_productivity_modifiers(base: RangeValue, good_case: str, bad_case: str) -> RangeValue:
    """Spread the typical productivity by the good/bad case answers."""
    high = _lookup(GOOD_CASE_MULTIPLIERS, good_case, "productivity good case")
    low = _lookup(BAD_CASE_MULTIPLIERS, bad_case, "productivity bad case")
    return RangeValue(
        min=round_half_up(base.typical * low),
        typical=base.typical,
        max=round_half_up(base.typical * high),
    )


def acceptable_risk_for(impact_level: str, priority: str) -> float:
    """The stricter of the impact-based and priority-based failure tolerances."""
    return float(min(
        _lookup(IMPACT_RISK, impact_level, "impact level"),
        _lookup(PRIORITY_RISK, priority, "priority"),
    ))


def answers_to_workload_inputs(answers: HRAnswers, **overrides) -> WorkloadInputs:
    """
    Convert questionnaire answers into WorkloadInputs.

    Args:
        answers: The sub-function's answers.
        **overrides: Extra WorkloadInputs fields (id, name, drivers, work_mix...).

    Returns:
        WorkloadInputs built from the band tables.

    Raises:
        ConfigurationError: If an answer is not one of the known bands.
    """
    base_productivity = _lookup(PRODUCTIVITY_BANDS, answers.productivity_rate, "productivity rate")
    fields = {
        "work_type_id": _lookup(HR_WORK_TYPE_CATALOG_IDS, answers.work_type, "work type"),
        "volume": _lookup(VOLUME_BANDS, answers.volume, "volume"),
        "complexity": answers.complexity,
        "productivity": apply_productivity_modifiers(
            base_productivity, answers.productivity_good_case, answers.productivity_bad_case
        ),
        "absenteeism": _lookup(ABSENTEEISM_BANDS, answers.absentee_rate, "absentee rate"),
        "ramp_up": _lookup(RAMP_UP_BANDS, answers.ramp_up_time, "ramp-up time"),
        "turnover": _lookup(TEAM_STABILITY_BANDS, answers.team_stability, "team stability"),
        "overtime_hours": _lookup(OVERTIME_BANDS, answers.overtime_frequency, "overtime frequency"),
        "target_deadline_days": float(_lookup(DEADLINE_DAYS, answers.deadline, "deadline")),
        "acceptable_failure_risk": acceptable_risk_for(answers.impact_level, answers.priority),
        "priority": answers.priority,
        "staff_type": answers.staff_type,
    }
    fields.update(overrides)
    logger.debug("Mapped questionnaire answers for %s: %s", fields.get("name", "sub-function"), answers)
    return WorkloadInputs(**fields)
