"""
PURPOSE: Planning-type and size-of-operation tuning applied around the engine.

- Size of operation scales the simulated workload and sets a minimum team base.
- Planning type widens the workload uncertainty and decides how the minimum
  headcount floor is governed (lean, governed, or capped reduction).
"""

import math
from dataclasses import dataclass
from typing import Optional

from mvo_planner.errors import ConfigurationError
from mvo_planner.workload.work_types import WorkTypeCatalog


@dataclass(frozen=True)
class PlanningTypeConfig:
    label: str
    horizon_months: int
    variance_multiplier: float
    min_headcount_mode: str  # "lean", "governed" or "reduction"
    max_reduction_percent: Optional[float] = None


@dataclass(frozen=True)
class OperationSizeConfig:
    label: str
    workload_scale: float
    productivity_scale: float
    min_headcount_base: int


PLANNING_TYPES = {
    "new_project": PlanningTypeConfig("New Project", 3, 1.2, "lean"),
    "new_function": PlanningTypeConfig("New Function", 12, 1.0, "governed"),
    "new_business_unit": PlanningTypeConfig("New Business Unit", 24, 1.3, "governed"),
    "restructuring": PlanningTypeConfig("Restructuring", 12, 1.1, "reduction", max_reduction_percent=0.30),
}

OPERATION_SIZES = {
    "small_lean": OperationSizeConfig("Small / Lean (minimum team)", 0.7, 1.0, 1),
    "medium_standard": OperationSizeConfig("Medium / Standard (normal operations)", 1.0, 1.0, 2),
    "large_extended": OperationSizeConfig("Large / Extended (full scale / growth)", 1.4, 0.9, 3),
}


def planning_type_config(key: Optional[str]) -> Optional[PlanningTypeConfig]:
    if key is None:
        return None
    try:
        return PLANNING_TYPES[key]
    except KeyError:
        raise ConfigurationError(f"Unknown planning type {key!r}") from None


def operation_size_config(key: str) -> OperationSizeConfig:
    try:
        return OPERATION_SIZES[key]
    except KeyError:
        raise ConfigurationError(f"Unknown operation size {key!r}") from None


def resolve_min_headcount(
    catalog: WorkTypeCatalog,
    work_type_id: Optional[str],
    operation_size: str,
    planning_type: Optional[str] = None,
    existing_headcount: Optional[int] = None,
) -> int:
    """
    Hard minimum headcount for a sub-function.

    The floor is the largest of: the work type's minimum rule, the catalog
    minimum for the size of operation, the size base when the planning type
    is governed, and for restructuring the existing headcount less the
    maximum reduction.
    """
    floor = 1
    if work_type_id is not None:
        floor = max(floor, catalog.get_coefficients(work_type_id).min_headcount_rule)
        floor = max(floor, catalog.min_headcount(work_type_id, operation_size))

    planning = planning_type_config(planning_type)
    if planning is not None:
        if planning.min_headcount_mode == "governed":
            floor = max(floor, operation_size_config(operation_size).min_headcount_base)
        elif planning.min_headcount_mode == "reduction" and existing_headcount:
            floor = max(floor, math.ceil(existing_headcount * (1 - planning.max_reduction_percent)))
    return floor
