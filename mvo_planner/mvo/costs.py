"""
PURPOSE: Default monthly cost-per-FTE collaborator.

The scenario evaluator only needs a callable (role_key, employment_type) -> float.
StaffCostTable is the shipped default: the typical monthly salary per staff
type plus employer loading for permanent staff. Callers can pass any other
callable with the same signature.
"""

import logging
from typing import Callable, Mapping, Optional

from mvo_planner.errors import ConfigurationError
from mvo_planner.monte_carlo.config import AVAILABLE_HOURS_PER_FTE, ROUND_COST

logger = logging.getLogger(__name__)

CostPerFTE = Callable[[str, str], float]

# Typical monthly salary (RM) per questionnaire staff type
DEFAULT_SALARIES = {
    "general_worker": 2500.0,
    "clerical": 3500.0,
    "executive": 5000.0,
    "manager": 9000.0,
    "contract": 4500.0,
    "gig": 3000.0,
}

# Employer loading on permanent staff
STATUTORY_RATE = 0.20
GPA_GTL_RATE = 0.04
GHS_RATE = 0.10
MEDICAL_FLAT = 600.0
OVERTIME_PREMIUM = 1.5

EMPLOYMENT_TYPES = ("permanent", "gig", "none")


class StaffCostTable:
    """Monthly cost of one FTE by staff type and employment type.

    permanent = salary + allowance + 20% statutory (on salary + allowance)
                + 4% GPA/GTL + 10% GHS + flat medical
    gig       = salary only
    none      = 0 (automated or outsourced work carries no headcount cost)
    """

    def __init__(self, salaries: Optional[Mapping[str, float]] = None, allowance: float = 0.0):
        self.salaries = dict(DEFAULT_SALARIES if salaries is None else salaries)
        self.allowance = allowance

    def salary(self, role_key: str) -> float:
        try:
            return float(self.salaries[role_key])
        except KeyError:
            raise ConfigurationError(
                f"Unknown staff type {role_key!r}. Must be one of {', '.join(self.salaries)}"
            ) from None

    def __call__(self, role_key: str, employment_type: str = "permanent") -> float:
        if employment_type not in EMPLOYMENT_TYPES:
            raise ConfigurationError(f"Unknown employment type {employment_type!r}")
        if employment_type == "none":
            return 0.0

        salary = self.salary(role_key)
        if employment_type == "gig":
            return round(salary, ROUND_COST)

        statutory = STATUTORY_RATE * (salary + self.allowance)
        loading = statutory + GPA_GTL_RATE * salary + GHS_RATE * salary + MEDICAL_FLAT
        return round(salary + self.allowance + loading, ROUND_COST)


def with_overtime(monthly_cost: float, salary: float, overtime_hours: float) -> float:
    """Add overtime pay at 1.5x the hourly salary rate."""
    if overtime_hours <= 0:
        return monthly_cost
    hourly = salary / AVAILABLE_HOURS_PER_FTE
    return round(monthly_cost + overtime_hours * hourly * OVERTIME_PREMIUM, ROUND_COST)


default_staff_cost = StaffCostTable()
