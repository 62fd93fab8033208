"""
PURPOSE: Deterministic ("Excel-style") baseline headcount.

The baseline runs the workload model with no sampling: every uncertain
variable sits at its point estimate and utilization is fixed at the target.
Work-type coefficients scale complexity and capacity exactly as in the
Monte Carlo engine. The baseline carries no risk buffer: it never applies the
work-type noise and risk multiplier or the people-risk capacity loss. The
same inputs always give the same headcount and rationale.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from mvo_planner.errors import ConfigurationError
from mvo_planner.monte_carlo.config import AVAILABLE_HOURS_PER_FTE, TARGET_UTILIZATION
from mvo_planner.workload.inputs import WorkloadInputs, round_half_up
from mvo_planner.workload.model import (
    WorkloadFactors,
    base_workload_hours,
    compute_required_hours,
    effective_utilization,
    workload_factors,
)
from mvo_planner.workload.work_types import WorkTypeCoefficients

logger = logging.getLogger(__name__)

RULE = "━" * 34


@dataclass(frozen=True)
class BaselineResult:
    """Deterministic headcount and how it was reached.

    Attributes:
        fte (int): Baseline headcount, at least 1.
        workload_hours (float): Monthly base workload.
        required_hours (float): Hours after complexity, service and coverage.
        adjusted_hours (float): Hours after automation.
        effective_capacity (float): Productive hours per FTE per month.
        factors (dict): Factor values used, including utilization.
        rationale (str): Human-readable breakdown rendered verbatim by the UI and exports.
    """
    fte: int
    workload_hours: float
    required_hours: float
    adjusted_hours: float
    effective_capacity: float
    factors: Dict[str, float]
    rationale: str

    @property
    def headcount(self) -> int:
        return self.fte

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fte": self.fte,
            "workload_hours": round(self.workload_hours, 2),
            "required_hours": round(self.required_hours, 2),
            "adjusted_hours": round(self.adjusted_hours, 2),
            "effective_capacity": round(self.effective_capacity, 2),
            "factors": dict(self.factors),
            "rationale": self.rationale,
        }


def _label(value: str) -> str:
    return value.replace("_", " ")


def compute_baseline(
    inputs: WorkloadInputs,
    factors: Optional[WorkloadFactors] = None,
    utilization: float = TARGET_UTILIZATION,
    coefficients: Optional[WorkTypeCoefficients] = None,
    workload_scale: float = 1.0,
) -> BaselineResult:
    """
    Compute the deterministic baseline headcount.

    headcount = max(1, round(adjusted_hours / (160 x utilization x productivity_rate)))

    Args:
        inputs: Sub-function inputs.
        factors: Factors to use (looked up from inputs when omitted).
        utilization: Target utilization (default 0.85).
        coefficients: Work-type coefficients. Their complexity factor scales
            the hours and their productivity rate scales the capacity.
        workload_scale: Size-of-operation multiplier on the base workload.

    Returns:
        BaselineResult with the rationale text.

    Raises:
        ConfigurationError: If inputs is missing or utilization is not in (0, 1].
    """
    if not isinstance(inputs, WorkloadInputs):
        raise ConfigurationError("compute_baseline requires WorkloadInputs")
    if not 0 < utilization <= 1:
        raise ConfigurationError(f"utilization must be in (0, 1], got {utilization}")

    factors = factors or workload_factors(inputs)
    base_workload = base_workload_hours(inputs) * workload_scale

    complexity = factors.complexity
    if coefficients is not None:
        complexity *= coefficients.complexity_factor
    required_hours = base_workload * complexity * factors.service * factors.coverage
    adjusted_hours = compute_required_hours(base_workload, factors, coefficients=coefficients)
    effective_capacity = AVAILABLE_HOURS_PER_FTE * effective_utilization(utilization, coefficients)
    fte = max(1, round_half_up(adjusted_hours / effective_capacity))

    lines = [
        "Baseline Calculation (Deterministic):",
        RULE,
        f"Base Workload: {round(base_workload)} hours/month",
    ]
    if workload_scale != 1.0:
        lines.append(f"Size of operation scale: {workload_scale}×")
    lines += [
        "",
        "Applied Factors:",
        f"• Complexity ({_label(inputs.complexity)}): {factors.complexity}×",
    ]
    if coefficients is not None:
        lines += [
            f"• Work type complexity ({coefficients.name}): {coefficients.complexity_factor}×",
            f"• Work type productivity ({coefficients.name}): {coefficients.productivity_rate}×",
        ]
    lines += [
        f"• Service Level ({_label(inputs.service_level)}): {factors.service}×",
        f"• Coverage ({_label(inputs.coverage)}): {factors.coverage}×",
        f"• Automation ({_label(inputs.automation_level)}): -{factors.automation * 100:.0f}%",
        "",
        "Calculation:",
        f"• Required hours: {round(required_hours)}/month",
        f"• After automation: {round(adjusted_hours)}/month",
        f"• Capacity per FTE: {round(effective_capacity)} hrs ({utilization * 100:.0f}% utilization)",
        f"• Baseline FTE: {fte}",
    ]
    rationale = "\n".join(lines)

    logger.debug("Baseline for %s: %s FTE from %.1f adjusted hours", inputs.name, fte, adjusted_hours)

    used = {**factors.to_dict(), "utilization": utilization}
    if coefficients is not None:
        used["work_type_complexity"] = coefficients.complexity_factor
        used["work_type_productivity"] = coefficients.productivity_rate
    return BaselineResult(
        fte=fte,
        workload_hours=base_workload,
        required_hours=required_hours,
        adjusted_hours=adjusted_hours,
        effective_capacity=effective_capacity,
        factors=used,
        rationale=rationale,
    )
