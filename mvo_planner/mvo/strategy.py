"""
PURPOSE: Staffing strategy classification for a sub-function.

The strategy is a fixed decision table over the work mix (percent share of
routine, knowledge and operational work). It is not a learned model and it
does not look at the Monte Carlo output.
"""

from dataclasses import dataclass
from typing import Mapping

from mvo_planner.errors import ConfigurationError

STRATEGIES = ("hire_permanent", "hybrid_perm_gig", "outsource", "automate")

ROUTINE_THRESHOLD = 50.0
KNOWLEDGE_THRESHOLD = 40.0
OPERATIONAL_THRESHOLD = 40.0


@dataclass(frozen=True)
class StrategyInfo:
    label: str
    tooltip: str
    description: str


STRATEGY_INFO = {
    "hire_permanent": StrategyInfo(
        label="Hire Permanent Staff",
        tooltip="Build or maintain a fully in-house team using permanent employees as the main delivery model.",
        description="Build internal permanent capability for stable, long-term work.",
    ),
    "hybrid_perm_gig": StrategyInfo(
        label="Hybrid (Permanent + Contract)",
        tooltip="Keep a core permanent team and add contract/project staff to handle peaks or temporary workload.",
        description="Use a hybrid model with permanent core team supplemented by contract staff for flexibility.",
    ),
    "outsource": StrategyInfo(
        label="Outsource / Vendor",
        tooltip="Use an external vendor to deliver most of the work, with a lean internal team for governance and oversight.",
        description="Consider outsourcing to specialist vendors for efficiency and focus.",
    ),
    "automate": StrategyInfo(
        label="Automate / Optimize Process",
        tooltip="Reduce manual effort by improving process, systems and automation so a smaller team can handle the workload safely.",
        description="Invest in automation and process optimization to reduce manual effort.",
    ),
}

_WORKER_TYPES = {
    "hire_permanent": "permanent",
    "hybrid_perm_gig": "permanent",
    "outsource": "gig",
    "automate": "none",
}

WORKER_TYPE_LABELS = {
    "permanent": "Permanent / Fixed Term Contract",
    "gig": "GIG / Short Term Contract",
    "none": "No Cost (Outsourced/Automated)",
}


def determine_strategy(work_mix: Mapping[str, float]) -> str:
    """
    Pick a strategy from the work mix.

    routine > 50% -> automate; knowledge > 40% -> hire_permanent;
    operational > 40% -> hybrid_perm_gig; otherwise hire_permanent.
    """
    if work_mix.get("routine_processing", 0) > ROUTINE_THRESHOLD:
        return "automate"
    if work_mix.get("knowledge_work", 0) > KNOWLEDGE_THRESHOLD:
        return "hire_permanent"
    if work_mix.get("operational_support", 0) > OPERATIONAL_THRESHOLD:
        return "hybrid_perm_gig"
    return "hire_permanent"


def strategy_info(strategy: str) -> StrategyInfo:
    try:
        return STRATEGY_INFO[strategy]
    except KeyError:
        raise ConfigurationError(f"Unknown strategy {strategy!r}") from None


def worker_type_for_strategy(strategy: str) -> str:
    """Employment type used to cost a strategy: permanent, gig or none."""
    strategy_info(strategy)
    return _WORKER_TYPES[strategy]


def should_calculate_cost(strategy: str) -> bool:
    return strategy != "automate"
