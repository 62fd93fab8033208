"""
PURPOSE: Pick the Minimum Viable Organisation from evaluated headcount scenarios.

The MVO is the smallest non-rejected headcount whose deadline-met probability
reaches the confidence target. When nothing qualifies the largest tested
headcount is returned and flagged; this is a normal business outcome, not an
error.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from mvo_planner.errors import ConfigurationError
from mvo_planner.monte_carlo.config import DEFAULT_ACCEPTABLE_FAILURE_RISK, ROUND_COST, ROUND_DURATION, ROUND_PROBABILITY
from mvo_planner.mvo.scenarios import HeadcountTestResult, qualifies
from mvo_planner.mvo.strategy import determine_strategy, strategy_info

logger = logging.getLogger(__name__)

HIGH_TURNOVER_THRESHOLD = 15.0
NEAR_THRESHOLD_RATIO = 0.8


@dataclass(frozen=True)
class MVOComparison:
    """MVO versus baseline. Differences are MVO minus baseline."""
    baseline_risk: float
    mvo_risk: float
    cost_difference: float
    time_difference: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "baseline_risk": round(self.baseline_risk, ROUND_PROBABILITY),
            "mvo_risk": round(self.mvo_risk, ROUND_PROBABILITY),
            "cost_difference": round(self.cost_difference, ROUND_COST),
            "time_difference": round(self.time_difference, ROUND_DURATION),
        }


@dataclass(frozen=True)
class MVOResult:
    """Recommended headcount with its supporting scenarios.

    selected_result is the very object in test_results whose headcount equals
    recommended_headcount.
    """
    recommended_headcount: int
    baseline_headcount: int
    test_results: List[HeadcountTestResult]
    selected_result: HeadcountTestResult
    strategy: str
    explanation: str
    suggestions: List[str]
    comparison: MVOComparison
    summary: str = ""
    no_viable_solution: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommended_headcount": self.recommended_headcount,
            "baseline_headcount": self.baseline_headcount,
            "test_results": [r.to_dict() for r in self.test_results],
            "selected_result": self.selected_result.to_dict(),
            "strategy": self.strategy,
            "strategy_label": strategy_info(self.strategy).label,
            "explanation": self.explanation,
            "suggestions": list(self.suggestions),
            "comparison": self.comparison.to_dict(),
            "summary": self.summary,
            "no_viable_solution": self.no_viable_solution,
        }


def _plural(n: int) -> str:
    return "s" if n > 1 else ""


def build_explanation(
    baseline_headcount: int,
    mvo: HeadcountTestResult,
    test_results: Sequence[HeadcountTestResult],
    acceptable_failure_risk: float,
    no_viable_solution: bool = False,
) -> str:
    """Markdown explanation of how the MVO was reached."""
    lines = [
        "## MVO Identification Analysis",
        "",
        "### Baseline Headcount (No-Risk)",
        f"**{baseline_headcount} persons** – Calculated using standard formula without risk buffer.",
        "",
        "### Monte Carlo Simulation Results",
        f"Tested {len(test_results)} headcount scenarios with {mvo.iterations:,} iterations each.",
        "",
    ]

    rejected = [r for r in test_results if r.rejected]
    if rejected:
        lines.append("### Rejected Options")
        lines.extend(f"- **{r.headcount} persons**: {r.rejection_reason}" for r in rejected)
        lines.append("")

    if no_viable_solution:
        lines.append(f"### No Viable Headcount Found: Showing {mvo.headcount} Persons")
        lines.append("None of the tested headcounts meets the confidence target. The largest tested option is shown:")
    else:
        lines.append(f"### Recommended MVO: {mvo.headcount} Persons")
        lines.append("This is the **minimum viable organization** that achieves:")
    lines.extend([
        f"- {mvo.deadline_met_probability:.1f}% probability of meeting deadline",
        f"- {mvo.failure_risk:.1f}% failure risk ({acceptable_failure_risk:g}% threshold)",
        f"- P90 completion: {mvo.p90_duration:.0f} days",
        f"- Average cost: RM{round(mvo.avg_cost):,}",
        "",
    ])

    diff = mvo.headcount - baseline_headcount
    if diff > 0:
        lines.extend([
            f"### Why {diff} Additional Person{_plural(diff)}?",
            "The baseline does not account for:",
            "- People risks (absenteeism, turnover, learning curves)",
            "- Workload variability (min-max ranges)",
            "- Productivity fluctuations",
            f"- Required safety buffer for {100 - acceptable_failure_risk:.0f}% confidence",
        ])
        if mvo.min_headcount_applied:
            lines.append(f"- Minimum headcount floor of {mvo.min_headcount_value} for this work type")
    elif diff == 0:
        lines.extend([
            "### Baseline = MVO",
            "The baseline headcount already provides sufficient buffer to meet risk threshold.",
        ])
    return "\n".join(lines) + "\n"


def build_suggestions(
    baseline_headcount: int,
    mvo: HeadcountTestResult,
    acceptable_failure_risk: float,
    automation_level: Optional[str] = None,
    turnover_risk: Optional[float] = None,
    no_viable_solution: bool = False,
) -> List[str]:
    suggestions = []
    diff = mvo.headcount - baseline_headcount

    if no_viable_solution:
        suggestions.append(
            "No tested headcount meets the confidence target. Consider adjusting constraints: "
            "extend the deadline, accept a higher failure risk, raise the budget or reduce the workload"
        )
    if diff > 2:
        suggestions.append(
            f"Consider automation or process optimization to reduce required headcount from "
            f"{mvo.headcount} to closer to baseline {baseline_headcount}"
        )
    if automation_level in ("manual", "partially_automated"):
        suggestions.append("Increase automation level to reduce productivity variance and lower required headcount")
    if turnover_risk is not None and turnover_risk > HIGH_TURNOVER_THRESHOLD:
        suggestions.append(
            f"High turnover risk ({turnover_risk:g}%) increases headcount needs. "
            f"Focus on retention to optimize team size"
        )
    if not no_viable_solution and mvo.failure_risk > acceptable_failure_risk * NEAR_THRESHOLD_RATIO:
        suggestions.append(
            "Current configuration is near risk threshold. Adding 1 more person would reduce failure risk significantly"
        )
    if diff == 0:
        suggestions.append("Baseline headcount already meets risk requirements. No additional buffer needed")
    return suggestions


def build_summary(baseline_headcount: int, mvo: HeadcountTestResult, strategy: str) -> str:
    diff = mvo.headcount - baseline_headcount
    if diff > 0:
        diff_text = f"recommends {diff} additional person{_plural(diff)} compared to baseline"
    elif diff < 0:
        diff_text = f"suggests {-diff} fewer person{_plural(-diff)} than baseline"
    else:
        diff_text = "aligns with baseline headcount"

    risk_text = {
        "high": "This is a high-risk configuration; consider adding buffer capacity or implementing mitigation strategies.",
        "medium": "This carries moderate risk; monitor closely during initial phases.",
        "low": "This presents low risk with good delivery confidence.",
    }[mvo.risk_level]

    return (
        f"The MVO analysis {diff_text} ({baseline_headcount} → {mvo.headcount} FTE). {risk_text}\n\n"
        f"Recommended approach: {strategy_info(strategy).description}"
    )


def select(
    test_results: Sequence[HeadcountTestResult],
    baseline_headcount: int,
    work_mix: Optional[Mapping[str, float]] = None,
    confidence_target: Optional[float] = None,
    acceptable_failure_risk: float = DEFAULT_ACCEPTABLE_FAILURE_RISK,
    automation_level: Optional[str] = None,
    turnover_risk: Optional[float] = None,
) -> MVOResult:
    """
    Select the MVO from evaluated scenarios.

    Args:
        test_results: Output of scenarios.evaluate().
        baseline_headcount: Deterministic baseline headcount.
        work_mix: Percent share per work signal, drives the strategy.
        confidence_target: Minimum deadline-met probability in percent
            (default 100 - acceptable_failure_risk).
        acceptable_failure_risk: Threshold quoted in the explanation.
        automation_level: Sub-function automation level, for suggestions.
        turnover_risk: Typical turnover percent, for suggestions.

    Returns:
        MVOResult. Never raises when no headcount qualifies.

    Raises:
        ConfigurationError: If test_results is empty.
    """
    if not test_results:
        raise ConfigurationError("select requires at least one evaluated headcount")
    if confidence_target is None:
        confidence_target = 100.0 - acceptable_failure_risk

    ordered = sorted(test_results, key=lambda r: r.headcount)
    selected = next(
        (r for r in ordered if qualifies(r, confidence_target)),
        None,
    )
    no_viable_solution = selected is None
    if no_viable_solution:
        selected = ordered[-1]
        logger.warning(
            "No headcount between %s and %s meets %.1f%% confidence; falling back to %s",
            ordered[0].headcount,
            ordered[-1].headcount,
            confidence_target,
            selected.headcount,
        )

    strategy = determine_strategy(work_mix or {})

    baseline_row = next((r for r in ordered if r.headcount == baseline_headcount), None)
    if baseline_row is not None:
        comparison = MVOComparison(
            baseline_risk=baseline_row.failure_risk,
            mvo_risk=selected.failure_risk,
            cost_difference=selected.avg_cost - baseline_row.avg_cost,
            time_difference=selected.avg_duration - baseline_row.avg_duration,
        )
    else:
        comparison = MVOComparison(
            baseline_risk=100.0,
            mvo_risk=selected.failure_risk,
            cost_difference=0.0,
            time_difference=0.0,
        )

    logger.info(
        "MVO %s (baseline %s), failure risk %.1f%%, strategy %s",
        selected.headcount,
        baseline_headcount,
        selected.failure_risk,
        strategy,
    )

    return MVOResult(
        recommended_headcount=selected.headcount,
        baseline_headcount=baseline_headcount,
        test_results=ordered,
        selected_result=selected,
        strategy=strategy,
        explanation=build_explanation(
            baseline_headcount, selected, ordered, acceptable_failure_risk, no_viable_solution
        ),
        suggestions=build_suggestions(
            baseline_headcount,
            selected,
            acceptable_failure_risk,
            automation_level,
            turnover_risk,
            no_viable_solution,
        ),
        comparison=comparison,
        summary=build_summary(baseline_headcount, selected, strategy),
        no_viable_solution=no_viable_solution,
    )
