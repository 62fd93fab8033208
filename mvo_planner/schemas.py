"""
Inbound JSON payloads for the planner.

Payloads are validated with pydantic before they reach the engine and then
converted to the frozen domain objects with to_domain().
"""
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from mvo_planner.monte_carlo.config import CONFIDENCE_LEVEL, NUM_ITERATIONS
from mvo_planner.monte_carlo.distributions import MonteCarloVariable, ProbabilityRange
from mvo_planner.monte_carlo.variables import MonteCarloInputs, default_variables
from mvo_planner.workload.inputs import HRAnswers, RangeValue, WorkloadInputs, answers_to_workload_inputs

Complexity = Literal["very_simple", "normal", "complex", "highly_complex"]
Priority = Literal["lowest_cost", "balanced", "fastest"]
StaffType = Literal["general_worker", "clerical", "executive", "manager", "contract", "gig"]
VariableKey = Literal["workload_volume", "complexity_factor", "service_factor", "automation_factor", "utilization_rate"]


class RangeValuePayload(BaseModel):
    min: float
    typical: float
    max: float

    @model_validator(mode="after")
    def check_order(self):
        if not self.min <= self.typical <= self.max:
            raise ValueError("range must satisfy min <= typical <= max")
        return self

    def to_domain(self) -> RangeValue:
        return RangeValue(self.min, self.typical, self.max)


class HRAnswersPayload(BaseModel):
    """Questionnaire answers for one sub-function."""
    work_type: Literal[
        "payroll", "recruitment", "customer_service", "operations",
        "maintenance", "admin", "security", "finance", "other",
    ] = "other"
    complexity: Complexity = "normal"
    volume: Literal[
        "under_200", "200_500", "500_1000", "1000_2500", "over_2500",
        "under_100", "100_300", "300_800", "800_1500", "over_1500",
    ] = "500_1000"
    productivity_rate: Literal["under_5", "5_10", "10_20", "over_20"] = "10_20"
    productivity_good_case: Literal["slightly", "twenty_percent", "fifty_percent", "double"] = "twenty_percent"
    productivity_bad_case: Literal["slightly", "twenty_percent", "fifty_percent", "double"] = "twenty_percent"
    absentee_rate: Literal["0", "1", "2", "3_or_more"] = "1"
    ramp_up_time: Literal["under_1_month", "1_2_months", "3_6_months", "over_6_months"] = "1_2_months"
    team_stability: Literal["very_stable", "normal", "high_turnover"] = "normal"
    staff_type: StaffType = "executive"
    overtime_frequency: Literal["none", "occasional", "frequent"] = "occasional"
    deadline: Literal["1_week", "2_weeks", "1_month", "3_months", "ongoing"] = "1_month"
    impact_level: Literal["low", "medium", "high"] = "medium"
    priority: Priority = "balanced"

    def to_domain(self) -> HRAnswers:
        return HRAnswers(**self.model_dump())


class SubFunctionPayload(BaseModel):
    """A sub-function described by questionnaire answers plus context."""
    id: str = Field(..., description="Stable identifier; keys the recompute_all() result.")
    name: str
    answers: HRAnswersPayload = Field(default_factory=HRAnswersPayload)
    service_level: Literal["basic", "normal", "high", "critical"] = "normal"
    automation_level: Literal["manual", "partially_automated", "highly_automated"] = "partially_automated"
    coverage: Literal["office_hours", "extended_hours", "twenty_four_seven"] = "office_hours"
    work_mix: dict[Literal["routine_processing", "knowledge_work", "operational_support"], float] = Field(
        default_factory=dict,
        description="Percent share of each kind of work; drives the staffing strategy.",
    )
    employees_supported: float | None = Field(default=None, ge=0)
    transactions_per_month: float | None = Field(default=None, ge=0)
    sites: float | None = Field(default=None, ge=0)
    time_zones: int = Field(default=1, ge=1)
    max_budget: float | None = Field(default=None, gt=0)
    planning_type: Literal["new_project", "new_function", "new_business_unit", "restructuring"] | None = None
    operation_size: Literal["small_lean", "medium_standard", "large_extended"] = "medium_standard"
    existing_headcount: int | None = Field(default=None, ge=0)
    volume: RangeValuePayload | None = Field(
        default=None,
        description="Exact monthly volume range; overrides the answers' volume band.",
    )
    productivity: RangeValuePayload | None = Field(
        default=None,
        description="Exact units per person per day; overrides the answers' productivity band.",
    )

    def to_domain(self) -> WorkloadInputs:
        overrides = {}
        if self.volume is not None:
            overrides["volume"] = self.volume.to_domain()
        if self.productivity is not None:
            overrides["productivity"] = self.productivity.to_domain()
        return answers_to_workload_inputs(
            self.answers.to_domain(),
            **overrides,
            id=self.id,
            name=self.name,
            service_level=self.service_level,
            automation_level=self.automation_level,
            coverage=self.coverage,
            work_mix=dict(self.work_mix),
            employees_supported=self.employees_supported,
            transactions_per_month=self.transactions_per_month,
            sites=self.sites,
            time_zones=self.time_zones,
            max_budget=self.max_budget,
            planning_type=self.planning_type,
            operation_size=self.operation_size,
            existing_headcount=self.existing_headcount,
        )


class ProbabilityRangePayload(BaseModel):
    min: float
    max: float
    most_likely: float | None = None
    distribution: Literal["normal", "uniform", "triangular"] = "triangular"

    @model_validator(mode="after")
    def check_bounds(self):
        if self.min > self.max:
            raise ValueError("min must not exceed max")
        if self.most_likely is not None and not self.min <= self.most_likely <= self.max:
            raise ValueError("most_likely must lie within [min, max]")
        return self

    def to_domain(self) -> ProbabilityRange:
        return ProbabilityRange(self.min, self.max, self.most_likely, self.distribution)


class MonteCarloVariablePayload(BaseModel):
    name: str
    base_value: float
    range: ProbabilityRangePayload
    enabled: bool = True

    def to_domain(self) -> MonteCarloVariable:
        return MonteCarloVariable(self.name, self.base_value, self.range.to_domain(), self.enabled)


class MonteCarloInputsPayload(BaseModel):
    """Monte Carlo settings. Variables not listed keep their defaults."""
    iterations: int = Field(default=NUM_ITERATIONS, gt=0, description="Number of trials, e.g. 1000, 5000, 10000 or 50000.")
    confidence_level: float = Field(default=CONFIDENCE_LEVEL, gt=0, lt=100)
    variables: dict[VariableKey, MonteCarloVariablePayload] = Field(default_factory=dict)

    def to_domain(self) -> MonteCarloInputs:
        variables = default_variables()
        variables.update({key: var.to_domain() for key, var in self.variables.items()})
        return MonteCarloInputs(
            iterations=self.iterations,
            confidence_level=self.confidence_level,
            variables=variables,
        )
