import pytest

from mvo_planner.errors import ConfigurationError
from mvo_planner.workload.inputs import (
    HRAnswers,
    RangeValue,
    WorkloadInputs,
    acceptable_risk_for,
    answers_to_workload_inputs,
    apply_productivity_modifiers,
    round_half_up,
)


class TestRangeValue:
    def test_order_enforced(self):
        with pytest.raises(ConfigurationError):
            RangeValue(5, 3, 10)

    def test_to_dict(self):
        assert RangeValue(1, 2, 3).to_dict() == {"min": 1, "typical": 2, "max": 3}


class TestWorkloadInputs:
    def test_defaults_are_computable(self):
        inputs = WorkloadInputs()
        assert inputs.complexity == "normal"
        assert inputs.acceptable_failure_risk == 15.0
        assert inputs.work_mix == {}

    @pytest.mark.parametrize("field", ["absenteeism", "ramp_up", "turnover"])
    def test_people_risk_is_a_percentage(self, field):
        with pytest.raises(ConfigurationError, match=field):
            WorkloadInputs(**{field: RangeValue(10, 50, 120)})

    def test_productivity_range_must_be_positive(self):
        with pytest.raises(ConfigurationError, match="productivity"):
            WorkloadInputs(productivity=RangeValue(0, 15, 20))

    @pytest.mark.parametrize(
        "field, value",
        [
            ("complexity", "trivial"),
            ("service_level", "gold"),
            ("automation_level", "robotic"),
            ("coverage", "weekends"),
            ("priority", "cheapest"),
            ("operation_size", "huge"),
            ("acceptable_failure_risk", 120),
            ("target_deadline_days", 0),
            ("time_zones", 0),
        ],
    )
    def test_invalid_fields(self, field, value):
        with pytest.raises(ConfigurationError):
            WorkloadInputs(**{field: value})

    def test_unknown_work_signal(self):
        with pytest.raises(ConfigurationError, match="work signal"):
            WorkloadInputs(work_mix={"creative": 50})

    def test_with_changes_is_a_copy(self):
        inputs = WorkloadInputs()
        changed = inputs.with_changes(complexity="complex")
        assert changed.complexity == "complex"
        assert inputs.complexity == "normal"

    def test_to_dict_flattens_ranges(self):
        data = WorkloadInputs(work_mix={"knowledge_work": 60}).to_dict()
        assert data["volume"] == {"min": 1000, "typical": 1500, "max": 2000}
        assert data["work_mix"] == {"knowledge_work": 60}


class TestQuestionnaireMapping:
    def test_default_answers(self):
        inputs = answers_to_workload_inputs(HRAnswers())
        assert inputs.work_type_id is None
        assert inputs.volume == RangeValue(500, 750, 1000)
        assert inputs.productivity == RangeValue(12, 15, 18)
        assert inputs.absenteeism == RangeValue(2, 5, 8)
        assert inputs.turnover == RangeValue(5, 10, 20)
        assert inputs.target_deadline_days == 30.0
        assert inputs.acceptable_failure_risk == 15.0
        assert inputs.staff_type == "executive"

    def test_work_type_maps_to_catalog(self):
        inputs = answers_to_workload_inputs(HRAnswers(work_type="security"))
        assert inputs.work_type_id == "security_safety"

    def test_overrides(self):
        inputs = answers_to_workload_inputs(HRAnswers(), id="sf-1", name="Payroll", coverage="extended_hours")
        assert (inputs.id, inputs.name, inputs.coverage) == ("sf-1", "Payroll", "extended_hours")

    def test_unknown_band(self):
        with pytest.raises(ConfigurationError, match="volume"):
            answers_to_workload_inputs(HRAnswers(volume="lots"))

    def test_productivity_modifiers(self):
        assert apply_productivity_modifiers(RangeValue(5, 7, 10), "double", "fifty_percent") == RangeValue(4, 7, 14)

    def test_productivity_modifiers_round_half_up(self):
        # 5 x 0.5 = 2.5 and 5 x 0.9 = 4.5 sit exactly on a half
        assert apply_productivity_modifiers(RangeValue(2, 5, 8), "slightly", "fifty_percent").min == 3
        assert apply_productivity_modifiers(RangeValue(2, 5, 8), "slightly", "slightly").min == 5
        assert round_half_up(2.5) == 3
        assert round_half_up(2.4) == 2

    @pytest.mark.parametrize(
        "impact, priority, expected",
        [("low", "lowest_cost", 20.0), ("high", "lowest_cost", 10.0), ("medium", "fastest", 10.0), ("medium", "balanced", 15.0)],
    )
    def test_acceptable_risk(self, impact, priority, expected):
        assert acceptable_risk_for(impact, priority) == expected
