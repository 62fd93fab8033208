import pytest
from pydantic import ValidationError

from mvo_planner.monte_carlo.variables import DEFAULT_MONTE_CARLO_INPUTS
from mvo_planner.schemas import (
    HRAnswersPayload,
    MonteCarloInputsPayload,
    ProbabilityRangePayload,
    SubFunctionPayload,
)
from mvo_planner.workload.inputs import RangeValue


class TestSubFunctionPayload:
    def test_minimal_payload(self):
        inputs = SubFunctionPayload(id="sf-1", name="Payroll").to_domain()
        assert inputs.id == "sf-1"
        assert inputs.volume == RangeValue(500, 750, 1000)
        assert inputs.acceptable_failure_risk == 15.0

    def test_from_json(self):
        payload = SubFunctionPayload.model_validate_json(
            '{"id": "sf-2", "name": "Guards", "answers": {"work_type": "security", "deadline": "2_weeks"},'
            ' "coverage": "twenty_four_seven", "work_mix": {"operational_support": 70},'
            ' "productivity": {"min": 5, "typical": 8, "max": 12}}'
        )
        inputs = payload.to_domain()
        assert inputs.work_type_id == "security_safety"
        assert inputs.target_deadline_days == 14.0
        assert inputs.coverage == "twenty_four_seven"
        assert inputs.work_mix == {"operational_support": 70}
        assert inputs.productivity == RangeValue(5, 8, 12)

    def test_unknown_answer_rejected(self):
        with pytest.raises(ValidationError):
            HRAnswersPayload(volume="lots")

    def test_bad_range_rejected(self):
        with pytest.raises(ValidationError):
            SubFunctionPayload(id="x", name="X", volume={"min": 10, "typical": 5, "max": 20})

    def test_negative_time_zones_rejected(self):
        with pytest.raises(ValidationError):
            SubFunctionPayload(id="x", name="X", time_zones=0)


class TestMonteCarloInputsPayload:
    def test_defaults_match_domain(self):
        assert MonteCarloInputsPayload().to_domain() == DEFAULT_MONTE_CARLO_INPUTS

    def test_override_one_variable(self):
        payload = MonteCarloInputsPayload(
            iterations=5000,
            variables={
                "utilization_rate": {
                    "name": "Utilization Rate",
                    "base_value": 0.8,
                    "range": {"min": 0.7, "max": 0.9, "distribution": "uniform"},
                    "enabled": False,
                }
            },
        )
        inputs = payload.to_domain()
        assert inputs.iterations == 5000
        assert not inputs.is_enabled("utilization_rate")
        assert inputs.variable("utilization_rate").range.distribution == "uniform"
        assert inputs.is_enabled("complexity_factor")

    @pytest.mark.parametrize("field, value", [("iterations", 0), ("confidence_level", 100)])
    def test_invalid_settings(self, field, value):
        with pytest.raises(ValidationError):
            MonteCarloInputsPayload(**{field: value})

    def test_unknown_variable_key(self):
        with pytest.raises(ValidationError):
            MonteCarloInputsPayload(variables={"overtime": {"name": "x", "base_value": 1, "range": {"min": 0, "max": 1}}})

    def test_range_validation(self):
        with pytest.raises(ValidationError):
            ProbabilityRangePayload(min=1, max=0)
        with pytest.raises(ValidationError):
            ProbabilityRangePayload(min=0, max=1, most_likely=2)
        with pytest.raises(ValidationError):
            ProbabilityRangePayload(min=0, max=1, distribution="pert")
