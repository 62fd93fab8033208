"""
PURPOSE: Monte Carlo run settings: iteration count, confidence level and the
five uncertain variables of the workload model.

The workload, complexity and service variables are relative multipliers on
their deterministic factor. Automation and utilization are absolute values.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from mvo_planner.errors import ConfigurationError
from mvo_planner.monte_carlo.config import CONFIDENCE_LEVEL, NUM_ITERATIONS
from mvo_planner.monte_carlo.distributions import MonteCarloVariable, ProbabilityRange

VARIABLE_KEYS = (
    "workload_volume",
    "complexity_factor",
    "service_factor",
    "automation_factor",
    "utilization_rate",
)


def default_variables() -> Dict[str, MonteCarloVariable]:
    return {
        "complexity_factor": MonteCarloVariable(
            name="Complexity Factor",
            base_value=1.0,
            range=ProbabilityRange(min=0.8, max=1.2, most_likely=1.0, distribution="triangular"),
        ),
        "service_factor": MonteCarloVariable(
            name="Service Level Factor",
            base_value=1.0,
            range=ProbabilityRange(min=0.9, max=1.3, most_likely=1.0, distribution="triangular"),
        ),
        "automation_factor": MonteCarloVariable(
            name="Automation Impact",
            base_value=0.3,
            range=ProbabilityRange(min=0.2, max=0.4, most_likely=0.3, distribution="triangular"),
        ),
        "utilization_rate": MonteCarloVariable(
            name="Utilization Rate",
            base_value=0.85,
            range=ProbabilityRange(min=0.75, max=0.95, most_likely=0.85, distribution="triangular"),
        ),
        "workload_volume": MonteCarloVariable(
            name="Workload Volume Variance",
            base_value=1.0,
            range=ProbabilityRange(min=0.85, max=1.15, most_likely=1.0, distribution="triangular"),
        ),
    }


@dataclass(frozen=True)
class MonteCarloInputs:
    """Settings for one Monte Carlo run.

    Attributes:
        iterations: Number of independent trials (no adaptive stopping).
        confidence_level: Two-tailed interval width in percent, e.g. 90.
        variables: Uncertain variables keyed by VARIABLE_KEYS, held read-only.
            Missing keys behave like disabled variables.
    """
    iterations: int = NUM_ITERATIONS
    confidence_level: float = CONFIDENCE_LEVEL
    variables: Mapping[str, MonteCarloVariable] = field(default_factory=default_variables)

    def __post_init__(self):
        object.__setattr__(self, "variables", MappingProxyType(dict(self.variables)))
        if not isinstance(self.iterations, int) or self.iterations <= 0:
            raise ConfigurationError(f"iterations must be positive, got {self.iterations}")
        if not 0 < self.confidence_level < 100:
            raise ConfigurationError(
                f"confidence_level must be between 0 and 100, got {self.confidence_level}"
            )
        unknown = set(self.variables) - set(VARIABLE_KEYS)
        if unknown:
            raise ConfigurationError(f"Unknown Monte Carlo variables: {', '.join(sorted(unknown))}")

    def variable(self, key: str) -> Optional[MonteCarloVariable]:
        return self.variables.get(key)

    def is_enabled(self, key: str) -> bool:
        var = self.variables.get(key)
        return var is not None and var.enabled

    def with_iterations(self, iterations: int) -> "MonteCarloInputs":
        return replace(self, iterations=iterations)

    def with_variable(self, key: str, variable: MonteCarloVariable) -> "MonteCarloInputs":
        variables = dict(self.variables)
        variables[key] = variable
        return replace(self, variables=variables)

    def all_disabled(self) -> "MonteCarloInputs":
        """Copy with every variable switched off (fully deterministic trials)."""
        variables = {key: replace(var, enabled=False) for key, var in self.variables.items()}
        return replace(self, variables=variables)

    def to_dict(self):
        return {
            "iterations": self.iterations,
            "confidence_level": self.confidence_level,
            "variables": {key: var.to_dict() for key, var in self.variables.items()},
        }


DEFAULT_MONTE_CARLO_INPUTS = MonteCarloInputs()
