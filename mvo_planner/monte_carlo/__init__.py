"""
Monte Carlo simulation of required FTE.

PURPOSE:
    Propagate uncertainty in workload volume, complexity, service level,
    automation and utilization through the workload model and summarise the
    resulting headcount distribution.

SRP/DRY CHECK:
    Each submodule has a single responsibility:
    - config.py: Constants and thresholds only
    - distributions.py: Sampling from ranges only
    - variables.py: Run settings and uncertain variables only
    - simulation.py: Trial execution and statistics only
    - outputs.py: Result structures and serialization only
    - sensitivity.py: Sensitivity analysis only

simulation.py is not re-exported here because it depends on the workload
package, which itself imports this package's config.
"""

from .distributions import DistributionSampler, MonteCarloVariable, ProbabilityRange
from .outputs import MonteCarloOutput, MonteCarloStatistics, SimulationResult
from .sensitivity import SensitivityAnalyzer, SensitivityDriver
from .variables import DEFAULT_MONTE_CARLO_INPUTS, MonteCarloInputs

__all__ = [
    "DistributionSampler",
    "MonteCarloVariable",
    "ProbabilityRange",
    "MonteCarloOutput",
    "MonteCarloStatistics",
    "SimulationResult",
    "SensitivityAnalyzer",
    "SensitivityDriver",
    "DEFAULT_MONTE_CARLO_INPUTS",
    "MonteCarloInputs",
]
