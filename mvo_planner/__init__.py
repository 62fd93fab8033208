"""
Minimum Viable Organisation (MVO) headcount planner.

Sizes a sub-function's team under uncertainty: a deterministic baseline,
a Monte Carlo simulation of required FTE, and selection of the smallest
headcount that meets the delivery confidence target.
"""

__version__ = "0.1.0"
