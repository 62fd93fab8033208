"""
Headcount scenarios and Minimum Viable Organisation selection.

- scenarios.py: Per-headcount risk, duration and cost
- selector.py: Smallest headcount meeting the confidence target
- strategy.py: Staffing strategy decision table
- costs.py: Default cost-per-FTE table
- synchronized.py: One-call recompute of baseline, simulation and MVO
"""
