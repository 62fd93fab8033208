"""
Workload description and deterministic sizing.

- work_types.py: Work-type coefficient catalog
- inputs.py: Sub-function inputs and questionnaire mapping
- planning.py: Planning type and size-of-operation context
- model.py: Hours, factors and FTE conversion
- baseline.py: Deterministic baseline headcount
"""
