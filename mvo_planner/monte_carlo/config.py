"""
PURPOSE: Simulation configuration and threshold parameters for the MVO engine.

RESPONSIBILITIES:
- Define simulation hyperparameters (number of trials, confidence level, bins)
- Capacity assumptions (hours per FTE, target utilization, days per month)
- Risk bucket cutoffs used by the scenario evaluator and the dashboards
- Single responsibility: configuration only, no simulation logic
"""

# Simulation Parameters
NUM_ITERATIONS = 10000  # Standard Monte Carlo sample size
ITERATION_PRESETS = (1000, 5000, 10000, 50000)
CONFIDENCE_LEVEL = 90.0  # Two-tailed confidence interval, percent
RANDOM_SEED = None  # Set to int for reproducibility, None for random

# Capacity
AVAILABLE_HOURS_PER_FTE = 160.0  # Monthly hours one FTE can give
TARGET_UTILIZATION = 0.85  # Baseline utilization
HOURS_PER_DAY = 8.0
CALENDAR_DAYS_PER_MONTH = 365.0 / 12  # Trial durations and deadlines are calendar days
MIN_WORKLOAD_HOURS = 100.0  # Floor for monthly base workload
MIN_FTE = 1.0

# Raw workload drivers (hours per unit)
HOURS_PER_EMPLOYEE_SUPPORTED = 0.5
MINUTES_PER_TRANSACTION = 5.0
HOURS_PER_SITE = 20.0
TIMEZONE_SURCHARGE = 0.15  # Per extra zone beyond the first

# Statistics
HISTOGRAM_BINS = 50
PERCENTILES = [10, 25, 50, 75, 90]

# Risk buckets (failure risk, percent)
RISK_LOW_MAX = 10.0
RISK_MEDIUM_MAX = 25.0

# Scenario search: headcounts tested below/above the baseline per operation size
SCAN_OFFSETS = {
    "small_lean": (1, 3),
    "medium_standard": (2, 5),
    "large_extended": (3, 7),
}
DEFAULT_ACCEPTABLE_FAILURE_RISK = 15.0
MAX_SCAN_MULTIPLE = 4  # Extended scans stop at this multiple of the initial top candidate

# Output Configuration
ROUND_PROBABILITY = 2  # Decimal places for percentages
ROUND_FTE = 3
ROUND_DURATION = 1  # Decimal places for durations
ROUND_COST = 2  # Decimal places for costs


def get_capacity_settings():
    """Return the capacity assumptions shared by baseline and simulation."""
    return {
        "available_hours_per_fte": AVAILABLE_HOURS_PER_FTE,
        "target_utilization": TARGET_UTILIZATION,
        "hours_per_day": HOURS_PER_DAY,
        "calendar_days_per_month": CALENDAR_DAYS_PER_MONTH,
    }


def get_risk_thresholds():
    """Return the canonical low/medium cutoffs for failure-risk buckets."""
    return {
        "low": RISK_LOW_MAX,
        "medium": RISK_MEDIUM_MAX,
    }


def risk_bucket(failure_risk):
    """Map a failure risk percentage to "low", "medium" or "high"."""
    if failure_risk <= RISK_LOW_MAX:
        return "low"
    if failure_risk <= RISK_MEDIUM_MAX:
        return "medium"
    return "high"
