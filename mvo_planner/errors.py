"""
PURPOSE: Error taxonomy for the headcount-sizing engine.

ConfigurationError is the only exception the engine raises on its own. Numeric
anomalies inside a batch are clamped and logged, and "no viable headcount" is
reported as data on the MVO result.
"""


class ConfigurationError(ValueError):
    """Raised for malformed ranges, unknown tags, bad iteration counts or lookups."""
