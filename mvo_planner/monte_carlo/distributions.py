"""
PURPOSE: Probabilistic distribution samplers for the uncertain workload variables.

RESPONSIBILITIES:
- Validate probability ranges (min, most likely, max, distribution tag)
- Sample from normal (clamped), uniform and triangular distributions
- Take the random source as an injected numpy Generator so tests can seed it
- Single responsibility: only sampling, no workload math or aggregation
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np
from scipy.stats import triang

from mvo_planner.errors import ConfigurationError

logger = logging.getLogger(__name__)

DISTRIBUTIONS = ("normal", "uniform", "triangular")


@dataclass(frozen=True)
class ProbabilityRange:
    """Range an uncertain variable is drawn from.

    Attributes:
        min: Lower bound.
        max: Upper bound.
        most_likely: Mode for triangular draws (midpoint when omitted).
        distribution: "normal", "uniform" or "triangular".
    """
    min: float
    max: float
    most_likely: Optional[float] = None
    distribution: str = "triangular"

    def __post_init__(self):
        if self.distribution not in DISTRIBUTIONS:
            raise ConfigurationError(
                f"Unknown distribution {self.distribution!r}. Must be one of {', '.join(DISTRIBUTIONS)}"
            )
        if not (math.isfinite(self.min) and math.isfinite(self.max)):
            raise ConfigurationError(f"Range bounds must be finite, got min={self.min}, max={self.max}")
        if self.min > self.max:
            raise ConfigurationError(f"Range min {self.min} exceeds max {self.max}")
        if self.most_likely is not None and not (self.min <= self.most_likely <= self.max):
            raise ConfigurationError(
                f"most_likely {self.most_likely} outside range [{self.min}, {self.max}]"
            )

    @property
    def mode(self) -> float:
        if self.most_likely is None:
            return (self.min + self.max) / 2
        return self.most_likely

    def scaled(self, factor: float) -> "ProbabilityRange":
        """Widen (factor > 1) or narrow the spread around the mode."""
        mode = self.mode
        return ProbabilityRange(
            min=mode - (mode - self.min) * factor,
            max=mode + (self.max - mode) * factor,
            most_likely=None if self.most_likely is None else mode,
            distribution=self.distribution,
        )

    def to_dict(self):
        return {
            "min": self.min,
            "max": self.max,
            "most_likely": self.most_likely,
            "distribution": self.distribution,
        }


@dataclass(frozen=True)
class MonteCarloVariable:
    """One uncertain input. When disabled the engine uses base_value unchanged."""
    name: str
    base_value: float
    range: ProbabilityRange
    enabled: bool = True

    def to_dict(self):
        return {
            "name": self.name,
            "base_value": self.base_value,
            "range": self.range.to_dict(),
            "enabled": self.enabled,
        }


class DistributionSampler:
    """Draws variates for ProbabilityRange objects from an injected random source."""

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        """
        Args:
            rng: numpy Generator to draw from. Takes precedence over seed.
            seed: Seed for a fresh Generator (None = unseeded).
        """
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def sample(self, prob_range: ProbabilityRange, size: Optional[int] = None) -> Union[float, np.ndarray]:
        """
        Sample from the distribution described by prob_range.

        normal: mean is the midpoint and the standard deviation is a sixth of
        the width, so +-3 sigma spans the range. Draws are clamped to
        [min, max]. This is a truncated-normal approximation that piles the
        tail mass onto the two bounds; it is intended, so keep the clamp
        rather than switching to resampling or a proper truncated normal.

        uniform: min + u * (max - min).

        triangular: inverse CDF with the mode at most_likely (or midpoint).

        Args:
            prob_range: Range and distribution to draw from.
            size: Number of samples (None returns a single float).

        Returns:
            float when size is None, otherwise numpy array of samples.
        """
        n = 1 if size is None else size
        low, high = prob_range.min, prob_range.max

        if high == low:
            values = np.full(n, float(low))
        elif prob_range.distribution == "normal":
            mean = (low + high) / 2
            std_dev = (high - low) / 6
            values = np.clip(self.normal(mean, std_dev, size=n), low, high)
        elif prob_range.distribution == "uniform":
            values = low + self.rng.random(n) * (high - low)
        else:
            values = self._triangular(low, high, prob_range.mode, n)

        if size is None:
            return float(values[0])
        return values

    def normal(self, mean: float, std_dev: float, size: int = 1) -> np.ndarray:
        """Box-Muller transform over two uniform streams."""
        # 1 - random() lies in (0, 1], keeping log() finite
        u1 = 1.0 - self.rng.random(size)
        u2 = self.rng.random(size)
        z0 = np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * np.pi * u2)
        return mean + z0 * std_dev

    def _triangular(self, low: float, high: float, mode: float, size: int) -> np.ndarray:
        # triang.ppf is the closed-form inverse CDF:
        #   u < f: low + sqrt(u * (high - low) * (mode - low))
        #   else:  high - sqrt((1 - u) * (high - low) * (high - mode))
        c = (mode - low) / (high - low)
        u = self.rng.random(size)
        return triang.ppf(u, c, loc=low, scale=high - low)


def clamp_non_finite(values: np.ndarray, prob_range: ProbabilityRange) -> Tuple[np.ndarray, int]:
    """
    Replace NaN/Infinity draws with the nearest valid value of prob_range.

    NaN becomes the mode, +inf the max and -inf the min.

    Returns:
        Tuple of (clean values, number of values replaced).
    """
    bad = ~np.isfinite(values)
    count = int(np.count_nonzero(bad))
    if count == 0:
        return values, 0
    clean = np.nan_to_num(values, nan=prob_range.mode, posinf=prob_range.max, neginf=prob_range.min)
    return clean, count


def sample_from_distribution(prob_range: ProbabilityRange, size=None, random_state=None):
    """Module-level wrapper for one-off sampling."""
    return DistributionSampler(seed=random_state).sample(prob_range, size=size)


def random_normal(mean, std_dev, size=1, random_state=None):
    """Module-level wrapper for Box-Muller normal draws."""
    return DistributionSampler(seed=random_state).normal(mean, std_dev, size=size)
