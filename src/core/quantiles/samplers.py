"""
Integer samplers over a bounded range [lo, hi).

Each sampler draws from an explicit ``numpy.random.Generator`` so that a whole
floating buoy run can be driven by one seeded random sequence. The four
samplers are the exemplar distributions used to validate the estimator:
uniform, truncated Gaussian, Beta(1, 5) and a truncated power law.

All scaled values are rounded half-up.
"""

from math import floor
from typing import Dict, Protocol, Type

import numpy as np

from src.exceptions import PreconditionError

# Truncated power-law support and exponent
POWER_LAW_LOWER = 0.00001
POWER_LAW_UPPER = 10.0
POWER_LAW_EXPONENT = -2.0

# Beta shape parameters
BETA_ALPHA = 1.0
BETA_BETA = 5.0

# Gaussian truncation, in standard deviations either side of the mean
GAUSSIAN_WIDTH = 3


class Sampler(Protocol):
    """A capability that yields an integer in [lo, hi) on demand."""

    def sample(self, lo: int, hi: int) -> int: ...


def _check_bounds(lo: int, hi: int) -> None:
    if lo >= hi:
        raise PreconditionError(f"Invalid sampler bounds [{lo}, {hi})", parameter="hi", value=hi)


def _round_half_up(value: float) -> int:
    return int(floor(value + 0.5))


class UniformSampler:
    """Uniform integers in [lo, hi)."""

    def __init__(self, rng: np.random.Generator):
        self.rng = rng

    def sample(self, lo: int, hi: int) -> int:
        _check_bounds(lo, hi)
        return int(self.rng.integers(lo, hi))


class TruncatedGaussianSampler:
    """
    Gaussian integers truncated to three standard deviations.

    With span = hi - 1 - lo the mean sits at the middle of the range and the
    standard deviation is span / 6, so the truncation points land on lo and
    hi - 1. Draws that round outside [lo, hi) are rejected and redrawn.
    """

    def __init__(self, rng: np.random.Generator):
        self.rng = rng

    def sample(self, lo: int, hi: int) -> int:
        _check_bounds(lo, hi)
        span = (hi - 1) - lo
        std = span / (2 * GAUSSIAN_WIDTH)
        mean = lo + span / 2

        while True:
            value = _round_half_up(self.rng.standard_normal() * std + mean)
            if lo <= value < hi:
                return value


class BetaSampler:
    """Beta(1, 5) draws scaled onto [lo, hi - 1], skewed towards lo."""

    def __init__(self, rng: np.random.Generator, alpha: float = BETA_ALPHA, beta: float = BETA_BETA):
        self.rng = rng
        self.alpha = alpha
        self.beta = beta

    def sample(self, lo: int, hi: int) -> int:
        _check_bounds(lo, hi)
        draw = self.rng.beta(self.alpha, self.beta)
        return lo + _round_half_up(draw * ((hi - 1) - lo))


class PowerLawSampler:
    """
    Truncated power-law draws P(x) ~ x^n on [a, b], scaled onto [lo, hi - 1].

    Uses the inverse CDF:
        x = (u * (b^(n+1) - a^(n+1)) + a^(n+1))^(1 / (n+1)),  u ~ U[0, 1)
    """

    def __init__(
        self,
        rng: np.random.Generator,
        lower: float = POWER_LAW_LOWER,
        upper: float = POWER_LAW_UPPER,
        exponent: float = POWER_LAW_EXPONENT,
    ):
        if exponent == -1:
            raise PreconditionError("Power-law exponent -1 has no closed-form inverse CDF", "exponent", exponent)
        if not 0 < lower < upper:
            raise PreconditionError("Power-law support must satisfy 0 < lower < upper", "lower", lower)
        self.rng = rng
        self.lower = lower
        self.upper = upper
        self.exponent = exponent

    def sample(self, lo: int, hi: int) -> int:
        _check_bounds(lo, hi)
        power = self.exponent + 1
        low_term = self.lower**power
        draw = (self.rng.random() * (self.upper**power - low_term) + low_term) ** (1.0 / power)
        scaled = (draw - self.lower) / (self.upper - self.lower)
        return lo + _round_half_up(scaled * ((hi - 1) - lo))


SAMPLERS: Dict[str, Type] = {
    "uniform": UniformSampler,
    "gaussian": TruncatedGaussianSampler,
    "beta": BetaSampler,
    "power-law": PowerLawSampler,
}


def get_sampler(name: str, rng: np.random.Generator) -> Sampler:
    """
    Build a sampler by name.

    :param name: One of "uniform", "gaussian", "beta" or "power-law"
    :param rng: Generator the sampler draws from
    :return: The sampler instance
    :raises PreconditionError: If the name is not a known sampler
    """
    try:
        sampler_cls = SAMPLERS[name]
    except KeyError:
        raise PreconditionError(
            f"Unknown sampler '{name}'. Expected one of: {', '.join(SAMPLERS)}", parameter="sampler", value=name
        )
    return sampler_cls(rng)
