"""
Reference percentile curves and the buoy error metric.
"""

from typing import Sequence

import numpy as np
from scipy import stats

from src.core.quantiles.floating_buoy import NUM_BUOYS


def uniform_reference_curve(range_max: int) -> list[int]:
    """Percentiles of the uniform distribution on [0, range_max]: (i * range_max) // 100."""
    return [(index * range_max) // (NUM_BUOYS - 1) for index in range(NUM_BUOYS)]


def reference_curve(distribution, range_max: int) -> list[int]:
    """
    Percentiles of a distribution on [0, 1] scaled onto [0, range_max].

    :param distribution: Frozen scipy.stats distribution supported on [0, 1],
                         e.g. ``stats.beta(1, 5)``
    :param range_max: The largest sample value, R - 1
    :return: List of length 101, rounded half-up
    """
    levels = np.linspace(0.0, 1.0, NUM_BUOYS)
    quantiles = np.clip(distribution.ppf(levels), 0.0, 1.0)
    return [int(value) for value in np.floor(quantiles * range_max + 0.5)]


def truncated_gaussian_distribution():
    """The [0, 1] Gaussian with mean 1/2 and standard deviation 1/6, truncated at three deviations."""
    return stats.truncnorm(-3, 3, loc=0.5, scale=1.0 / 6)


def get_error(all_buoys: Sequence[int], range_max: int) -> float:
    """
    Relative error of a buoy curve against the uniform reference.

        err = sum_i |A[i] - B[i]| / sum_i A[i],  A[i] = (i * range_max) // 100

    :param all_buoys: Curve of 101 buoys
    :param range_max: The largest sample value, R - 1
    :return: The error as a fraction (0.01 is 1%)
    :raises ValueError: If the curve is not 101 long or the reference sums to zero
    """
    if len(all_buoys) != NUM_BUOYS:
        raise ValueError(f"Expected {NUM_BUOYS} buoys, got {len(all_buoys)}")

    actual = uniform_reference_curve(range_max)
    total = sum(actual)
    if total == 0:
        raise ValueError("range_max must be positive")

    total_error = sum(abs(expected - buoy) for expected, buoy in zip(actual, all_buoys))
    return total_error / total
