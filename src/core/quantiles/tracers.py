# pylint: disable=line-too-long
"""
Tracers: unit-step stochastic estimators for a single target percentile.

A tracer holds an integer estimate x of the τ-quantile of a stream. For each
sample s and auxiliary uniform u ~ U[0, 1):

    s > x and u < τ  ->  x + 1
    s < x and u > τ  ->  x - 1
    otherwise        ->  x

The expected drift is zero exactly at the τ-quantile, so the estimate settles
there (a fixed-step Robbins–Monro scheme).

A group of tracers targets one percentile from an evenly spaced starting
lattice. After a batch of samples, tracers on the low side that rose above
their baseline and tracers on the high side that fell below it are trailing
the truth; prune() discards them and respreads the group over the surviving
interval with integer spacing.

Tracer matrices are C-contiguous int64 arrays of shape (groups, tracers).
"""

import logging
from typing import Optional, Sequence

import numpy as np

from src.exceptions import InternalInvariantError, PreconditionError

logger = logging.getLogger(__name__)

TRACER_DTYPE = np.int64


def update_tracer(x: int, sample: int, percentile: float, u: float, upper: Optional[int] = None) -> int:
    """
    Apply the update rule to one tracer value.

    :param x: Current tracer value
    :param sample: Input sample
    :param percentile: Target percentile τ in (0, 1)
    :param u: Auxiliary uniform draw in [0, 1)
    :param upper: Optional clamp ceiling (R - 1). When given, increments are
                  refused at or above it and decrements are refused at or below 0.
    :return: The updated tracer value
    """
    if sample > x and u < percentile:
        if upper is None or x < upper:
            return x + 1
    elif sample < x and u > percentile:
        if upper is None or x > 0:
            return x - 1
    return x


def update_tracers(
    tracers: np.ndarray,
    sample: int,
    percentiles: np.ndarray,
    u: float,
    upper: Optional[int] = None,
) -> None:
    """
    Apply the update rule in place to every tracer of every group.

    All tracers see the same sample and the same auxiliary draw u. Each row of
    ``tracers`` targets the matching entry of ``percentiles``.

    :param tracers: Tracer matrix of shape (groups, tracers), modified in place
    :param sample: Input sample
    :param percentiles: Target percentile per group, shape (groups,)
    :param u: Shared auxiliary uniform draw
    :param upper: Optional clamp ceiling (R - 1)
    """
    targets = percentiles.reshape(-1, 1) if tracers.ndim == 2 else percentiles
    rise = (sample > tracers) & (u < targets)
    fall = (sample < tracers) & (u > targets)
    if upper is not None:
        rise &= tracers < upper
        fall &= tracers > 0
    tracers[rise] += 1
    tracers[fall] -= 1


def initialize_tracers(num_groups: int, num_tracers: int, range_: int) -> np.ndarray:
    """
    Build the starting tracer matrix.

    Every group gets the same lattice j * (range // (num_tracers - 1)), which
    spans [0, range - range % (num_tracers - 1)].

    :return: Matrix of shape (num_groups, num_tracers)
    """
    step = range_ // (num_tracers - 1)
    lattice = np.arange(num_tracers, dtype=TRACER_DTYPE) * step
    return np.tile(lattice, (num_groups, 1))


def generate_baseline(tracers: np.ndarray) -> np.ndarray:
    """Return an independent copy of the tracers."""
    return tracers.copy()


def get_percentiles(num_groups: int) -> np.ndarray:
    """Target percentiles (i + 1) / (num_groups + 1) for i = 0..num_groups-1."""
    return (np.arange(num_groups, dtype=np.float64) + 1) * (1.0 / (num_groups + 1))


def prune_group(tracers: np.ndarray, baseline: np.ndarray) -> bool:
    """
    Prune one group against its baseline and repartition it in place.

    The low edge advances past tracers that rose above their baseline, the
    high edge retreats past tracers that fell below it. If either edge moved,
    the group is respread evenly between the values at the two edges using
    integer spacing (hi - lo) // (T - 1).

    :param tracers: One group, shape (T,), modified in place
    :param baseline: The group's values at the start of the cast
    :return: True if the group was repartitioned
    """
    size = len(tracers)
    low = 0
    high = size - 1

    while low + 1 < high and tracers[low + 1] > baseline[low + 1]:
        low += 1

    while high - 1 > low and tracers[high - 1] < baseline[high - 1]:
        high -= 1

    if low == 0 and high == size - 1:
        return False

    low_value = int(tracers[low])
    high_value = int(tracers[high])
    if high_value < low_value:
        raise InternalInvariantError(
            f"Group out of order before repartition: {low_value} > {high_value}", component="prune"
        )

    step = (high_value - low_value) // (size - 1)
    tracers[:] = np.arange(size, dtype=TRACER_DTYPE) * step + low_value
    return True


def check_monotone(tracers: np.ndarray) -> None:
    """Raise InternalInvariantError if any group is not non-decreasing."""
    if np.any(np.diff(tracers, axis=-1) < 0):
        raise InternalInvariantError("Tracer group is not monotonically non-decreasing", component="prune")


def prune(tracers: np.ndarray, baseline: np.ndarray) -> int:
    """
    Prune every group of a tracer matrix against its baseline.

    :param tracers: Matrix of shape (groups, tracers), modified in place
    :param baseline: Snapshot of the matrix at the start of the cast
    :return: Number of groups that were repartitioned
    """
    repartitioned = 0
    for group, group_baseline in zip(tracers, baseline):
        if prune_group(group, group_baseline):
            repartitioned += 1
    check_monotone(tracers)
    return repartitioned


class Tracer:
    """A single tracer for one percentile."""

    def __init__(self, percentile: float, value: int = 0, upper: Optional[int] = None):
        if not 0 < percentile < 1:
            raise PreconditionError("percentile must be in the range (0, 1)", "percentile", percentile)
        self.percentile = percentile
        self.value = value
        self.upper = upper

    def update(self, sample: int, u: float) -> int:
        self.value = update_tracer(self.value, sample, self.percentile, u, self.upper)
        return self.value


class TracerGroup:
    """
    A fixed-size group of tracers targeting one percentile.

    The group starts on the evenly spaced lattice over [0, range_] and keeps
    its own baseline, which is refreshed after every prune.

    Example usage:
        >>> group = TracerGroup(percentile=0.75, num_tracers=11, range_=1000)
        >>> for sample in stream:
        ...     group.update(sample, rng.random())
        >>> group.prune()
        >>> group.estimate
    """

    def __init__(self, percentile: float, num_tracers: int, range_: int, clamp: bool = True):
        """
        :param percentile: Target percentile τ in (0, 1)
        :param num_tracers: Number of tracers T, at least 2
        :param range_: Exclusive upper bound R of the samples, at least 2
        :param clamp: Keep updated tracers inside [0, R - 1]
        :raises PreconditionError: If any parameter is out of its domain
        """
        if not 0 < percentile < 1:
            raise PreconditionError("percentile must be in the range (0, 1)", "percentile", percentile)
        if num_tracers < 2:
            raise PreconditionError("A tracer group needs at least 2 tracers", "num_tracers", num_tracers)
        if range_ < 2:
            raise PreconditionError("range must be at least 2", "range", range_)

        self.percentile = percentile
        self.range = range_
        self.upper = range_ - 1 if clamp else None
        self._targets = np.array([percentile])
        self._tracers = initialize_tracers(1, num_tracers, range_)[0]
        self._baseline = generate_baseline(self._tracers)

    def update(self, sample: int, u: float) -> None:
        """Update every tracer in the group with one sample and a shared u."""
        update_tracers(self._tracers, sample, self._targets, u, self.upper)

    def prune(self) -> bool:
        """Prune against the current baseline, then take a fresh baseline."""
        repartitioned = prune_group(self._tracers, self._baseline)
        check_monotone(self._tracers)
        self._baseline = generate_baseline(self._tracers)
        return repartitioned

    @property
    def estimate(self) -> int:
        """The middle tracer's value."""
        return int(self._tracers[len(self._tracers) // 2])

    @property
    def values(self) -> list[int]:
        return self._tracers.tolist()

    @property
    def baseline(self) -> list[int]:
        return self._baseline.tolist()

    def __len__(self) -> int:
        return len(self._tracers)


def track_percentile(
    sampler,
    rng: np.random.Generator,
    percentile: float,
    num_tracers: int,
    range_: int,
    num_samples: int,
    prune_every: int,
) -> TracerGroup:
    """
    Track one percentile with a single pruning tracer group.

    The group is pruned every ``prune_every`` samples, before that sample is
    processed (never before the first one). Each sample is drawn from
    ``sampler`` over [0, range_) and followed by one auxiliary draw.

    :return: The tracer group after the last sample
    """
    if num_samples < 1:
        raise PreconditionError("num_samples must be at least 1", "num_samples", num_samples)
    if prune_every < 1:
        raise PreconditionError("prune_every must be at least 1", "prune_every", prune_every)

    group = TracerGroup(percentile, num_tracers, range_)
    for iteration in range(num_samples):
        if iteration != 0 and iteration % prune_every == 0:
            if group.prune():
                logger.debug(f"Repartitioned tracers at sample {iteration}: {group.values}")
        sample = sampler.sample(0, range_)
        group.update(sample, rng.random())
    return group


def run_tracer(samples: Sequence[int], percentile: float, rng: np.random.Generator, start: int = 0) -> int:
    """Feed a fixed sequence of samples through a single tracer and return its value."""
    tracer = Tracer(percentile, value=start)
    for sample in samples:
        tracer.update(int(sample), rng.random())
    return tracer.value
