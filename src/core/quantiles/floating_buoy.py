# pylint: disable=line-too-long
"""
Floating buoy estimator for the full percentile curve of a bounded integer stream.

G tracer groups, one per target percentile τ_i = i / (G + 1), are cast over
the range [0, R). Each cast feeds castSize samples to every tracer of every
group, using a single auxiliary uniform per sample shared by all tracers, and
then prunes each group so its tracers close in on the percentile. After the
last cast, the middle tracer of each group becomes that percentile's buoy.
The G buoys plus the fixed endpoints 0 and R - 1 are linked by linear
interpolation into 101 buoys, one per percentile 0..100.

Example usage:
    >>> rng = np.random.default_rng(7)
    >>> sampler = UniformSampler(rng)
    >>> initial_locations = cast(99, 11, 1000000, 10000, 3, sampler, rng)
    >>> all_buoys = link_buoys(initial_locations)
"""

import logging
from math import ceil, floor
from typing import Optional, Sequence

import numpy as np

from src.core.quantiles.samplers import Sampler, get_sampler
from src.core.quantiles.tracers import (
    generate_baseline,
    get_percentiles,
    initialize_tracers,
    prune,
    update_tracers,
)
from src.exceptions import InternalInvariantError
from src.service.payloads.cast_config import CastConfig

logger = logging.getLogger(__name__)

NUM_BUOYS = 101


class FloatingBuoy:
    """
    Cast controller owning the tracer matrix and its baseline.

    The sampler and the controller should draw from the same generator, so a
    single seed fixes the whole run. Per sample, the sample is drawn first and
    the auxiliary uniform second.
    """

    def __init__(self, config: CastConfig, sampler: Sampler, rng: np.random.Generator):
        self.config = config
        self.sampler = sampler
        self.rng = rng
        self.percentiles = get_percentiles(config.num_groups)
        self.tracers = initialize_tracers(config.num_groups, config.num_tracers, config.range)
        self.baseline = generate_baseline(self.tracers)
        self.samples_seen = 0
        self._upper = config.range - 1 if config.clamp else None
        # The starting lattice may place the top tracer on R itself
        self._ceiling = max(config.range - 1, int(self.tracers[0, -1]))

    def run_cast(self) -> int:
        """
        Run one cast: castSize samples followed by a prune of every group.

        :return: Number of groups repartitioned by the prune
        """
        range_ = self.config.range
        for _ in range(self.config.cast_size):
            sample = self.sampler.sample(0, range_)
            u = self.rng.random()
            update_tracers(self.tracers, sample, self.percentiles, u, self._upper)
        self.samples_seen += self.config.cast_size

        self._check_bounds()
        repartitioned = prune(self.tracers, self.baseline)
        self.baseline = generate_baseline(self.tracers)
        return repartitioned

    def cast(self) -> list[int]:
        """
        Run every cast and return the initial buoy locations.

        Middle tracers still on the top of the starting lattice (R itself when
        T - 1 divides R) are reported as R - 1.

        :return: List of length G + 2: 0, the middle tracer of each group, R - 1
        """
        for cast_index in range(self.config.num_cast):
            repartitioned = self.run_cast()
            logger.debug(
                f"Cast {cast_index + 1}/{self.config.num_cast} repartitioned {repartitioned} of {self.config.num_groups} groups"
            )

        middle = self.config.num_tracers // 2
        top = self.config.range - 1
        locations = [0] + [min(int(value), top) for value in self.tracers[:, middle]] + [top]
        logger.info(f"Cast {self.config.num_groups} tracer groups over {self.samples_seen} samples")
        return locations

    def link(self) -> list[int]:
        """Cast, then link the result into the 101-point buoy curve."""
        return link_buoys(self.cast())

    def _check_bounds(self) -> None:
        low = int(self.tracers.min())
        high = int(self.tracers.max())
        if low < 0 or high > self._ceiling:
            raise InternalInvariantError(
                f"Tracer escaped [0, {self._ceiling}]: min={low}, max={high}", component="cast"
            )


def cast(
    num_groups: int,
    num_tracers: int,
    range_: int,
    cast_size: int,
    num_cast: int,
    sampler: Sampler,
    rng: Optional[np.random.Generator] = None,
    clamp: bool = True,
) -> list[int]:
    """
    Cast tracer groups over a sample stream and return the initial buoy locations.

    :param num_groups: Number of tracer groups G; 100 % (G + 1) must be 0
    :param num_tracers: Tracers per group T, at least 2
    :param range_: Exclusive upper bound R of the samples, at least 2
    :param cast_size: Samples per cast, at least 1
    :param num_cast: Number of casts, at least 1
    :param sampler: Source of samples
    :param rng: Generator for the auxiliary uniform draws; a fresh unseeded
                generator is used when omitted
    :param clamp: Keep tracers inside [0, R - 1]
    :return: List of length G + 2
    :raises PreconditionError: If any parameter is outside its domain
    """
    config = CastConfig.build(
        num_groups=num_groups,
        num_tracers=num_tracers,
        range=range_,
        cast_size=cast_size,
        num_cast=num_cast,
        clamp=clamp,
    )
    if rng is None:
        rng = np.random.default_rng()
    return FloatingBuoy(config, sampler, rng).cast()


def link_buoys(initial_locations: Sequence[int]) -> list[int]:
    """
    Link the initial buoy locations into one buoy per percentile 0..100.

    Anchors at multiples of the group width w = 100 // (G + 1) are copied;
    the buoys between two anchors are linearly interpolated and truncated.

    :param initial_locations: List of length G + 2 from cast()
    :return: List of length 101
    :raises InternalInvariantError: If the locations do not give an integer group width
    """
    intervals = len(initial_locations) - 1
    if intervals < 1 or 100 % intervals != 0:
        raise InternalInvariantError(
            f"Cannot link {len(initial_locations)} locations into {NUM_BUOYS} buoys", component="link_buoys"
        )
    group_width = 100 // intervals

    all_buoys = []
    for index in range(NUM_BUOYS):
        if index % group_width == 0:
            all_buoys.append(int(initial_locations[index // group_width]))
        else:
            location = index / group_width
            low = int(initial_locations[floor(location)])
            high = int(initial_locations[ceil(location)])
            all_buoys.append(floor((location - floor(location)) * (high - low) + low))
    return all_buoys


def estimate_percentiles(sampler_name: str = "uniform", seed: Optional[int] = None, **params) -> list[int]:
    """
    Estimate the 101-point percentile curve of one of the exemplar samplers.

    A single generator built from ``seed`` feeds both the sampler and the
    auxiliary draws.

    :param sampler_name: "uniform", "gaussian", "beta" or "power-law"
    :param seed: Seed for the generator; None for a fresh entropy seed
    :param params: CastConfig fields (num_groups, num_tracers, range, cast_size, num_cast, clamp)
    :return: List of length 101
    :raises PreconditionError: On an unknown sampler or invalid parameters
    """
    config = CastConfig.build(**params)
    rng = np.random.default_rng(seed)
    sampler = get_sampler(sampler_name, rng)
    logger.info(f"Estimating percentiles of '{sampler_name}' samples with {config.to_tags()}")
    return FloatingBuoy(config, sampler, rng).link()
