import argparse
import logging
import sys
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from src.core.quantiles.floating_buoy import estimate_percentiles
from src.core.quantiles.reference import get_error
from src.core.quantiles.samplers import SAMPLERS
from src.exceptions import InternalInvariantError, PreconditionError
from src.service.payloads.cast_config import (
    DEFAULT_CAST_SIZE,
    DEFAULT_NUM_CAST,
    DEFAULT_NUM_GROUPS,
    DEFAULT_NUM_TRACERS,
    DEFAULT_RANGE,
)
from src.service.utils import configure_logging, log_run_summary

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVARIANT = 1
EXIT_PRECONDITION = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="floating-buoy",
        description="Estimate the 101-point percentile curve of a sample stream with floating buoys.",
    )
    parser.add_argument("--sampler", choices=sorted(SAMPLERS), default="uniform", help="Sample distribution")
    parser.add_argument("--num-groups", type=int, default=DEFAULT_NUM_GROUPS, help="Tracer groups G, 100 %% (G+1) == 0")
    parser.add_argument("--num-tracers", type=int, default=DEFAULT_NUM_TRACERS, help="Tracers per group, at least 2")
    parser.add_argument("--range", type=int, default=DEFAULT_RANGE, help="Samples lie in [0, range)")
    parser.add_argument("--cast-size", type=int, default=DEFAULT_CAST_SIZE, help="Samples per cast")
    parser.add_argument("--num-cast", type=int, default=DEFAULT_NUM_CAST, help="Number of casts")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random generator")
    parser.add_argument("--no-clamp", action="store_true", help="Do not clamp tracers to [0, range-1]")
    parser.add_argument("--report-error", action="store_true", help="Print the error against the uniform reference")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Logging level for stderr",
    )
    return parser


def format_error(error: float) -> str:
    """Format an error fraction as a percentage with two decimals, rounding half-up."""
    percent = Decimal(repr(100 * error)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"Error: {percent}%."


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        all_buoys = estimate_percentiles(
            args.sampler,
            seed=args.seed,
            num_groups=args.num_groups,
            num_tracers=args.num_tracers,
            range=args.range,
            cast_size=args.cast_size,
            num_cast=args.num_cast,
            clamp=not args.no_clamp,
        )
    except PreconditionError as e:
        logger.error(f"Invalid parameters: {e}")
        return EXIT_PRECONDITION
    except InternalInvariantError as e:
        logger.error(f"Estimator invariant violated: {e}")
        return EXIT_INVARIANT

    for buoy in all_buoys:
        print(buoy)

    error = None
    if args.report_error:
        error = get_error(all_buoys, args.range - 1)
        print(format_error(error))

    log_run_summary(logger, args.sampler, all_buoys, error)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
