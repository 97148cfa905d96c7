"""
Utility functions for logging, including the run summary of the driver.
"""
import logging
from typing import Sequence

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | int = logging.INFO) -> None:
    """
    Configure root logging for the driver.

    Log records go to stderr so that stdout carries only the buoy curve.

    Args:
        level: A logging level or its name, e.g. "DEBUG"
    """
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


def log_run_summary(
    logger: logging.Logger,
    sampler_name: str,
    all_buoys: Sequence[int],
    error: float | None = None,
) -> None:
    """
    Log a one-line summary of a finished run.

    Args:
        logger: The logger instance to use for logging
        sampler_name: Name of the sampler that produced the stream
        all_buoys: The 101-point buoy curve
        error: Optional error against the uniform reference, as a fraction

    Example:
        >>> logger = logging.getLogger(__name__)
        >>> log_run_summary(logger, "uniform", all_buoys, 0.0042)
        # Logs: "uniform run: p25=249812, p50=499870, p75=750129, error=0.42%"
    """
    message = (
        f"{sampler_name} run: p25={all_buoys[25]}, p50={all_buoys[50]}, p75={all_buoys[75]}"
    )
    if error is not None:
        message = f"{message}, error={100 * error:.2f}%"
    logger.info(message)
