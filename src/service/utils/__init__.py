"""Utility functions for the service layer."""

from src.service.utils.logging_utils import (
    configure_logging,
    log_run_summary,
)

__all__ = [
    "configure_logging",
    "log_run_summary",
]
