"""Utility modules for Costeo AI."""

from utils.logging_config import configure_logging
from utils.pipeline_logger import (
    log_estimation_start,
    log_condensation,
    log_estimation_complete,
    log_estimation_failed,
)

__all__ = [
    "configure_logging",
    "log_estimation_start",
    "log_condensation",
    "log_estimation_complete",
    "log_estimation_failed",
]
