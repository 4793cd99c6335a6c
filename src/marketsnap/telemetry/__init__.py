"""Telemetry module for logging and run metrics."""

from marketsnap.telemetry.logger import AsyncLogger, setup_logging
from marketsnap.telemetry.metrics import RunMetrics, StepStats


__all__ = [
    "AsyncLogger",
    "RunMetrics",
    "StepStats",
    "setup_logging",
]
