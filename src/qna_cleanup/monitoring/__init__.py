"""Monitoring package for console logging."""

from qna_cleanup.monitoring.logger import configure_logger

__all__ = [
    "configure_logger",
]
