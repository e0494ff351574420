"""Periodic execution of the batch email sender."""

from .service import SchedulerService

__all__ = [
    "SchedulerService",
]
