"""
Purge Enums

Terminal outcomes of a single deletion and states of a whole run.
"""

from enum import Enum


class WorkItemOutcome(str, Enum):
    """Terminal state of one dispatched deletion."""

    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"  # Deletion raised; isolated to this item
    CANCELLED = "CANCELLED"  # Abandoned because the run was cancelled


class RunState(str, Enum):
    """Lifecycle of a cleanup run: NOT_STARTED -> RUNNING -> {COMPLETED | CANCELLED | FAILED}."""

    NOT_STARTED = "NOT_STARTED"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"  # Listing failed; in-flight deletions were drained first

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETED, RunState.CANCELLED, RunState.FAILED)
