"""
Purge Models

Descriptors pulled from the listing, the per-run dispatch configuration,
in-flight deletions and the run summary.
"""

import re
from typing import Optional

import pydantic
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

from qna_cleanup.errors import ConfigurationError
from qna_cleanup.purge.enums import RunState
from qna_cleanup.purge.enums import WorkItemOutcome
from qna_cleanup.purge.matcher import compile_pattern


class ProjectDescriptor(BaseModel):
    """One project as returned by the listing API; identified only by its name."""

    model_config = ConfigDict(frozen=True)

    name: str


class DispatchConfig(BaseModel):
    """Immutable configuration for one cleanup run."""

    model_config = ConfigDict(frozen=True)

    pattern: re.Pattern
    dry_run: bool = False
    max_workers: int = Field(default=1, ge=1)

    @classmethod
    def from_options(cls, pattern: str, dry_run: bool, max_workers: int) -> "DispatchConfig":
        """
        Build a config from raw option values.

        Raises
        ------
        ConfigurationError
            If the pattern does not compile or max_workers is not positive
        """
        compiled = compile_pattern(pattern)
        try:
            return cls(pattern=compiled, dry_run=dry_run, max_workers=max_workers)
        except pydantic.ValidationError as exc:
            raise ConfigurationError(f"--workers must be a positive integer, got {max_workers!r}") from exc


class WorkItem(BaseModel):
    """A dispatched deletion, tracked from submission to its terminal outcome."""

    name: str
    outcome: Optional[WorkItemOutcome] = None
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.outcome is not None


class RunResult(BaseModel):
    """Summary of a finished run."""

    state: RunState
    dry_run: bool
    matched: int = 0  # Matches seen before cancellation
    attempted: int = 0  # Deletions submitted, or would-delete notices in dry-run
    succeeded: int = 0
    failed: int = 0
    cancelled: int = 0
    peak_in_flight: int = 0

    @property
    def has_failures(self) -> bool:
        return self.failed > 0
