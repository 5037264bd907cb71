"""Matching, cancellation and bounded concurrent dispatch of project deletions."""

from qna_cleanup.purge.cancellation import CancellationToken
from qna_cleanup.purge.cancellation import install_interrupt_handler
from qna_cleanup.purge.dispatcher import ProjectDispatcher
from qna_cleanup.purge.dispatcher import run
from qna_cleanup.purge.enums import RunState
from qna_cleanup.purge.enums import WorkItemOutcome
from qna_cleanup.purge.matcher import compile_pattern
from qna_cleanup.purge.matcher import matches
from qna_cleanup.purge.models import DispatchConfig
from qna_cleanup.purge.models import ProjectDescriptor
from qna_cleanup.purge.models import RunResult
from qna_cleanup.purge.models import WorkItem
from qna_cleanup.purge.worker_pool import WorkerPool

__all__ = [
    "CancellationToken",
    "DispatchConfig",
    "ProjectDescriptor",
    "ProjectDispatcher",
    "RunResult",
    "RunState",
    "WorkItem",
    "WorkItemOutcome",
    "WorkerPool",
    "compile_pattern",
    "install_interrupt_handler",
    "matches",
    "run",
]
