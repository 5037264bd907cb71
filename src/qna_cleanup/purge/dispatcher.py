"""
Dispatch engine for a cleanup run.

Pulls projects from the listing one at a time, keeps the ones whose name matches
the configured pattern and either reports them (dry-run) or hands them to a
bounded WorkerPool for deletion. Whatever happens during the pull loop
(exhaustion, cancellation or a listing failure) the pool is drained before the
run returns, so every submitted deletion ends SUCCEEDED, FAILED or CANCELLED.
"""

import asyncio
from typing import AsyncIterable
from typing import AsyncIterator
from typing import Optional

from loguru import logger

from qna_cleanup.errors import OperationCancelledError
from qna_cleanup.errors import SourceError
from qna_cleanup.errors import describe_azure_error
from qna_cleanup.purge.cancellation import CancellationToken
from qna_cleanup.purge.enums import RunState
from qna_cleanup.purge.enums import WorkItemOutcome
from qna_cleanup.purge.matcher import matches
from qna_cleanup.purge.models import DispatchConfig
from qna_cleanup.purge.models import ProjectDescriptor
from qna_cleanup.purge.models import RunResult
from qna_cleanup.purge.worker_pool import DeletionSink
from qna_cleanup.purge.worker_pool import WorkerPool


class ProjectDispatcher:
    """
    Runs one cleanup pass over a project listing.

    A dispatcher runs once; its ``state`` moves
    NOT_STARTED -> RUNNING -> {COMPLETED | CANCELLED | FAILED}.
    """

    def __init__(self, config: DispatchConfig, deleter: DeletionSink, token: CancellationToken):
        """
        Initialize the dispatcher.

        Args:
            config: Pattern, dry-run flag and worker count for this run
            deleter: Deletion sink invoked by the worker pool (never called in dry-run)
            token: Cancellation token shared with the interrupt handler
        """
        self.config = config
        self.deleter = deleter
        self.token = token
        self.state = RunState.NOT_STARTED
        self.pool: Optional[WorkerPool] = None
        self.result: Optional[RunResult] = None

        self._matched = 0
        self._reported = 0

    async def run(self, source: AsyncIterable[ProjectDescriptor]) -> RunResult:
        """
        Consume ``source`` and delete (or report) every matching project.

        Returns:
            RunResult summarizing the run

        Raises:
            SourceError: If the listing fails; raised only after in-flight deletions drained
        """
        if self.state is not RunState.NOT_STARTED:
            raise RuntimeError("A ProjectDispatcher can only run once")
        self.state = RunState.RUNNING

        if not self.config.dry_run:
            self.pool = WorkerPool(self.config.max_workers, self.token, self.deleter)

        source_error: Optional[SourceError] = None
        iterator = source.__aiter__()
        try:
            source_error = await self._pull_loop(iterator)
        except asyncio.CancelledError:
            # The hosting task was cancelled; treat it like an operator interrupt
            self.token.cancel("run task cancelled")
            raise
        finally:
            await _close_source(iterator)
            if self.pool is not None:
                await self.pool.join()

        if source_error is not None:
            self.state = RunState.FAILED
        elif self.token.is_cancelled:
            self.state = RunState.CANCELLED
        else:
            self.state = RunState.COMPLETED

        self.result = self._build_result()
        if source_error is not None:
            source_error.result = self.result
            raise source_error
        return self.result

    async def _pull_loop(self, iterator: AsyncIterator[ProjectDescriptor]) -> Optional[SourceError]:
        """
        Pull until the listing ends, the run is cancelled or the listing fails.

        Each pull is raced against the token, so a stalled page fetch is abandoned
        as soon as the run is cancelled. Listing errors raised once the token has
        fired end the run as cancelled rather than failed.
        """
        while not self.token.is_cancelled:
            try:
                project = await self.token.guard(iterator.__anext__())
            except StopAsyncIteration:
                return None
            except OperationCancelledError:
                logger.debug("Abandoned pending project listing page: run was cancelled")
                return None
            except Exception as exc:  # pylint: disable=broad-except
                if self.token.is_cancelled:
                    # The listing failed while unwinding after cancellation
                    logger.debug(f"Project listing raised after cancellation: {describe_azure_error(exc)}")
                    return None
                logger.opt(exception=True).debug("Project listing raised")
                error = SourceError(f"Listing projects failed: {describe_azure_error(exc)}")
                error.__cause__ = exc
                return error

            if self.token.is_cancelled:
                logger.debug(f"Discarding {project.name}: run was cancelled")
                return None

            if not matches(project.name, self.config.pattern):
                logger.debug(f"Skipping {project.name}: does not match")
                continue

            self._matched += 1
            if self.config.dry_run:
                logger.warning(f"Would delete {project.name}")
                self._reported += 1
                continue

            if await self.pool.submit(project.name) is None:
                return None
        return None

    def _build_result(self) -> RunResult:
        if self.pool is None:
            return RunResult(
                state=self.state,
                dry_run=True,
                matched=self._matched,
                attempted=self._reported,
            )
        return RunResult(
            state=self.state,
            dry_run=False,
            matched=self._matched,
            attempted=len(self.pool.items),
            succeeded=self.pool.count(WorkItemOutcome.SUCCEEDED),
            failed=self.pool.count(WorkItemOutcome.FAILED),
            cancelled=self.pool.count(WorkItemOutcome.CANCELLED),
            peak_in_flight=self.pool.peak_in_flight,
        )


async def _close_source(iterator: AsyncIterator) -> None:
    """Close an async generator source so its own I/O can unwind."""
    aclose = getattr(iterator, "aclose", None)
    if aclose is None:
        return
    try:
        await aclose()
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning(f"Failed to close project listing cleanly: {describe_azure_error(exc)}")


async def run(
    source: AsyncIterable[ProjectDescriptor],
    deleter: DeletionSink,
    config: DispatchConfig,
    token: CancellationToken,
) -> RunResult:
    """Run a single cleanup pass; see ProjectDispatcher.run."""
    return await ProjectDispatcher(config, deleter, token).run(source)
