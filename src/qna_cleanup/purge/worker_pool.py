"""
Bounded pool of deletion tasks.

Each submitted project name becomes a WorkItem executed as its own asyncio task.
A semaphore holds one slot per running deletion, so no more than max_workers
deletions are ever in flight. Submission waits for a free slot but gives up as
soon as the run is cancelled.
"""

import asyncio
from typing import List
from typing import Optional
from typing import Protocol
from typing import Set

from loguru import logger

from qna_cleanup.errors import DeletionError
from qna_cleanup.errors import OperationCancelledError
from qna_cleanup.errors import describe_azure_error
from qna_cleanup.purge.cancellation import CancellationToken
from qna_cleanup.purge.enums import WorkItemOutcome
from qna_cleanup.purge.models import WorkItem


class DeletionSink(Protocol):
    """Anything that can delete a project by name and honors the cancellation token."""

    async def delete(self, name: str, token: CancellationToken) -> None:
        ...


class WorkerPool:
    """
    Semaphore-gated task spawner with an explicit close-and-drain shutdown.

    Attributes
    ----------
    items : List[WorkItem]
        Every WorkItem submitted, in submission order
    in_flight : int
        Deletions currently executing
    peak_in_flight : int
        Highest value in_flight reached during the pool's lifetime
    """

    def __init__(self, max_workers: int, token: CancellationToken, deleter: DeletionSink):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        self.max_workers = max_workers
        self.items: List[WorkItem] = []
        self.in_flight = 0
        self.peak_in_flight = 0

        self._token = token
        self._deleter = deleter
        self._slots = asyncio.Semaphore(max_workers)
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def submit(self, name: str) -> Optional[WorkItem]:
        """
        Submit a deletion for ``name``, waiting for a free slot if the pool is saturated.

        Returns:
            The new WorkItem, or None if the run was cancelled before a slot freed up
            (nothing is submitted in that case)

        Raises:
            RuntimeError: If the pool has already been closed
        """
        if self._closed:
            raise RuntimeError("Cannot submit to a closed WorkerPool")

        if not await self._acquire_slot():
            logger.debug(f"Not submitting {name}: run was cancelled")
            return None

        item = WorkItem(name=name)
        self.items.append(item)
        logger.warning(f"Deleting {name}")

        task = asyncio.create_task(self._execute(item), name=f"delete-project:{name}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return item

    def close(self) -> None:
        """Refuse any further submissions."""
        self._closed = True

    async def join(self) -> None:
        """Close the pool and wait until every submitted WorkItem is terminal."""
        self.close()
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def count(self, outcome: WorkItemOutcome) -> int:
        return sum(1 for item in self.items if item.outcome is outcome)

    async def _acquire_slot(self) -> bool:
        try:
            await self._token.guard(self._slots.acquire())
        except OperationCancelledError:
            return False

        # The slot and the cancellation may land together; cancellation wins
        if self._token.is_cancelled:
            self._slots.release()
            return False
        return True

    async def _execute(self, item: WorkItem) -> None:
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            self._token.raise_if_cancelled()
            await self._deleter.delete(item.name, self._token)
        except OperationCancelledError:
            item.outcome = WorkItemOutcome.CANCELLED
            logger.info(f"Deletion of {item.name} cancelled")
        except asyncio.CancelledError:
            item.outcome = WorkItemOutcome.CANCELLED
            raise
        except Exception as exc:  # pylint: disable=broad-except
            # Failures are isolated to this item; sibling deletions keep running
            item.outcome = WorkItemOutcome.FAILED
            item.error = exc.detail if isinstance(exc, DeletionError) else describe_azure_error(exc)
            logger.error(f"Failed to delete {item.name}: {item.error}")
        else:
            item.outcome = WorkItemOutcome.SUCCEEDED
            logger.success(f"Deleted {item.name}")
        finally:
            self.in_flight -= 1
            self._slots.release()
