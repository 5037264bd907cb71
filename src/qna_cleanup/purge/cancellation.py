"""
Cooperative cancellation for a cleanup run.

A single CancellationToken is created per run and passed to every call that can
suspend: pulling the next project, waiting for a free worker slot and the
remote delete itself. Operator interrupts are mapped onto the token by
install_interrupt_handler, so Ctrl+C never kills the process outright; the run
stops submitting work, abandons in-flight deletions and drains.
"""

import asyncio
import signal
import threading
from typing import Awaitable
from typing import Callable
from typing import Optional
from typing import TypeVar

from loguru import logger

from qna_cleanup.errors import OperationCancelledError

T = TypeVar("T")

INTERRUPT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class CancellationToken:
    """
    One-shot cancellation signal backed by an asyncio.Event.

    cancel() is idempotent and may be called from a signal handler or another
    thread; only the first call has any effect.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self._lock = threading.Lock()
        self._cancelled = False
        self._reason = ""
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> bool:
        """
        Signal cancellation.

        Returns True for the call that actually flipped the token, False for
        every later call.
        """
        with self._lock:
            if self._cancelled:
                return False
            self._cancelled = True
            self._reason = reason

        loop = self._loop
        if loop is not None and loop.is_running() and not _is_running_on(loop):
            loop.call_soon_threadsafe(self._event.set)
        else:
            self._event.set()
        return True

    def raise_if_cancelled(self) -> None:
        """Raise OperationCancelledError if the token has fired."""
        if self._cancelled:
            raise OperationCancelledError(self._reason)

    async def wait(self) -> None:
        """Wait until cancellation is signalled."""
        self._bind_loop()
        await self._event.wait()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Await ``awaitable`` unless the token fires first.

        When the token wins, the awaitable is cancelled, allowed to unwind, and
        OperationCancelledError is raised. If both finish together the
        awaitable's own result (or exception) takes precedence.
        """
        self._bind_loop()
        operation = asyncio.ensure_future(awaitable)
        if self._cancelled:
            operation.cancel()
            await asyncio.gather(operation, return_exceptions=True)
            raise OperationCancelledError(self._reason)

        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({operation, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            operation.cancel()
            waiter.cancel()
            await asyncio.gather(operation, return_exceptions=True)
            raise

        if operation.done():
            waiter.cancel()
            return operation.result()

        operation.cancel()
        # Let the in-progress call unwind before reporting the cancellation
        await asyncio.gather(operation, return_exceptions=True)
        raise OperationCancelledError(self._reason)

    def _bind_loop(self) -> None:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()


def _is_running_on(loop: asyncio.AbstractEventLoop) -> bool:
    try:
        return asyncio.get_running_loop() is loop
    except RuntimeError:
        return False


def install_interrupt_handler(
    token: CancellationToken,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> Callable[[], None]:
    """
    Map SIGINT and SIGTERM onto ``token``.

    The first interrupt logs "Canceling..." and fires the token; later ones are
    ignored while the run drains. The process is never terminated by the handler.

    Args:
        token: Token to cancel on interrupt
        loop: Event loop running the cleanup (defaults to the running loop)

    Returns:
        A callable that restores the previous signal handling
    """
    loop = loop or asyncio.get_running_loop()

    def _on_interrupt() -> None:
        if token.cancel("interrupted by operator"):
            logger.warning("Canceling...")
        else:
            logger.debug("Already canceling, waiting for in-flight deletions to finish")

    restorers = []
    for sig in INTERRUPT_SIGNALS:
        try:
            loop.add_signal_handler(sig, _on_interrupt)
            restorers.append(lambda sig=sig: loop.remove_signal_handler(sig))
        except (NotImplementedError, RuntimeError):
            # Event loops without add_signal_handler (Windows): fall back to signal.signal
            previous = signal.signal(sig, lambda signum, frame: loop.call_soon_threadsafe(_on_interrupt))
            restorers.append(lambda sig=sig, previous=previous: signal.signal(sig, previous))

    def restore() -> None:
        for restorer in restorers:
            restorer()

    return restore
