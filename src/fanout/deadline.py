"""Run one ledger operation against a deadline.

The operation is shielded: when the deadline fires (or an enclosing scope is
cancelled) the caller stops waiting, but the underlying request keeps going.
A submitted payment may still validate after we give up on it, and cancelling
the coroutine would not un-submit it anyway.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from fanout.errors import DeadlineExceeded, FanoutError, OperationError

log = logging.getLogger("fanout.deadline")

T = TypeVar("T")


class DeadlineRunner:
    """Executor for deadline-guarded operations.

    Holds strong references to the operations it stopped waiting for, since
    the event loop only keeps weak ones. Each orchestrator owns one runner and
    hands it to the components that talk to the ledger.
    """

    def __init__(self):
        self._abandoned: set[asyncio.Future] = set()

    @property
    def abandoned_count(self) -> int:
        return len(self._abandoned)

    def _discard_late(self, label: str):
        def _done(fut: asyncio.Future) -> None:
            self._abandoned.discard(fut)
            if fut.cancelled():
                log.debug("Abandoned %s was cancelled", label)
            elif (exc := fut.exception()) is not None:
                log.debug("Abandoned %s failed late: %s", label, exc)
            else:
                log.debug("Abandoned %s settled late, result discarded: %r", label, fut.result())

        return _done

    def _abandon(self, fut: asyncio.Future, label: str) -> None:
        if fut.done():
            self._discard_late(label)(fut)
            return
        self._abandoned.add(fut)
        fut.add_done_callback(self._discard_late(label))

    async def run_with_deadline(self, operation: Awaitable[T], timeout: float, *, label: str = "operation") -> T:
        """Await `operation` for at most `timeout` seconds.

        Raises DeadlineExceeded if the timer wins, OperationError if the operation
        itself fails. The timer is released on every path.
        """
        fut = asyncio.ensure_future(operation)
        deadline = asyncio.timeout(timeout)
        try:
            async with deadline:
                return await asyncio.shield(fut)
        except FanoutError:
            raise
        except TimeoutError as e:
            if not deadline.expired():
                # The operation raised TimeoutError on its own
                raise OperationError(f"{label} failed: {str(e) or 'timed out'}") from e
            self._abandon(fut, label)
            raise DeadlineExceeded(label, timeout) from None
        except asyncio.CancelledError:
            self._abandon(fut, label)
            raise
        except Exception as e:
            raise OperationError(f"{label} failed: {e}") from e
