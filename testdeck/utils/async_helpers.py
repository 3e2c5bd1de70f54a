# testdeck/utils/async_helpers.py
"""
Async utilities for safe task management, stream merging and cancelable races.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterable, AsyncIterator, Awaitable, Callable, Coroutine, Iterable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_task_exception(task: asyncio.Task, name: Optional[str] = None) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        task_name = name or task.get_name()
        logger.error(f"[AsyncTask:{task_name}] Unhandled exception: {exc}", exc_info=exc)


def create_safe_task(
    coro: Coroutine[Any, Any, Any],
    name: Optional[str] = None,
    log_errors: bool = True
) -> asyncio.Task:
    """
    Create an asyncio task with automatic error handling.

    This prevents fire-and-forget tasks from silently swallowing exceptions.

    Args:
        coro: The coroutine to run as a task
        name: Optional name for the task (for logging)
        log_errors: Whether to log errors (default True)

    Returns:
        The created asyncio.Task
    """
    task = asyncio.create_task(coro, name=name)
    if log_errors:
        task.add_done_callback(lambda t: _log_task_exception(t, name))
    return task


async def merge_streams(streams: Iterable[AsyncIterable[T]], buffer: int = 1) -> AsyncIterator[T]:
    """
    Merge several async iterables into one.

    Items from one source keep their relative order; across sources items are
    yielded as soon as they arrive. An error in any source is re-raised to the
    consumer. Closing the merged iterator cancels every source pump.

    At most `buffer` items wait in the merge, so sources are only pulled as
    fast as the consumer takes items.
    """
    queue: asyncio.Queue = asyncio.Queue(maxsize=buffer)
    done = object()

    async def _pump(stream: AsyncIterable[T]) -> None:
        try:
            async for item in stream:
                await queue.put((item, None))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            await queue.put((None, exc))
            return
        finally:
            # A pump canceled while blocked on a full queue is outside the
            # source, so the source has to be closed explicitly.
            if hasattr(stream, "aclose"):
                await stream.aclose()
        await queue.put((done, None))

    pumps = [asyncio.ensure_future(_pump(stream)) for stream in streams]
    remaining = len(pumps)
    try:
        while remaining:
            item, error = await queue.get()
            if error is not None:
                raise error
            if item is done:
                remaining -= 1
                continue
            yield item
    finally:
        for pump in pumps:
            pump.cancel()
        if pumps:
            await asyncio.wait(pumps)


async def join_tasks(aws: Sequence[Awaitable[Any]], eager_error: bool = True) -> List[Any]:
    """
    Wait for several awaitables and return their results in order.

    With `eager_error`, the first failure is raised immediately; the other
    tasks keep running and any later failure is logged rather than lost.
    Without it every task is awaited before the first failure is raised.
    A cancelled member contributes None.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    pending = set(tasks)
    when = asyncio.FIRST_EXCEPTION if eager_error else asyncio.ALL_COMPLETED

    while pending:
        finished, pending = await asyncio.wait(pending, return_when=when)
        failure = next(
            (t.exception() for t in tasks if t in finished and not t.cancelled() and t.exception()),
            None,
        )
        if failure is not None:
            for straggler in pending:
                straggler.add_done_callback(_log_task_exception)
            raise failure

    return [None if t.cancelled() else t.result() for t in tasks]


class CancelableOperation:
    """
    An awaitable unit of work that can be asked to stop.

    `cancel()` requests cancellation and waits until the operation has
    acknowledged it, so nothing it owns outlives the call. If the operation
    already produced a value nobody consumed, that value is handed to
    `on_discard` instead.
    """

    def __init__(
        self,
        awaitable: Awaitable[T],
        on_cancel: Optional[Callable[[], None]] = None,
        on_discard: Optional[Callable[[Any], None]] = None,
    ):
        self._future = asyncio.ensure_future(awaitable)
        self._on_cancel = on_cancel
        self._on_discard = on_discard

    @property
    def future(self) -> asyncio.Future:
        return self._future

    def done(self) -> bool:
        return self._future.done()

    def __await__(self):
        return self._future.__await__()

    async def cancel(self) -> None:
        if self._future.done():
            if self._on_discard is not None and not self._future.cancelled() and self._future.exception() is None:
                self._on_discard(self._future.result())
            return
        if self._on_cancel is not None:
            self._on_cancel()
        self._future.cancel()
        await asyncio.wait([self._future])


async def race(operations: Sequence[CancelableOperation]) -> Any:
    """
    Return the result of whichever operation completes first.

    Every other operation is canceled, and its cancellation awaited, before
    this returns or raises. When several finish in the same pass the first in
    list order wins; the others give their values back through `on_discard`.
    """
    futures = [op.future for op in operations]
    try:
        finished, _ = await asyncio.wait(futures, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        for op in operations:
            await op.cancel()
        raise

    winner = next(op for op in operations if op.future in finished)
    for op in operations:
        if op is not winner:
            await op.cancel()
    return winner.future.result()
