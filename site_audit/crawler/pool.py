# site_audit/crawler/pool.py
"""
Bounded worker pool shared by the resolver, the page auditor and the parity collector.

Every job runs under one ``asyncio.Semaphore``; finished results are handed to a
:class:`ResultAccumulator`, the only state shared between workers. A run deadline
or a stop event cancels whatever is still pending and reports it as unresolved.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, Iterable, List, Optional, Tuple, TypeVar

from site_audit.logger import logger

__all__ = ["ResultAccumulator", "BoundedRun", "run_bounded"]

T = TypeVar("T")
R = TypeVar("R")


class ResultAccumulator(Generic[T]):
    """Append-only collection written by concurrent workers."""

    def __init__(self) -> None:
        self._items: List[T] = []
        self._lock = asyncio.Lock()

    async def append(self, item: T) -> None:
        async with self._lock:
            self._items.append(item)

    def snapshot(self) -> List[T]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)


@dataclass(slots=True)
class BoundedRun(Generic[T, R]):
    """Completed ``(item, result)`` pairs plus the items that never finished."""

    results: List[Tuple[T, R]] = field(default_factory=list)
    unresolved: List[T] = field(default_factory=list)
    interrupted: bool = False


async def run_bounded(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    concurrency: int,
    deadline: Optional[float] = None,
    stop_event: Optional[asyncio.Event] = None,
) -> BoundedRun[T, R]:
    """Run ``worker(item)`` for every item with at most *concurrency* in flight.

    *deadline* is a number of seconds from now. Exceptions raised by *worker* are
    not caught here: workers are expected to turn expected failures into data.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")

    semaphore = asyncio.Semaphore(concurrency)
    accumulator: ResultAccumulator[Tuple[int, T, R]] = ResultAccumulator()

    async def _guarded(index: int, item: T) -> None:
        async with semaphore:
            result = await worker(item)
        await accumulator.append((index, item, result))

    queue = list(items)
    if not queue:
        return BoundedRun()
    if (stop_event is not None and stop_event.is_set()) or (deadline is not None and deadline <= 0):
        return BoundedRun(unresolved=queue, interrupted=True)

    tasks = [asyncio.create_task(_guarded(index, item)) for index, item in enumerate(queue)]
    stopper = asyncio.create_task(stop_event.wait()) if stop_event is not None else None
    loop = asyncio.get_running_loop()
    end = None if deadline is None else loop.time() + deadline
    pending = set(tasks)
    interrupted = False

    try:
        while pending:
            timeout = None if end is None else max(0.0, end - loop.time())
            waiters = pending | ({stopper} if stopper is not None else set())
            done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
            if not done or (stopper is not None and stopper in done):
                interrupted = True
                break
            pending -= done
            for task in done:
                # re-raise unexpected worker errors
                task.result()
    finally:
        if stopper is not None:
            stopper.cancel()
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    completed = accumulator.snapshot()
    finished = {index for index, _, _ in completed}
    unresolved = [item for index, item in enumerate(queue) if index not in finished]
    if interrupted:
        logger.warning("Stopped with %d of %d jobs unresolved", len(unresolved), len(queue))
    return BoundedRun(
        results=[(item, result) for _, item, result in completed],
        unresolved=unresolved,
        interrupted=interrupted,
    )
