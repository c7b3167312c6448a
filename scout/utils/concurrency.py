"""Bounded fan-out helper for the grounding and fetch stages."""

import asyncio
from typing import Awaitable, Callable, Iterable, List, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def bounded_gather(
    func: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    limit: int,
) -> List[R]:
    """Run ``func(item)`` for every item with at most *limit* calls in flight.

    Results keep input order.  If any call raises, or the caller is
    cancelled, every sibling task is cancelled and awaited before the
    exception propagates, so nothing keeps running after we return.
    """
    semaphore = asyncio.Semaphore(max(1, limit))

    async def run(item: T) -> R:
        async with semaphore:
            return await func(item)

    tasks = [asyncio.ensure_future(run(item)) for item in items]
    if not tasks:
        return []
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
