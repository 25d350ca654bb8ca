import asyncio
from typing import Awaitable, Callable, Iterable, TypeVar

T = TypeVar("T")
R = TypeVar("R")


async def fan_out(
    items: Iterable[T],
    worker: Callable[[T], Awaitable[R]],
    limit: int = 10,
) -> list[R]:
    """
    Run ``worker`` once per item as separate tasks, at most ``limit`` at a time.

    Results come back in input order. If any worker raises, or the caller is
    cancelled, every remaining task is cancelled and awaited before the
    exception propagates, so no lookup outlives the request.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")

    semaphore = asyncio.Semaphore(limit)

    async def run(item: T) -> R:
        async with semaphore:
            return await worker(item)

    tasks = [asyncio.create_task(run(item)) for item in items]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
