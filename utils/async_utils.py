import asyncio
from typing import Any, Coroutine


async def gather_with_concurrency(n: int, *tasks: Coroutine[Any, Any, Any]) -> list[Any]:
    """
    Runs the coroutines concurrently, at most `n` at a time, and returns their
    results in submission order.
    """
    if n < 1:
        raise ValueError(f"Concurrency limit must be >= 1, got {n}")

    semaphore = asyncio.Semaphore(n)

    async def sem_task(task: Coroutine[Any, Any, Any]) -> Any:
        async with semaphore:
            return await task

    return await asyncio.gather(*(sem_task(task) for task in tasks))
