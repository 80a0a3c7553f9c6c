import asyncio
from collections.abc import Callable
from typing import TypeVar

T = TypeVar("T")


async def run_bounded(func: Callable[..., T], *args: object, timeout_seconds: float) -> T:
    """Run a blocking collaborator call in a worker thread with a bounded wait.

    Raises:
        TimeoutError: if the call does not finish within timeout_seconds.
        Exception: whatever the call itself raises.
    """
    return await asyncio.wait_for(
        asyncio.to_thread(func, *args),
        timeout=timeout_seconds,
    )
