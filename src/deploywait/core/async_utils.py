"""Async utilities for bridging the wait flow into Click commands."""

import asyncio
from collections.abc import Awaitable, Coroutine
from typing import Any, TypeVar

T = TypeVar("T")


async def run_with_timeout(
    coro: Awaitable[T],
    timeout: float,
    timeout_message: str = "Operation timed out",
) -> T:
    """Run a coroutine with a timeout.

    Args:
        coro: Coroutine to run
        timeout: Timeout in seconds
        timeout_message: Message for timeout error

    Returns:
        Result of the coroutine

    Raises:
        WaitTimeoutError: If the operation times out
    """
    from deploywait.core.exceptions import WaitTimeoutError

    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except asyncio.TimeoutError:
        raise WaitTimeoutError(timeout_message, timeout_seconds=int(timeout))


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion from a synchronous Click command."""
    return asyncio.run(coro)
