"""Async utilities for running coroutines in sync contexts and cancellable waits."""

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

from longform_engine.exceptions import RenderCancelledError

T = TypeVar("T")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine in a sync context.

    Reuses the current event loop if available, otherwise creates a new one.
    The loop is NOT closed after use because httpx caches connection pools
    bound to a specific loop, and sequential calls within the same Celery
    task would otherwise fail with "Event loop is closed".

    Args:
        coro: The coroutine to execute.

    Returns:
        The result of the coroutine.
    """
    try:
        loop = asyncio.get_event_loop()
        if loop.is_closed():
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
    return loop.run_until_complete(coro)


def raise_if_cancelled(cancel_event: asyncio.Event | None) -> None:
    """Raise RenderCancelledError if the cancel event has been set."""
    if cancel_event is not None and cancel_event.is_set():
        raise RenderCancelledError("Render cancelled")


async def wait(seconds: float, cancel_event: asyncio.Event | None = None) -> None:
    """Sleep without blocking the loop, waking early if the render is cancelled.

    Args:
        seconds: How long to wait. Non-positive values only check cancellation.
        cancel_event: Optional event; when set, the wait ends immediately.

    Raises:
        RenderCancelledError: If the cancel event is (or becomes) set.
    """
    raise_if_cancelled(cancel_event)
    if seconds <= 0:
        return

    if cancel_event is None:
        await asyncio.sleep(seconds)
        return

    try:
        await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
    except TimeoutError:
        return
    raise RenderCancelledError("Render cancelled")
