from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from clover.errors import RunInterrupted

T = TypeVar("T")


async def wait_until_stopped(coro: Awaitable[T], stop_event: asyncio.Event) -> T:
    """Wait for the given coroutine to complete, unless the stop_event is set first.

    In-flight work is cancelled, not awaited to a clean finish, when the event fires.
    """
    fut = asyncio.ensure_future(coro)
    waiter = asyncio.ensure_future(stop_event.wait())
    waiter.add_done_callback(lambda _: fut.cancel())
    try:
        return await fut
    except asyncio.CancelledError:
        if stop_event.is_set() and fut.cancelled():
            raise RunInterrupted("run interrupted") from None
        raise
    finally:
        waiter.cancel()
