"""Helpers for tests that drive a MockWebServer."""

from typing import Any, Awaitable, TypeVar

import anyio

from ..type_utils import MaybeAwaitableCallable, maybe_await

T = TypeVar("T")


async def with_timeout(awaitable: Awaitable[T], timeout: float) -> T:
    """Await `awaitable`, raising TimeoutError after `timeout` seconds."""
    with anyio.fail_after(timeout):
        return await awaitable


async def wait_for(
    condition: MaybeAwaitableCallable,
    timeout: float = 1.0,
    interval: float = 0.01,
) -> Any:
    """
    Poll `condition` until it returns a truthy value and return that value.

    Raises TimeoutError if it is still falsy after `timeout` seconds.
    """
    with anyio.fail_after(timeout):
        while True:
            result = await maybe_await(condition())
            if result:
                return result
            await anyio.sleep(interval)
