"""Typing helpers shared across the package."""

import inspect
from typing import Any, Awaitable, Callable, TypeVar, Union

T = TypeVar("T")

MaybeAwaitable = Union[T, Awaitable[T]]
MaybeAwaitableCallable = Callable[..., MaybeAwaitable[Any]]


async def maybe_await(value: MaybeAwaitable[T]) -> T:
    """Await `value` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value
