"""Choosing the response for a request: dispatcher first, then the queue."""

from __future__ import annotations

from typing import Callable, Optional

from ..models import MockResponse, RecordedRequest
from ..store import ResponseQueue
from ..type_utils import MaybeAwaitable, maybe_await

Dispatcher = Callable[[RecordedRequest], MaybeAwaitable[MockResponse]]


class Resolver:
    """
    Holds at most one dispatcher in front of a ResponseQueue.

    While a dispatcher is installed the queue and its default are
    never consulted.
    """

    def __init__(self, responses: ResponseQueue):
        self.responses = responses
        self._dispatcher: Optional[Dispatcher] = None
        # Swapping the dispatcher and popping the queue serialize on one lock.
        self._lock = responses.lock

    @property
    def dispatcher(self) -> Optional[Dispatcher]:
        with self._lock:
            return self._dispatcher

    @dispatcher.setter
    def dispatcher(self, dispatcher: Optional[Dispatcher]) -> None:
        if dispatcher is not None and not callable(dispatcher):
            raise TypeError(f"dispatcher must be callable, got {dispatcher!r}")
        with self._lock:
            self._dispatcher = dispatcher

    async def resolve(self, request: RecordedRequest) -> MockResponse:
        """
        Return the response for `request`.

        Raises NoResponseAvailable when falling through to an exhausted
        queue without a default, and TypeError when a dispatcher returns
        something other than a MockResponse.
        """
        dispatcher = self.dispatcher
        if dispatcher is None:
            return self.responses.resolve()

        response = await maybe_await(dispatcher(request))
        if not isinstance(response, MockResponse):
            raise TypeError(f"dispatcher returned {type(response).__name__}, expected MockResponse")
        return response
