"""Queue of scripted responses."""

from collections import deque
from typing import Optional
import threading

from ..errors import NoResponseAvailable
from ..models import MockResponse


class ResponseQueue:
    """
    Thread-safe FIFO of scripted responses with an optional fallback.

    Insertion order is serving order. When the queue runs dry the
    default response (if any) is served instead, as many times as needed.
    """

    def __init__(self, default_response: Optional[MockResponse] = None):
        self._responses: deque[MockResponse] = deque()
        self._default: Optional[MockResponse] = None
        self._lock = threading.Lock()
        self.default_response = default_response

    @property
    def lock(self) -> threading.Lock:
        """Lock serializing resolution; shared with the dispatcher slot."""
        return self._lock

    @property
    def default_response(self) -> Optional[MockResponse]:
        with self._lock:
            return self._default

    @default_response.setter
    def default_response(self, response: Optional[MockResponse]) -> None:
        if response is not None and not response.is_reusable:
            raise ValueError("default response body is a one-shot iterator; use a list or MockResponse.file()")
        with self._lock:
            self._default = response

    def enqueue(self, response: MockResponse) -> None:
        """Append a response to the tail of the queue."""
        with self._lock:
            self._responses.append(response)

    def resolve(self) -> MockResponse:
        """
        Pop the oldest response.

        Falls back to the default response when the queue is empty.
        Raises NoResponseAvailable if there is neither.
        """
        with self._lock:
            if self._responses:
                return self._responses.popleft()
            if self._default is not None:
                return self._default
        raise NoResponseAvailable("No responses in queue and no default response")

    def clear(self) -> None:
        """Drop every queued response. The default is kept."""
        with self._lock:
            self._responses.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._responses)
