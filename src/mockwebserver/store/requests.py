"""Log of received requests."""

from collections import deque
import threading

from ..errors import EmptyLog
from ..models import RecordedRequest


class RequestLog:
    """
    Thread-safe FIFO of recorded requests.

    The server appends, test code takes. take() never waits for
    a request to arrive.
    """

    def __init__(self):
        self._requests: deque[RecordedRequest] = deque()
        self._lock = threading.Lock()

    def append(self, request: RecordedRequest) -> None:
        with self._lock:
            self._requests.append(request)

    def take(self) -> RecordedRequest:
        """
        Remove and return the oldest recorded request.

        Raises EmptyLog if nothing has been recorded.
        """
        with self._lock:
            if not self._requests:
                raise EmptyLog("No requests on record")
            return self._requests.popleft()

    def __len__(self) -> int:
        with self._lock:
            return len(self._requests)
