"""Exceptions raised by the mock server."""


class MockWebServerError(Exception):
    """Base class for scripting mistakes made by the test author."""
    pass


class NoResponseAvailable(MockWebServerError):
    """Raised when a request arrives with no dispatcher, no queued response and no default."""
    pass


class EmptyLog(MockWebServerError):
    """Raised by take_request() when no request has been recorded."""
    pass
