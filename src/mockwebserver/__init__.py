"""Scriptable HTTP test double for AnyIO and asyncio test suites."""

from .config import AddressFamily, ServerConfig
from .errors import EmptyLog, MockWebServerError, NoResponseAvailable
from .models import MockResponse, RecordedRequest
from .store import RequestLog, ResponseQueue
from .http import Certificate, Dispatcher, MockWebServer

__all__ = [
    # Server
    "MockWebServer",
    "ServerConfig",
    "AddressFamily",
    "Certificate",
    # Scripting
    "MockResponse",
    "Dispatcher",
    "ResponseQueue",
    # Inspection
    "RecordedRequest",
    "RequestLog",
    # Errors
    "MockWebServerError",
    "NoResponseAvailable",
    "EmptyLog",
]
