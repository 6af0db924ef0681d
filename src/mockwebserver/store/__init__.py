"""Shared, lock-guarded state of a server instance."""

from .requests import RequestLog
from .responses import ResponseQueue

__all__ = [
    "RequestLog",
    "ResponseQueue",
]
