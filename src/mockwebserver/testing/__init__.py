"""Testing utilities."""

from .helpers import wait_for, with_timeout

__all__ = [
    "wait_for",
    "with_timeout",
]
