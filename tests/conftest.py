"""Shared fixtures."""

from __future__ import annotations

import socket

import anyio
import httpx
import pytest

from mockwebserver import MockWebServer


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def server():
    async with MockWebServer() as server:
        yield server


@pytest.fixture
async def client():
    async with httpx.AsyncClient(timeout=5.0) as client:
        yield client


def free_port(host: str = "127.0.0.1") -> int:
    """Ask the OS for a port that is free right now."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    with socket.socket(family, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


def ipv6_available() -> bool:
    if not socket.has_ipv6:
        return False
    try:
        with socket.socket(socket.AF_INET6, socket.SOCK_STREAM) as sock:
            sock.bind(("::1", 0))
    except OSError:
        return False
    return True


async def read_all(stream) -> bytes:
    """Read a raw byte stream until the peer closes it."""
    buf = bytearray()
    while True:
        try:
            buf.extend(await stream.receive())
        except (anyio.EndOfStream, anyio.BrokenResourceError):
            return bytes(buf)
