"""HTTP/1.1 framing on top of an AnyIO byte stream.

Covers what a test double needs and nothing more:
- request line + headers parsing
- request bodies framed by Content-Length or chunked transfer coding
- status line / header serialization and chunked response framing
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Iterable

import anyio
from anyio.abc import ByteStream

from ..models import HeaderMap

CRLF = b"\r\n"
HEAD_END = b"\r\n\r\n"
LAST_CHUNK = b"0\r\n\r\n"

_RECEIVE_SIZE = 4096
_MAX_CHUNK_LINE = 4096


class StreamReader:
    """Buffered reads over a byte stream.

    Bytes received past a delimiter stay buffered for the next read, so the
    start of a request body that arrives with the head is not lost.
    """

    def __init__(self, stream: ByteStream):
        self._stream = stream
        self._buf = bytearray()

    async def _fill(self) -> bool:
        try:
            chunk = await self._stream.receive(_RECEIVE_SIZE)
        except anyio.EndOfStream:
            return False
        if not chunk:
            return False
        self._buf.extend(chunk)
        return True

    async def read_until(self, marker: bytes, max_bytes: int) -> bytes:
        """Read through `marker`. Returns whatever was buffered if the peer closes first."""
        while True:
            idx = self._buf.find(marker)
            if idx != -1:
                end = idx + len(marker)
                data = bytes(self._buf[:end])
                del self._buf[:end]
                return data
            if len(self._buf) > max_bytes:
                raise ValueError("request head too large")
            if not await self._fill():
                data = bytes(self._buf)
                self._buf.clear()
                return data

    async def read_exact(self, n: int) -> bytes:
        while len(self._buf) < n:
            if not await self._fill():
                raise ValueError(f"connection closed after {len(self._buf)} of {n} body bytes")
        data = bytes(self._buf[:n])
        del self._buf[:n]
        return data


def parse_request_head(block: bytes) -> tuple[str, str, str, HeaderMap]:
    # block contains request line + headers ending with \r\n\r\n
    head = block.decode("iso-8859-1")

    lines = head.split("\r\n")
    if not lines or not lines[0]:
        raise ValueError("missing request line")

    parts = lines[0].split(" ")
    if len(parts) != 3:
        raise ValueError("invalid request line")
    method, target, version = parts
    if not version.startswith("HTTP/"):
        raise ValueError("invalid http version")

    headers: HeaderMap = {}
    for line in lines[1:]:
        if line == "":
            break
        if ":" not in line:
            continue
        k, v = line.split(":", 1)
        name = k.strip().lower()
        value = v.strip()
        if name in headers:
            headers[name] = f"{headers[name]}, {value}"
        else:
            headers[name] = value
    return method, target, version, headers


async def read_body(reader: StreamReader, headers: HeaderMap) -> bytes:
    """Read a request body framed by the given headers."""
    transfer_encoding = headers.get("transfer-encoding", "")
    if "chunked" in transfer_encoding.lower():
        return await _read_chunked(reader)

    raw_length = headers.get("content-length", "0") or "0"
    try:
        content_length = int(raw_length)
    except ValueError:
        raise ValueError(f"invalid content-length: {raw_length!r}") from None
    if content_length < 0:
        raise ValueError(f"invalid content-length: {raw_length!r}")
    if content_length == 0:
        return b""
    return await reader.read_exact(content_length)


async def _read_chunked(reader: StreamReader) -> bytes:
    body = bytearray()
    while True:
        line = await reader.read_until(CRLF, _MAX_CHUNK_LINE)
        if not line.endswith(CRLF):
            raise ValueError("truncated chunk size line")
        size_field = line[:-2].split(b";", 1)[0].strip()
        try:
            size = int(size_field, 16)
        except ValueError:
            raise ValueError(f"invalid chunk size: {size_field!r}") from None
        if size == 0:
            break
        body.extend(await reader.read_exact(size))
        if await reader.read_exact(2) != CRLF:
            raise ValueError("missing chunk terminator")

    # Trailer section, discarded.
    while True:
        line = await reader.read_until(CRLF, _MAX_CHUNK_LINE)
        if line in (CRLF, b""):
            return bytes(body)


def status_line(status: int) -> str:
    try:
        reason = HTTPStatus(status).phrase
    except ValueError:
        reason = ""
    return f"HTTP/1.1 {status} {reason}\r\n"


def encode_head(status: int, headers: Iterable[tuple[str, str]]) -> bytes:
    start = status_line(status)
    lines = "".join(f"{k}: {v}\r\n" for k, v in headers)
    return (start + lines + "\r\n").encode("iso-8859-1")


def encode_chunk(data: bytes) -> bytes:
    return b"%x\r\n" % len(data) + data + CRLF
