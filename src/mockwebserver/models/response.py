"""Scripted responses."""

from __future__ import annotations

import collections.abc
import json as _json
import os
from dataclasses import dataclass
from typing import Any, AsyncIterable, AsyncIterator, Iterable, Mapping, Union

import anyio

ChunkSource = Union[Iterable[bytes], AsyncIterable[bytes]]
Body = Union[bytes, str, ChunkSource]

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True, slots=True)
class MockResponse:
    """One response the server will send back.

    `body` is either static (`bytes` or `str`, sent whole) or a chunk source
    (an iterable or async iterable of `bytes`, streamed as it is consumed).
    One-shot iterators (generators, `iter(...)`) are exhausted after one
    serve; use a list or `MockResponse.file()` for a response served repeatedly.

    `delay` is in seconds and is waited out before anything is written.
    """

    status: int
    body: Body = b""
    headers: Mapping[str, str] | None = None
    delay: float | None = None

    @property
    def is_streamed(self) -> bool:
        return not isinstance(self.body, (bytes, bytearray, memoryview, str))

    @property
    def is_reusable(self) -> bool:
        """False when the body is a one-shot iterator that a second serve would find exhausted."""
        return not isinstance(self.body, (collections.abc.Iterator, collections.abc.AsyncIterator))

    def static_body(self) -> bytes:
        """Return the body as bytes. Only valid for static bodies."""
        if self.is_streamed:
            raise TypeError("streamed body has no static representation")
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return bytes(self.body)

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        """Yield the body chunk by chunk, whatever its representation.

        The underlying iterator is closed when this generator is closed, even
        if it was abandoned halfway.
        """
        body = self.body
        if not self.is_streamed:
            yield self.static_body()
        elif isinstance(body, collections.abc.AsyncIterable):
            iterator = aiter(body)
            try:
                async for chunk in iterator:
                    yield chunk
            finally:
                aclose = getattr(iterator, "aclose", None)
                if aclose is not None:
                    await aclose()
        else:
            iterator = iter(body)
            try:
                for chunk in iterator:
                    yield chunk
            finally:
                close = getattr(iterator, "close", None)
                if close is not None:
                    close()

    @staticmethod
    def text(
        text: str,
        *,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
        delay: float | None = None,
        encoding: str = "utf-8",
    ) -> "MockResponse":
        merged: dict[str, str] = {"content-type": f"text/plain; charset={encoding}"}
        if headers:
            merged.update(headers)
        return MockResponse(status=status, body=text.encode(encoding), headers=merged, delay=delay)

    @staticmethod
    def json(
        obj: Any,
        *,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
        delay: float | None = None,
    ) -> "MockResponse":
        body = _json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        merged: dict[str, str] = {"content-type": "application/json; charset=utf-8"}
        if headers:
            merged.update(headers)
        return MockResponse(status=status, body=body, headers=merged, delay=delay)

    @staticmethod
    def file(
        path: str | os.PathLike[str],
        *,
        status: int = 200,
        headers: Mapping[str, str] | None = None,
        delay: float | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> "MockResponse":
        """Stream the contents of `path`.

        The file is reopened every time the response is served, so the result
        can be used as a default response.
        """
        return MockResponse(status=status, body=FileChunks(path, chunk_size), headers=headers, delay=delay)


class FileChunks:
    """Re-iterable chunk source reading a file from the start on each iteration."""

    def __init__(self, path: str | os.PathLike[str], chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.path = path
        self.chunk_size = chunk_size

    async def __aiter__(self) -> AsyncIterator[bytes]:
        async with await anyio.open_file(self.path, "rb") as f:
            while True:
                data = await f.read(self.chunk_size)
                if not data:
                    return
                yield data
