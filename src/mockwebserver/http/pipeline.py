"""Writes a scripted response back to the client."""

from __future__ import annotations

import logging
from contextlib import aclosing
from dataclasses import dataclass

import anyio
from anyio.abc import ByteStream

from ..models import MockResponse, RecordedRequest
from .wire import LAST_CHUNK, encode_chunk, encode_head

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Exchange:
    """One connection and its single request/response cycle.

    `committed` flips as soon as the first response byte is handed to the
    transport; after that no other response can be sent on this exchange.
    """

    stream: ByteStream
    request: RecordedRequest | None = None
    committed: bool = False

    @property
    def head_only(self) -> bool:
        return self.request is not None and self.request.method.upper() == "HEAD"

    async def send(self, data: bytes) -> None:
        self.committed = True
        await self.stream.send(data)


def _response_headers(response: MockResponse) -> list[tuple[str, str]]:
    headers = list((response.headers or {}).items())
    present = {k.lower(): v for k, v in headers}

    if not response.is_streamed:
        if "content-length" not in present:
            headers.append(("content-length", str(len(response.static_body()))))
    elif "content-length" not in present and "transfer-encoding" not in present:
        headers.append(("transfer-encoding", "chunked"))

    if "connection" not in present:
        headers.append(("connection", "close"))
    return headers


def _is_chunked(headers: list[tuple[str, str]]) -> bool:
    return any(k.lower() == "transfer-encoding" and "chunked" in v.lower() for k, v in headers)


class ResponsePipeline:
    """Delay, then status line and headers, then body.

    Transport errors are not retried; they propagate to the caller.
    """

    async def apply(self, exchange: Exchange, response: MockResponse) -> None:
        if response.delay:
            await anyio.sleep(response.delay)

        headers = _response_headers(response)
        await exchange.send(encode_head(response.status, headers))

        if exchange.head_only:
            return

        if not response.is_streamed:
            body = response.static_body()
            if body:
                await exchange.send(body)
            return

        chunked = _is_chunked(headers)
        sent = 0
        async with aclosing(response.iter_chunks()) as chunks:
            async for chunk in chunks:
                if not chunk:
                    continue
                await exchange.send(encode_chunk(chunk) if chunked else chunk)
                sent += len(chunk)
        if chunked:
            await exchange.send(LAST_CHUNK)
        logger.debug("streamed %d body bytes", sent)
