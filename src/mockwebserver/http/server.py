"""Scriptable HTTP/1.1 test double built on AnyIO.

Features:
- FIFO queue of scripted responses, with an optional default
- Optional dispatcher that computes responses per request, overriding the queue
- Log of received requests for later inspection
- Per-response delays and streamed bodies
- One request per connection (Connection: close), HTTPS when given a certificate
- Fully AnyIO: every connection is handled in its own task of a TaskGroup
"""

from __future__ import annotations

import logging
import threading
from contextlib import AsyncExitStack
from typing import Any, Mapping, Optional

import anyio
from anyio.abc import ByteStream, SocketAttribute, TaskGroup
from anyio.streams.tls import TLSListener

from ..config import ServerConfig
from ..models import Body, MockResponse, RecordedRequest
from ..store import RequestLog, ResponseQueue
from .dispatch import Dispatcher, Resolver
from .pipeline import Exchange, ResponsePipeline
from .wire import HEAD_END, StreamReader, parse_request_head, read_body

logger = logging.getLogger(__name__)


class MockWebServer:
    """
    A web server that can be scripted.

        async with MockWebServer() as server:
            server.enqueue(body="hello world")
            ...  # point the client under test at server.url
            request = server.take_request()

    Responses are served from a FIFO queue, falling back to
    `default_response` when it runs dry. Installing a `dispatcher` bypasses
    the queue entirely.

    Each accepted connection runs in its own task, so a delayed or streamed
    response never holds up another one. By default a failing exchange is
    answered with 500 and kept in `errors`; with `fail_fast=True` the error
    escapes the task group that runs the server.
    """

    def __init__(self, config: ServerConfig | None = None, **options: Any):
        if config is not None and options:
            raise TypeError("pass either a ServerConfig or keyword options, not both")
        self.config = config if config is not None else ServerConfig(**options)

        self._responses = ResponseQueue()
        self._requests = RequestLog()
        self._resolver = Resolver(self._responses)
        self._pipeline = ResponsePipeline()

        self._lock = threading.Lock()
        self._request_count = 0
        self._errors: list[Exception] = []

        # create_tcp_listener() returns a MultiListener, wrapped in a TLSListener for HTTPS.
        self._listener: Any = None
        self._port: Optional[int] = None
        self._task_group: Optional[TaskGroup] = None
        self._accept_scope: Optional[anyio.CancelScope] = None
        self._closed: Optional[anyio.Event] = None
        self._exit_stack: Optional[AsyncExitStack] = None

    # --- Lifecycle ---

    async def start(self, task_group: TaskGroup | None = None) -> None:
        """
        Bind the listener and start accepting connections.

        Connections are handled in `task_group` when given. Otherwise the
        server runs its own task group until shutdown().
        """
        if self._listener is not None:
            raise RuntimeError("MockWebServer already started")

        ssl_context = self.config.certificate.ssl_context() if self.config.certificate else None
        listener = await anyio.create_tcp_listener(
            local_host=self.config.host,
            local_port=self.config.port,
        )
        self._closed = anyio.Event()
        self._port = listener.extra(SocketAttribute.local_port)
        if ssl_context is not None:
            # Not standard-compatible: clients often drop the connection without close_notify.
            listener = TLSListener(listener, ssl_context, standard_compatible=False)
        self._listener = listener

        if task_group is None:
            self._exit_stack = AsyncExitStack()
            task_group = await self._exit_stack.enter_async_context(anyio.create_task_group())
        self._task_group = task_group
        self._accept_scope = anyio.CancelScope()
        task_group.start_soon(self._serve_loop)

        logger.info("mock server listening on %s", self.url)

    async def shutdown(self) -> None:
        """
        Stop accepting connections and release the listener.

        In-flight exchanges are left to finish. If the server owns its task
        group this waits for them.
        """
        await self._close()

    async def _close(self, exc_type=None, exc=None, tb=None) -> bool:
        if self._closed is None:
            return False
        if self._accept_scope is not None:
            self._accept_scope.cancel()

        if self._exit_stack is not None:
            stack, self._exit_stack = self._exit_stack, None
            suppressed = await stack.__aexit__(exc_type, exc, tb)
            logger.info("mock server on port %s stopped", self._port)
            return bool(suppressed)

        await self._closed.wait()
        logger.info("mock server on port %s stopped", self._port)
        return False

    async def __aenter__(self) -> "MockWebServer":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return await self._close(exc_type, exc, tb)

    # --- Scripting ---

    def enqueue(
        self,
        body: Body = "",
        status: int = 200,
        headers: Mapping[str, str] | None = None,
        delay: float | None = None,
    ) -> None:
        """Build a MockResponse and add it to the FIFO queue."""
        self._responses.enqueue(MockResponse(status=status, body=body, headers=headers, delay=delay))

    def enqueue_response(self, response: MockResponse) -> None:
        """Add `response` to the FIFO queue."""
        self._responses.enqueue(response)

    def clear_queue(self) -> None:
        """Drop every queued response that has not been served. The default is kept."""
        self._responses.clear()

    @property
    def dispatcher(self) -> Optional[Dispatcher]:
        return self._resolver.dispatcher

    @dispatcher.setter
    def dispatcher(self, dispatcher: Optional[Dispatcher]) -> None:
        self._resolver.dispatcher = dispatcher

    @property
    def default_response(self) -> Optional[MockResponse]:
        return self._responses.default_response

    @default_response.setter
    def default_response(self, response: Optional[MockResponse]) -> None:
        self._responses.default_response = response

    # --- Inspection ---

    def take_request(self) -> RecordedRequest:
        """Pop the oldest recorded request. Raises EmptyLog if there is none."""
        return self._requests.take()

    @property
    def request_count(self) -> int:
        with self._lock:
            return self._request_count

    @property
    def errors(self) -> list[Exception]:
        """Errors of exchanges that failed and were answered with 500."""
        with self._lock:
            return list(self._errors)

    @property
    def is_secure(self) -> bool:
        return self.config.is_secure

    @property
    def port(self) -> int:
        if self._port is None:
            raise RuntimeError("MockWebServer not started")
        return self._port

    @property
    def host(self) -> str:
        if self._port is None:
            raise RuntimeError("MockWebServer not started")
        return self.config.host

    @property
    def url(self) -> str:
        scheme = "https" if self.is_secure else "http"
        host = self.host
        if ":" in host:
            host = f"[{host}]"
        return f"{scheme}://{host}:{self.port}/"

    # --- Serving ---

    async def _serve_loop(self) -> None:
        assert self._listener is not None
        assert self._task_group is not None
        assert self._accept_scope is not None
        assert self._closed is not None

        try:
            with self._accept_scope:
                async with self._listener:
                    # Connection tasks go to the outer task group so that
                    # cancelling the accept scope leaves them running.
                    await self._listener.serve(self._handle_exchange, task_group=self._task_group)
        finally:
            self._closed.set()

    async def _handle_exchange(self, stream: ByteStream) -> None:
        exchange = Exchange(stream)
        async with stream:
            try:
                await self._serve_exchange(exchange)
            except Exception as e:
                if self.config.fail_fast:
                    raise
                await self._fail_exchange(exchange, e)

    async def _serve_exchange(self, exchange: Exchange) -> None:
        reader = StreamReader(exchange.stream)
        try:
            head = await reader.read_until(HEAD_END, self.config.max_header_bytes)
            if not head.strip():
                return
            if not head.endswith(HEAD_END):
                raise ValueError("incomplete request head")
            method, target, version, headers = parse_request_head(head)
        except ValueError as e:
            await self._reject(exchange, e)
            return

        sequence_number = self._count_request()
        logger.debug("accepted %s %s (#%d)", method, target, sequence_number)

        try:
            raw_body = await read_body(reader, headers)
        except ValueError as e:
            await self._reject(exchange, e)
            return

        request = RecordedRequest(
            method=method,
            uri=target,
            version=version,
            headers=headers,
            raw_body=raw_body,
            sequence_number=sequence_number,
        )
        exchange.request = request
        self._requests.append(request)
        logger.debug("recorded %s %s (%d body bytes)", method, target, len(raw_body))

        response = await self._resolver.resolve(request)
        await self._pipeline.apply(exchange, response)
        logger.debug("responded %d to %s %s", response.status, method, target)

    def _count_request(self) -> int:
        with self._lock:
            sequence_number = self._request_count
            self._request_count += 1
            return sequence_number

    async def _reject(self, exchange: Exchange, error: ValueError) -> None:
        logger.warning("bad request: %s", error)
        await self._pipeline.apply(exchange, MockResponse.text(f"bad request: {error}\n", status=400))

    async def _fail_exchange(self, exchange: Exchange, error: Exception) -> None:
        with self._lock:
            self._errors.append(error)

        request = exchange.request
        where = f"{request.method} {request.uri}" if request is not None else "connection"
        logger.error("exchange failed: %s", where, exc_info=error)

        if exchange.committed:
            return
        try:
            await self._pipeline.apply(exchange, MockResponse.text(f"mock server error: {error}\n", status=500))
        except (anyio.BrokenResourceError, anyio.ClosedResourceError) as e:
            logger.debug("could not send 500 for %s: %r", where, e)
