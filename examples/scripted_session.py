"""
Scripted session example

Runs a MockWebServer, scripts a few responses, fires requests at it and
prints what the server recorded.

- Queued responses are served in order.
- A dispatcher takes over for the second half and routes by path.
- Delayed responses run concurrently and finish in delay order.

Run:
  python examples/scripted_session.py
"""

from __future__ import annotations

import logging

import anyio
import httpx

from mockwebserver import MockResponse, MockWebServer, RecordedRequest


async def route(request: RecordedRequest) -> MockResponse:
    if request.path == "/health":
        return MockResponse.json({"ok": True})
    if request.path == "/slow":
        # Both the dispatcher's own wait and the response delay apply.
        await anyio.sleep(0.1)
        return MockResponse.text("finally\n", delay=0.1)
    return MockResponse.text("not found\n", status=404)


async def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")

    async with MockWebServer() as server, httpx.AsyncClient() as client:
        print(f"Listening on {server.url}")

        server.enqueue(body="hello\n")
        server.enqueue(body="slow\n", delay=0.3)
        server.enqueue(body="fast\n", delay=0.1)

        print((await client.get(server.url + "greeting")).text, end="")

        async def fetch(path: str) -> None:
            response = await client.get(server.url + path)
            print(f"{path}: {response.text}", end="")

        async with anyio.create_task_group() as tg:
            tg.start_soon(fetch, "first")
            await anyio.sleep(0.01)
            tg.start_soon(fetch, "second")

        server.dispatcher = route
        for path in ("health", "slow", "missing"):
            response = await client.get(server.url + path)
            print(f"{path}: {response.status_code} {response.text.strip()}")

        print(f"{server.request_count} requests:")
        for _ in range(server.request_count):
            request = server.take_request()
            print(f"  #{request.sequence_number} {request.method} {request.uri}")


if __name__ == "__main__":
    anyio.run(main)
