"""Shared fixtures: an in-memory websocket and a client wired to it."""

import asyncio
import json
from typing import Any, Optional, Union

import pytest
import pytest_asyncio
from websockets.exceptions import ConnectionClosedError
from websockets.frames import Close

from pigeon_bot import AsyncPigeonClient

_CLOSE = object()
_ABNORMAL = object()


class FakeWebSocket:
    """Stands in for a websockets ClientConnection.

    Frames pushed with feed() are yielded by `async for`. drop() or close()
    ends the iteration the way a cleanly closed socket does; drop(abnormal=True)
    raises ConnectionClosedError like a connection lost without a close frame.
    """

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        self.close_args: Optional[tuple[int, str]] = None
        self.send_error: Optional[Exception] = None
        self.close_error: Optional[Exception] = None
        self._inbox: asyncio.Queue[Any] = asyncio.Queue()

    async def send(self, message: str) -> None:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append(json.loads(message))

    def feed(self, frame: Union[str, bytes, dict[str, Any]]) -> None:
        if isinstance(frame, dict):
            frame = json.dumps(frame)
        self._inbox.put_nowait(frame)

    def drop(self, abnormal: bool = False) -> None:
        self._inbox.put_nowait(_ABNORMAL if abnormal else _CLOSE)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if self.close_error is not None:
            raise self.close_error
        self.closed = True
        self.close_args = (code, reason)
        self._inbox.put_nowait(_CLOSE)

    def __aiter__(self) -> "FakeWebSocket":
        return self

    async def __anext__(self) -> Union[str, bytes]:
        frame = await self._inbox.get()
        if frame is _CLOSE:
            raise StopAsyncIteration
        if frame is _ABNORMAL:
            raise ConnectionClosedError(Close(1006, ""), None)
        return frame

    def types_sent(self) -> list[str]:
        return [frame["type"] for frame in self.sent]


class FakeTransport:
    """transport_factory that hands out FakeWebSockets and records URLs."""

    def __init__(self) -> None:
        self.urls: list[str] = []
        self.sockets: list[FakeWebSocket] = []
        self.error: Optional[Exception] = None
        self.send_error: Optional[Exception] = None

    async def __call__(self, url: str) -> FakeWebSocket:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        ws = FakeWebSocket()
        ws.send_error = self.send_error
        self.sockets.append(ws)
        return ws

    @property
    def ws(self) -> FakeWebSocket:
        return self.sockets[-1]


async def settle(delay: float = 0.01) -> None:
    """Let the supervisor task process whatever is queued."""
    await asyncio.sleep(delay)


class ManualClock:
    """Replaces a session's reconnect sleep with one the test releases.

    Records each requested delay; the wait ends on advance(), or early when
    connect() or disconnect() wakes the supervisor, as the real one does.
    """

    def __init__(self, client: AsyncPigeonClient) -> None:
        self.delays: list[float] = []
        self._session = client._session
        self._tick = asyncio.Event()
        self._session._reconnect_wait = self.wait

    async def wait(self, delay: float) -> None:
        self.delays.append(delay)
        self._tick.clear()
        self._session._wake.clear()
        waiters = [
            asyncio.ensure_future(self._tick.wait()),
            asyncio.ensure_future(self._session._wake.wait()),
        ]
        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()

    def advance(self) -> None:
        self._tick.set()


class Recorder:
    """Collects (event, args) pairs in arrival order."""

    def __init__(self, client: AsyncPigeonClient, *events: str) -> None:
        self.calls: list[tuple[Any, ...]] = []
        for event in events:
            client.on(event, self._make(event))

    def _make(self, event: str):
        def handler(*args: Any) -> None:
            self.calls.append((event, *args))
        return handler

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]

    def of(self, event: str) -> list[tuple[Any, ...]]:
        return [call[1:] for call in self.calls if call[0] == event]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest_asyncio.fixture
async def client(transport: FakeTransport):
    c = AsyncPigeonClient(
        "secret-token",
        auto_reconnect=False,
        transport_factory=transport,
    )
    yield c
    await c.close()


@pytest_asyncio.fixture
async def ready_client(client: AsyncPigeonClient, transport: FakeTransport):
    """A client past the authenticate handshake."""
    client.connect()
    await settle()
    transport.ws.feed({"type": "authenticated", "data": {"user_id": 7}})
    await settle()
    assert client.authenticated
    return client
