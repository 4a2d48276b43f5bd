"""
Realtime session engine.

Lifecycle: DISCONNECTED -> CONNECTING -> CONNECTED -> AUTHENTICATED -> DISCONNECTED.

A single supervisor task owns the websocket: it opens the connection, sends
the authenticate frame, reads frames until the socket closes and, when
auto-reconnect is on, waits the reconnect interval and starts over. Session
flags are only changed from that task (and by connect() entering CONNECTING).

Inbound frames are re-emitted on the EventEmitter:
- every envelope first as `raw`
- `authenticated` as `authenticated` followed by `ready`
- `error` as an `error` event carrying a ServerError
- `new_message` / `message_edited` with the wrapped message as first argument
- anything else under its own tag, including tags this client does not know
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from pydantic import ValidationError
from websockets.exceptions import ConnectionClosedError, WebSocketException

from pigeon_bot.config import ClientConfig, resolve_ws_url
from pigeon_bot.emitter import EventEmitter
from pigeon_bot.errors import AuthError, ConnectionError, DecodeError, PigeonError, ServerError
from pigeon_bot.models.envelope import (
    AuthenticatedData,
    Envelope,
    ErrorData,
    MessageEventData,
    OnlineListData,
    OnlineUser,
)
from pigeon_bot.models.events import MESSAGE_EVENTS, C2SEvent, ClientEvent, S2CEvent
from pigeon_bot.models.message import Message
from pigeon_bot.transport.envelope import build_envelope, parse_envelope
from pigeon_bot.transport.websocket import connect_websocket

logger = logging.getLogger(__name__)

AUTH_SCHEME = "Bot"
DEFAULT_REQUEST_TIMEOUT = 5.0

# Sent by the server for frames that overtake the authenticate frame
UNAUTHENTICATED_ERROR = "please authenticate first"

TransportFactory = Callable[[str], Awaitable[Any]]


class SessionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"


class SessionEngine:
    def __init__(
        self,
        config: ClientConfig,
        events: EventEmitter,
        wrap_message: Optional[Callable[[Message], Any]] = None,
        transport_factory: Optional[TransportFactory] = None,
    ):
        self._config = config
        self._events = events
        self._wrap_message = wrap_message or (lambda message: message)
        self._transport_factory = transport_factory or connect_websocket

        self._state = SessionState.DISCONNECTED
        self._ws: Any = None
        self._user_id: Optional[Union[int, str]] = None
        self._supervisor: Optional[asyncio.Task[None]] = None
        self._stopping = False
        self._wake = asyncio.Event()
        self._ready = asyncio.Event()
        self._closed = asyncio.Event()
        self._pending: dict[str, asyncio.Future[Any]] = {}

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def connected(self) -> bool:
        return self._state in (SessionState.CONNECTED, SessionState.AUTHENTICATED)

    @property
    def authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    @property
    def user_id(self) -> Optional[Union[int, str]]:
        """The bot's user id, as reported by the last `authenticated` frame."""
        return self._user_id

    # ========== LIFECYCLE ==========

    def connect(self) -> None:
        """Start connecting. Must be called with an event loop running.

        Raises ConnectionError if a connection is open or being opened.
        """
        if self._state is not SessionState.DISCONNECTED:
            raise ConnectionError("Client is already connected")
        self._stopping = False
        self._state = SessionState.CONNECTING
        if self._supervisor is not None and not self._supervisor.done():
            # Supervisor is between attempts; it picks up the CONNECTING state.
            self._wake.set()
            return
        self._supervisor = asyncio.get_running_loop().create_task(self._supervise())

    async def disconnect(self, code: int = 1000, reason: str = "") -> None:
        """Close the connection and wait for the disconnect transition.

        Auto-reconnect is suppressed until connect() is called again.
        """
        self._stopping = True
        self._wake.set()
        ws = self._ws
        if ws is None:
            return
        closed = self._closed
        try:
            await ws.close(code, reason)
        except (WebSocketException, OSError) as e:
            logger.warning("Failed to close websocket: %s", e)
            return
        if asyncio.current_task() is not self._supervisor:
            await closed.wait()

    async def wait_until_ready(self, timeout: Optional[float] = None) -> None:
        await asyncio.wait_for(self._ready.wait(), timeout=timeout)

    async def wait_closed(self) -> None:
        """Wait until the supervisor stops: disconnect() or a drop without auto-reconnect."""
        if self._supervisor is not None and asyncio.current_task() is not self._supervisor:
            await asyncio.shield(self._supervisor)

    async def _supervise(self) -> None:
        while True:
            await self._run_once()
            if self._state is SessionState.CONNECTING:
                # connect() was called from a disconnect handler
                continue
            if self._stopping or not self._config.auto_reconnect:
                break
            delay = self._config.reconnect_interval_ms / 1000
            logger.info("Reconnecting in %.1fs", delay)
            await self._reconnect_wait(delay)
            if self._stopping:
                self._state = SessionState.DISCONNECTED
                break

    async def _reconnect_wait(self, delay: float) -> None:
        """Sleep for `delay` seconds, or less if connect() or disconnect() wakes us."""
        self._wake.clear()
        try:
            await asyncio.wait_for(self._wake.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    async def _run_once(self) -> None:
        self._state = SessionState.CONNECTING
        self._closed = asyncio.Event()
        url = resolve_ws_url(self._config)
        try:
            try:
                ws = await self._transport_factory(url)
            except (PigeonError, OSError, WebSocketException) as e:
                self._emit_error(e if isinstance(e, PigeonError) else ConnectionError(str(e)))
                return
            if self._stopping:
                await ws.close()
                return
            self._ws = ws
            logger.info("Connected to %s", url)
            await self._on_open()
            await self._receive(ws)
        finally:
            self._on_close()

    async def _on_open(self) -> None:
        self._state = SessionState.CONNECTED
        try:
            await self.send_raw(C2SEvent.AUTHENTICATE, {"token": f"{AUTH_SCHEME} {self._config.token}"})
        except (PigeonError, WebSocketException, OSError) as e:
            self._emit_error(e)

    async def _receive(self, ws: Any) -> None:
        try:
            async for frame in ws:
                self._handle_frame(frame)
        except ConnectionClosedError as e:
            self._emit_error(ConnectionError(f"Connection closed abnormally: {e}"))

    def _on_close(self) -> None:
        self._ws = None
        self._state = SessionState.DISCONNECTED
        self._ready.clear()
        self._closed.set()
        logger.info("Disconnected")
        self._emit(ClientEvent.DISCONNECT)

    # ========== INBOUND ==========

    def _handle_frame(self, frame: Union[str, bytes]) -> None:
        try:
            envelope = parse_envelope(frame)
        except DecodeError as e:
            self._emit_error(e)
            return
        logger.debug("Received %s frame", envelope.type)
        try:
            self._dispatch(envelope)
        except ValidationError as e:
            self._emit_error(DecodeError(f"Malformed {envelope.type} payload: {e.errors()[0]['msg']}"))
        except Exception as e:
            self._emit_error(e)

    def _dispatch(self, envelope: Envelope) -> None:
        kind, data = envelope.type, envelope.data

        # Session bookkeeping happens before any user handler runs.
        if kind == S2CEvent.AUTHENTICATED:
            self._user_id = AuthenticatedData.model_validate(data or {}).user_id
            self._state = SessionState.AUTHENTICATED
            self._ready.set()
            logger.info("Authenticated as user %s", self._user_id)
        elif kind == S2CEvent.ONLINE_LIST:
            self._resolve_pending(kind, data)

        self._emit(ClientEvent.RAW, envelope.model_dump())

        if kind == S2CEvent.AUTHENTICATED:
            self._emit(ClientEvent.AUTHENTICATED, data)
            self._emit(ClientEvent.READY)
        elif kind == S2CEvent.ERROR:
            error = ErrorData.model_validate(data or {})
            if not self.authenticated and error.message.strip().lower() == UNAUTHENTICATED_ERROR:
                logger.debug("Ignoring pre-authentication error: %s", error.message)
                return
            self._emit_error(ServerError(error.message, details=data if isinstance(data, dict) else None))
        elif kind in MESSAGE_EVENTS:
            payload = MessageEventData.model_validate(data)
            self._emit(kind, self._wrap_message(payload.message), data)
        else:
            self._emit(kind, data)

    def _emit(self, event: str, *args: Any) -> None:
        """Emit to user handlers; a raising sync handler becomes an `error` event."""
        try:
            self._events.emit(event, *args)
        except Exception as e:
            self._emit_error(e)

    def _emit_error(self, error: BaseException) -> None:
        if not self._events.listener_count(ClientEvent.ERROR):
            logger.error("Unhandled client error: %s", error)
            return
        try:
            self._events.emit(ClientEvent.ERROR, error)
        except Exception:
            logger.exception("error handler raised")

    # ========== OUTBOUND ==========

    async def send_raw(self, event_type: str, data: Any) -> None:
        """Send one command frame.

        Raises ConnectionError when the websocket is not open, and AuthError
        before authentication for anything but the authenticate command.
        """
        ws = self._ws
        if ws is None or not self.connected:
            raise ConnectionError("Not connected to WebSocket")
        if not self.authenticated and event_type != C2SEvent.AUTHENTICATE:
            raise AuthError("Please authenticate first.")
        logger.debug("Sending %s frame", event_type)
        await ws.send(build_envelope(event_type, data))

    async def request(
        self,
        event_type: str,
        data: Any,
        reply: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> Any:
        """Send a command and wait for the next `reply` frame.

        The protocol carries no request ids, so there is at most one pending
        request per reply tag; concurrent callers share it.
        """
        pending = self._pending.get(reply)
        if pending is None:
            loop = asyncio.get_running_loop()
            pending = loop.create_future()
            self._pending[reply] = pending
            timer = loop.call_later(timeout, self._expire_pending, reply, pending)
            pending.add_done_callback(lambda _: timer.cancel())
            try:
                await self.send_raw(event_type, data)
            except Exception as e:
                if self._pending.get(reply) is pending:
                    del self._pending[reply]
                if not pending.done():
                    pending.set_exception(e)
        return await asyncio.shield(pending)

    def _resolve_pending(self, reply: str, data: Any) -> None:
        pending = self._pending.pop(reply, None)
        if pending is not None and not pending.done():
            pending.set_result(data)

    def _expire_pending(self, reply: str, pending: "asyncio.Future[Any]") -> None:
        if self._pending.get(reply) is pending:
            del self._pending[reply]
        if not pending.done():
            pending.set_exception(TimeoutError(f"Timed out waiting for {reply}"))
            # Mark retrieved so a caller that gave up does not leave a warning behind
            pending.exception()

    async def get_online_list(self, timeout: float = DEFAULT_REQUEST_TIMEOUT) -> list[OnlineUser]:
        data = await self.request(C2SEvent.GET_ONLINE_LIST, {}, S2CEvent.ONLINE_LIST, timeout)
        return OnlineListData.model_validate(data or {}).users or []
