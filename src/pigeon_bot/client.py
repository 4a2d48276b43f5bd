"""
AsyncPigeonClient / PigeonClient — main bot clients.
"""

import asyncio
from typing import Any, Optional

import httpx

from pigeon_bot.chats import ChatsAPI
from pigeon_bot.config import DEFAULT_BASE_URL, ClientConfig
from pigeon_bot.emitter import EventEmitter, Handler
from pigeon_bot.entities import ChatEntity, MessageEntity, UserEntity
from pigeon_bot.errors import ConfigError
from pigeon_bot.models.chat import Chat, ChatMember, ChatPreview
from pigeon_bot.models.envelope import OnlineUser
from pigeon_bot.models.events import C2SEvent
from pigeon_bot.models.message import Message, MessageAttachment
from pigeon_bot.models.user import User
from pigeon_bot.session import DEFAULT_REQUEST_TIMEOUT, SessionEngine, SessionState, TransportFactory
from pigeon_bot.transport.http import FileInput, HttpClient
from pigeon_bot.users import UsersAPI


class AsyncPigeonClient:
    """Async Pigeon bot client (primary).

    Register handlers with `on()`, then `await client.start()` (or call
    `connect()` from inside a running loop). Commands are only accepted once
    the `ready` event has fired.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        ws_url: Optional[str] = None,
        auto_reconnect: bool = True,
        reconnect_interval_ms: int = 5000,
        ready_timeout: float = 15.0,
        config: Optional[ClientConfig] = None,
        transport_factory: Optional[TransportFactory] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if config is None:
            config = ClientConfig(
                token=token or "",
                base_url=base_url,
                ws_url=ws_url,
                auto_reconnect=auto_reconnect,
                reconnect_interval_ms=reconnect_interval_ms,
            )
        if not config.token:
            raise ConfigError("Bot token is required")
        self._config = config
        self._ready_timeout = ready_timeout

        self.events = EventEmitter()
        self.http = HttpClient(config, transport=http_transport)
        self.users = UsersAPI(self.http)
        self.chats = ChatsAPI(self.http)
        self._session = SessionEngine(
            config,
            self.events,
            wrap_message=lambda message: MessageEntity(self, message),
            transport_factory=transport_factory,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def connected(self) -> bool:
        return self._session.connected

    @property
    def authenticated(self) -> bool:
        return self._session.authenticated

    @property
    def user_id(self) -> Any:
        return self._session.user_id

    # ========== EVENTS ==========

    def on(self, event: str, handler: Optional[Handler] = None) -> Any:
        """Subscribe to an event; usable as `@client.on("new_message")`."""
        return self.events.on(event, handler)

    def once(self, event: str, handler: Optional[Handler] = None) -> Any:
        return self.events.once(event, handler)

    def off(self, event: str, handler: Optional[Handler] = None) -> None:
        self.events.off(event, handler)

    # ========== CONNECTION ==========

    def connect(self) -> None:
        """Open the websocket in the background. Progress is reported via events."""
        self._session.connect()

    async def start(self) -> None:
        """Connect and wait for the `ready` event."""
        self._session.connect()
        try:
            await self._session.wait_until_ready(self._ready_timeout)
        except asyncio.TimeoutError:
            await self._session.disconnect()
            raise TimeoutError(f"Timed out waiting for 'ready' event after {self._ready_timeout}s")

    async def disconnect(self, code: int = 1000, reason: str = "") -> None:
        await self._session.disconnect(code, reason)

    async def run_forever(self) -> None:
        """Connect (unless already connecting) and block until the client stops."""
        if self._session.state is SessionState.DISCONNECTED:
            self._session.connect()
        await self._session.wait_closed()

    async def close(self) -> None:
        """Disconnect and release the HTTP client."""
        await self._session.disconnect()
        await self._session.wait_closed()
        await self.events.drain()
        await self.http.close()

    # ========== HTTP ==========

    async def get_user(self, user_id: int) -> User:
        return await self.users.get(user_id)

    async def get_me(self) -> User:
        return await self.users.me()

    async def get_chat(self, chat_id: int) -> Chat:
        return await self.chats.get(chat_id)

    async def get_my_chats(self) -> list[ChatPreview]:
        return await self.chats.list()

    async def get_chat_members(self, chat_id: int) -> list[ChatMember]:
        return await self.chats.members(chat_id)

    async def get_messages(
        self,
        chat_id: int,
        limit: Optional[int] = None,
        before_id: Optional[int] = None,
        after_id: Optional[int] = None,
    ) -> list[Message]:
        return await self.chats.messages(chat_id, limit=limit, before_id=before_id, after_id=after_id)

    async def remove_member(self, chat_id: int, user_id: int) -> None:
        await self.chats.remove_member(chat_id, user_id)

    async def upload_attachment(
        self,
        chat_id: int,
        file: FileInput,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> MessageAttachment:
        return await self.chats.upload_attachment(chat_id, file, filename=filename, content_type=content_type)

    # ========== WS COMMANDS ==========

    async def send_raw(self, event_type: str, data: Any) -> None:
        """Send an arbitrary command frame (subject to the same gating)."""
        await self._session.send_raw(event_type, data)

    async def send_message(
        self,
        chat_id: int,
        content: str,
        reply_to: Optional[int] = None,
        attachment_ids: Optional[list[int]] = None,
    ) -> None:
        await self._session.send_raw(C2SEvent.SEND_MESSAGE, {
            "chat_id": chat_id,
            "content": content,
            "reply_to": reply_to,
            "attachment_ids": attachment_ids,
        })

    async def edit_message(self, message_id: int, content: str) -> None:
        await self._session.send_raw(C2SEvent.EDIT_MESSAGE, {"message_id": message_id, "content": content})

    async def delete_message(self, message_id: int) -> None:
        await self._session.send_raw(C2SEvent.DELETE_MESSAGE, {"message_id": message_id})

    async def add_reaction(self, message_id: int, emoji: str) -> None:
        await self._session.send_raw(C2SEvent.ADD_REACTION, {"message_id": message_id, "emoji": emoji})

    async def remove_reaction(self, message_id: int, emoji: str) -> None:
        await self._session.send_raw(C2SEvent.REMOVE_REACTION, {"message_id": message_id, "emoji": emoji})

    async def set_typing(self, chat_id: int, is_typing: bool = True) -> None:
        await self._session.send_raw(C2SEvent.TYPING, {"chat_id": chat_id, "is_typing": is_typing})

    async def get_online_list(self, timeout: float = DEFAULT_REQUEST_TIMEOUT) -> list[OnlineUser]:
        """Ask the server who is online and wait for the `online_list` reply."""
        return await self._session.get_online_list(timeout)

    # ========== WRAPPERS ==========

    def wrap_chat(self, chat: Any) -> ChatEntity:
        return ChatEntity(self, chat)

    def wrap_user(self, user: User) -> UserEntity:
        return UserEntity(self, user)


class PigeonClient:
    """Sync wrapper around AsyncPigeonClient. Runs the event loop internally.

    Handlers registered with `on()` run inside that loop; commands must be
    issued from handlers through `client.aio`.
    """

    def __init__(self, token: Optional[str] = None, **kwargs: Any):
        self._loop = asyncio.new_event_loop()
        self._async = AsyncPigeonClient(token, **kwargs)

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def aio(self) -> AsyncPigeonClient:
        return self._async

    @property
    def connected(self) -> bool:
        return self._async.connected

    def on(self, event: str, handler: Optional[Handler] = None) -> Any:
        return self._async.on(event, handler)

    def off(self, event: str, handler: Optional[Handler] = None) -> None:
        self._async.off(event, handler)

    def run(self) -> None:
        """Connect and process events until disconnect() is called from a handler."""
        self._run(self._async.run_forever())

    def get_user(self, user_id: int) -> User:
        return self._run(self._async.get_user(user_id))

    def get_me(self) -> User:
        return self._run(self._async.get_me())

    def get_chat(self, chat_id: int) -> Chat:
        return self._run(self._async.get_chat(chat_id))

    def get_my_chats(self) -> list[ChatPreview]:
        return self._run(self._async.get_my_chats())

    def get_chat_members(self, chat_id: int) -> list[ChatMember]:
        return self._run(self._async.get_chat_members(chat_id))

    def get_messages(self, chat_id: int, **kwargs: Any) -> list[Message]:
        return self._run(self._async.get_messages(chat_id, **kwargs))

    def remove_member(self, chat_id: int, user_id: int) -> None:
        self._run(self._async.remove_member(chat_id, user_id))

    def upload_attachment(self, chat_id: int, file: FileInput, **kwargs: Any) -> MessageAttachment:
        return self._run(self._async.upload_attachment(chat_id, file, **kwargs))

    def close(self) -> None:
        self._run(self._async.close())
        self._loop.close()
