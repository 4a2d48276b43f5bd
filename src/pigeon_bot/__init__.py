"""
pigeon-bot — bot SDK for the Pigeon chat server.

Websocket + REST client: authenticate as a bot, react to realtime events,
send commands and look up users, chats and message history.
"""

from pigeon_bot.client import PigeonClient, AsyncPigeonClient
from pigeon_bot.config import ClientConfig
from pigeon_bot.entities import ChatEntity, MessageEntity, UserEntity
from pigeon_bot.errors import (
    PigeonError,
    ConfigError,
    ConnectionError,
    AuthError,
    DecodeError,
    ServerError,
    ApiError,
)
from pigeon_bot.models.events import C2SEvent, S2CEvent, ClientEvent
from pigeon_bot.session import SessionState

__version__ = "0.1.0"
__all__ = [
    "PigeonClient",
    "AsyncPigeonClient",
    "ClientConfig",
    "ChatEntity",
    "MessageEntity",
    "UserEntity",
    "PigeonError",
    "ConfigError",
    "ConnectionError",
    "AuthError",
    "DecodeError",
    "ServerError",
    "ApiError",
    "C2SEvent",
    "S2CEvent",
    "ClientEvent",
    "SessionState",
]
