"""
Websocket transport — opens the realtime connection for the session engine.
"""

import asyncio
import logging

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import InvalidHandshake, InvalidURI, WebSocketException

from pigeon_bot.errors import ConnectionError

logger = logging.getLogger(__name__)

DEFAULT_OPEN_TIMEOUT = 15.0
DEFAULT_PING_INTERVAL = 20.0


async def connect_websocket(
    url: str,
    *,
    open_timeout: float = DEFAULT_OPEN_TIMEOUT,
    ping_interval: float = DEFAULT_PING_INTERVAL,
) -> ClientConnection:
    """Open a websocket to `url`, mapping library failures to ConnectionError."""
    logger.debug("Opening websocket to %s", url)
    try:
        return await connect(
            url,
            open_timeout=open_timeout,
            ping_interval=ping_interval,
            max_size=None,
        )
    except (InvalidHandshake, InvalidURI) as e:
        raise ConnectionError(f"WebSocket handshake failed: {e}") from e
    except (OSError, asyncio.TimeoutError, WebSocketException) as e:
        raise ConnectionError(f"WebSocket connection failed: {e}") from e
