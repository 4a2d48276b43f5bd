"""
Client configuration and endpoint resolution.

`base_url` is the HTTP origin without the API prefix, e.g.
`https://pigeon.example.com`. `ws_url` may be a full websocket URL or an
origin without path; when unset it is derived from `base_url`.
"""

from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "http://localhost:8000"
API_PREFIX = "/api/v1"
WS_PATH = "/ws"


class ClientConfig(BaseModel):
    token: str = ""                    # bot token, without the `Bot ` prefix
    base_url: str = DEFAULT_BASE_URL
    ws_url: Optional[str] = None
    auto_reconnect: bool = True
    reconnect_interval_ms: int = Field(default=5000, ge=0)
    request_timeout: float = 30.0      # REST timeout, seconds


def resolve_base_url(config: ClientConfig) -> str:
    return (config.base_url or DEFAULT_BASE_URL).rstrip("/")


def resolve_api_url(config: ClientConfig, path: str) -> str:
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{resolve_base_url(config)}{API_PREFIX}{path}"


def resolve_ws_url(config: ClientConfig) -> str:
    if config.ws_url:
        if config.ws_url.startswith(("ws://", "wss://")):
            return config.ws_url
        return f"{config.ws_url.rstrip('/')}{WS_PATH}"

    parts = urlsplit(resolve_base_url(config))
    scheme = "wss" if parts.scheme == "https" else "ws"
    host = parts.netloc.rpartition("@")[2]
    return f"{scheme}://{host}{WS_PATH}"
