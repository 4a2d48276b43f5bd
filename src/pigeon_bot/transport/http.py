"""
REST HTTP client for the Pigeon API.

Every response except 204 carries an envelope: { "data": ..., "error": {"code", "message"} }.
"""

import logging
import mimetypes
from pathlib import Path
from typing import IO, Any, Optional, Union

import httpx

from pigeon_bot.config import ClientConfig, resolve_api_url
from pigeon_bot.errors import ApiError

logger = logging.getLogger(__name__)

FileInput = Union[str, Path, bytes, IO[bytes]]


class HttpClient:
    def __init__(self, config: ClientConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._config = config
        self._client = httpx.AsyncClient(
            headers={
                "User-Agent": "pigeon-bot/0.1.0",
                "Accept": "application/json",
                "Authorization": f"Bot {config.token}",
            },
            timeout=config.request_timeout,
            transport=transport,
        )

    def url(self, path: str) -> str:
        return resolve_api_url(self._config, path)

    @staticmethod
    def _unwrap(resp: httpx.Response, default: Any = None) -> Any:
        """Unwrap the standard Pigeon API response, raising ApiError on failure."""
        if resp.status_code == 204:
            return None
        try:
            body = resp.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            if resp.is_error:
                raise ApiError(f"HTTP {resp.status_code}: {resp.reason_phrase}", status=resp.status_code)
            raise ApiError(f"Unexpected response body (HTTP {resp.status_code})", status=resp.status_code)

        error = body.get("error")
        if error is not None:
            if isinstance(error, dict):
                raise ApiError(
                    error.get("message") or "Request failed",
                    status=resp.status_code,
                    details={"code": error.get("code")},
                )
            raise ApiError(str(error) or "Request failed", status=resp.status_code)
        if resp.is_error:
            raise ApiError(f"HTTP {resp.status_code}: {resp.reason_phrase}", status=resp.status_code)

        data = body.get("data")
        return default if data is None else data

    async def get(self, path: str, params: Optional[dict[str, Any]] = None, default: Any = None) -> Any:
        resp = await self._client.get(self.url(path), params=params)
        logger.debug("GET %s -> %s", path, resp.status_code)
        return self._unwrap(resp, default)

    async def delete(self, path: str) -> Any:
        resp = await self._client.delete(self.url(path))
        logger.debug("DELETE %s -> %s", path, resp.status_code)
        return self._unwrap(resp)

    async def upload(
        self,
        path: str,
        file: FileInput,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        field: str = "file",
    ) -> Any:
        """Multipart form upload. Same response contract as the JSON endpoints."""
        if isinstance(file, (str, Path)):
            file_path = Path(file)
            content: Union[bytes, IO[bytes]] = file_path.read_bytes()
            filename = filename or file_path.name
        else:
            content = file
        filename = filename or getattr(file, "name", None) or "upload"
        filename = Path(str(filename)).name
        content_type = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"

        resp = await self._client.post(self.url(path), files={field: (filename, content, content_type)})
        logger.debug("POST %s (upload %s) -> %s", path, filename, resp.status_code)
        return self._unwrap(resp)

    async def close(self) -> None:
        await self._client.aclose()
