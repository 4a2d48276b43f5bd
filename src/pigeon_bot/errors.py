"""
Pigeon bot error types.

Gating errors (ConnectionError, AuthError) are raised at the call site.
Transport, decode and server errors are delivered through the `error` event.
"""

from typing import Any, Optional


class PigeonError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class ConfigError(PigeonError):
    def __init__(self, message: str):
        super().__init__("config_error", message)


class ConnectionError(PigeonError):
    def __init__(self, message: str):
        super().__init__("connection_error", message)


class AuthError(PigeonError):
    def __init__(self, message: str, code: str = "auth_error"):
        super().__init__(code, message)


class DecodeError(PigeonError):
    """An inbound frame or payload could not be decoded."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("decode_error", message, details)


class ServerError(PigeonError):
    """The server sent an `error` envelope."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("server_error", message, details)


class ApiError(PigeonError):
    """REST call failed, either with an error envelope or an HTTP error status."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: str = "api_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(code, message, details)
        self.status = status
