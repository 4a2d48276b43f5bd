"""Basic unit tests for pigeon-bot package."""

import pytest

from pigeon_bot import (
    AsyncPigeonClient,
    PigeonClient,
    PigeonError,
    ApiError,
    AuthError,
    ConfigError,
    ConnectionError,
    DecodeError,
    ServerError,
    C2SEvent,
    S2CEvent,
    ClientEvent,
    __version__,
)


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert PigeonClient is not None
    assert AsyncPigeonClient is not None


def test_error_hierarchy():
    for cls in (ConfigError, ConnectionError, AuthError, DecodeError, ServerError, ApiError):
        assert issubclass(cls, PigeonError)


def test_error_attributes():
    err = PigeonError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    api_err = ApiError("Chat not found", status=404, details={"code": 404})
    assert api_err.code == "api_error"
    assert api_err.status == 404
    assert api_err.details == {"code": 404}


def test_event_constants():
    assert C2SEvent.SEND_MESSAGE == "send_message"
    assert C2SEvent.TYPING == "typing"
    assert S2CEvent.NEW_MESSAGE == "new_message"
    assert ClientEvent.READY == "ready"


def test_missing_token_fails_before_connecting():
    attempts = []

    async def factory(url):
        attempts.append(url)

    with pytest.raises(ConfigError, match="token is required"):
        AsyncPigeonClient(transport_factory=factory)
    with pytest.raises(ConfigError):
        AsyncPigeonClient("")
    assert attempts == []
