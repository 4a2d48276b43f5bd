"""
Envelope encoding and decoding for websocket text frames.
"""

from typing import Any, Union

from pydantic import ValidationError

from pigeon_bot.errors import DecodeError
from pigeon_bot.models.envelope import Envelope


def build_envelope(event_type: str, data: Any) -> str:
    """Encode an outbound command as a JSON text frame."""
    return Envelope(type=event_type, data=data).model_dump_json()


def parse_envelope(raw: Union[str, bytes]) -> Envelope:
    """Decode an inbound frame. Raises DecodeError on bad UTF-8, bad JSON or a missing tag."""
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Frame is not valid UTF-8: {e}") from e
    try:
        return Envelope.model_validate_json(raw)
    except ValidationError as e:
        raise DecodeError(
            f"Malformed frame: {e.errors()[0]['msg']}",
            details={"frame": raw[:200]},
        ) from e
