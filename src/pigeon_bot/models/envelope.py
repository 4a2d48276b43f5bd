"""
Realtime envelope — one JSON object per text frame: {"type": <tag>, "data": <payload>}.

Payload models cover the tags the client interprets itself; every other
tag keeps its payload as an opaque dict.
"""

from typing import Any, Optional, Union
from pydantic import BaseModel

from pigeon_bot.models.message import Message


class Envelope(BaseModel):
    type: str
    data: Any = None


class AuthenticatedData(BaseModel):
    """S2C authenticated data"""
    user_id: Optional[Union[int, str]] = None

    model_config = {"extra": "allow"}


class ErrorData(BaseModel):
    """S2C error data"""
    message: str = ""

    model_config = {"extra": "allow"}


class MessageEventData(BaseModel):
    """S2C new_message / message_edited data"""
    message: Message

    model_config = {"extra": "allow"}


class OnlineUser(BaseModel):
    id: int

    model_config = {"extra": "allow", "frozen": True}


class OnlineListData(BaseModel):
    """S2C online_list data"""
    users: Optional[list[OnlineUser]] = None

    model_config = {"extra": "allow"}
