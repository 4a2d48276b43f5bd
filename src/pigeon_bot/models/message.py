"""
Message records — GET /chats/{id}/messages and new_message/message_edited frames.
"""

from typing import Optional
from pydantic import BaseModel


class MessageAttachment(BaseModel):
    id: int
    chat_id: int
    uploaded_by: int
    file_type: str = ""
    file_url: str = ""
    file_name: str = ""
    file_size: int = 0
    mime_type: str = ""
    thumbnail_url: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[float] = None
    created_at: str = ""

    model_config = {"extra": "allow", "frozen": True}


class MessageReaction(BaseModel):
    id: int
    message_id: int
    user_id: int
    emoji: str
    created_at: str = ""

    model_config = {"extra": "allow", "frozen": True}


class Message(BaseModel):
    id: int
    chat_id: int
    sender_id: int
    reply_to_message_id: Optional[int] = None
    content: str = ""
    is_edited: bool = False
    created_at: str = ""
    edited_at: Optional[str] = None
    attachments: Optional[list[MessageAttachment]] = None
    reactions: Optional[list[MessageReaction]] = None

    model_config = {"extra": "allow", "frozen": True}
