"""
Chat records — GET /chats, GET /chats/{id}, GET /chats/{id}/members.
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel

from pigeon_bot.models.message import Message
from pigeon_bot.models.user import User


class ChatMember(BaseModel):
    chat_id: int
    user_id: int
    role: str = ""
    custom_nickname: Optional[str] = None
    can_send_messages: bool = False
    can_manage_messages: bool = False
    can_manage_members: bool = False
    can_manage_chat: bool = False
    joined_at: str = ""
    last_read_message_id: Optional[int] = None

    model_config = {"extra": "allow", "frozen": True}


class Chat(BaseModel):
    id: int
    chat_type: str = ""
    name: Optional[str] = None
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    owner_id: Optional[int] = None
    is_public: bool = False
    created_at: str = ""
    updated_at: str = ""
    members: list[ChatMember] = []
    member_count: int = 0

    model_config = {"extra": "allow", "frozen": True}


class ChatPreview(BaseModel):
    """Entry of GET /chats — a chat plus its latest activity."""
    id: int
    chat_type: str = ""
    name: Optional[str] = None
    description: Optional[str] = None
    avatar_url: Optional[str] = None
    is_public: bool = False
    member_count: int = 0
    last_message: Optional[Message] = None
    last_user: Optional[User] = None
    other_user: Optional[User] = None
    last_read_message_id: Optional[int] = None
    unread_count: int = 0

    model_config = {"extra": "allow", "frozen": True}
