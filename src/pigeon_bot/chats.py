"""
Chats REST API — chats, members, message history and attachments.
"""

from __future__ import annotations

from typing import Any, Optional

from pigeon_bot.models.chat import Chat, ChatMember, ChatPreview
from pigeon_bot.models.message import Message, MessageAttachment
from pigeon_bot.transport.http import FileInput, HttpClient


class ChatsAPI:
    def __init__(self, http: HttpClient):
        self._http = http

    async def get(self, chat_id: int) -> Chat:
        return Chat.model_validate(await self._http.get(f"/chats/{chat_id}"))

    async def list(self) -> list[ChatPreview]:
        """Chats the bot is a member of."""
        data = await self._http.get("/chats", default=[])
        return [ChatPreview.model_validate(c) for c in data]

    async def members(self, chat_id: int) -> list[ChatMember]:
        data = await self._http.get(f"/chats/{chat_id}/members", default=[])
        return [ChatMember.model_validate(m) for m in data]

    async def remove_member(self, chat_id: int, user_id: int) -> None:
        await self._http.delete(f"/chats/{chat_id}/members/{user_id}")

    async def messages(
        self,
        chat_id: int,
        limit: Optional[int] = None,
        before_id: Optional[int] = None,
        after_id: Optional[int] = None,
    ) -> list[Message]:
        """Message history. Unset cursors are left out of the query string."""
        params: dict[str, Any] = {}
        if limit is not None:
            params["limit"] = limit
        if before_id is not None:
            params["before_id"] = before_id
        if after_id is not None:
            params["after_id"] = after_id
        data = await self._http.get(f"/chats/{chat_id}/messages", params=params or None, default=[])
        return [Message.model_validate(m) for m in data]

    async def upload_attachment(
        self,
        chat_id: int,
        file: FileInput,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> MessageAttachment:
        """Upload a file; pass the returned id as an attachment of send_message."""
        data = await self._http.upload(f"/chats/{chat_id}/attachments", file, filename, content_type)
        return MessageAttachment.model_validate(data)
