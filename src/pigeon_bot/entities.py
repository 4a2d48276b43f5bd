"""
Record wrappers — a fetched or pushed record plus a handle on the client.

A wrapper never owns the client; it only forwards follow-up calls
(reply, edit, fetch...) to it. Records are immutable snapshots, so
methods that change data swap in an updated copy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Union

from pigeon_bot.models.chat import Chat, ChatMember, ChatPreview
from pigeon_bot.models.message import Message, MessageAttachment
from pigeon_bot.models.user import User

if TYPE_CHECKING:
    from pigeon_bot.client import AsyncPigeonClient
    from pigeon_bot.transport.http import FileInput


class BaseEntity:
    __slots__ = ("_client",)

    def __init__(self, client: AsyncPigeonClient):
        self._client = client


class MessageEntity(BaseEntity):
    __slots__ = ("_data",)

    def __init__(self, client: AsyncPigeonClient, data: Message):
        super().__init__(client)
        self._data = data

    @property
    def data(self) -> Message:
        return self._data

    @property
    def id(self) -> int:
        return self._data.id

    @property
    def chat_id(self) -> int:
        return self._data.chat_id

    @property
    def sender_id(self) -> int:
        return self._data.sender_id

    @property
    def content(self) -> str:
        return self._data.content

    async def edit(self, content: str) -> None:
        await self._client.edit_message(self.id, content)
        self._data = self._data.model_copy(update={"content": content, "is_edited": True})

    async def delete(self) -> None:
        await self._client.delete_message(self.id)

    async def add_reaction(self, emoji: str) -> None:
        await self._client.add_reaction(self.id, emoji)

    async def remove_reaction(self, emoji: str) -> None:
        await self._client.remove_reaction(self.id, emoji)

    async def reply(self, content: str, attachment_ids: Optional[list[int]] = None) -> None:
        """Send `content` to the same chat as a reply to this message."""
        await self._client.send_message(self.chat_id, content, reply_to=self.id, attachment_ids=attachment_ids)

    def __repr__(self) -> str:
        return f"MessageEntity(id={self.id!r}, chat_id={self.chat_id!r})"


class ChatEntity(BaseEntity):
    __slots__ = ("_data",)

    def __init__(self, client: AsyncPigeonClient, data: Union[Chat, ChatPreview]):
        super().__init__(client)
        self._data = data

    @property
    def data(self) -> Union[Chat, ChatPreview]:
        return self._data

    @property
    def id(self) -> int:
        return self._data.id

    async def fetch_full(self) -> ChatEntity:
        """Replace a preview (or stale copy) with the full chat record."""
        self._data = await self._client.get_chat(self.id)
        return self

    async def fetch_members(self) -> list[ChatMember]:
        return await self._client.get_chat_members(self.id)

    async def fetch_messages(
        self,
        limit: Optional[int] = None,
        before_id: Optional[int] = None,
        after_id: Optional[int] = None,
    ) -> list[Message]:
        return await self._client.get_messages(self.id, limit=limit, before_id=before_id, after_id=after_id)

    async def send_message(
        self,
        content: str,
        reply_to: Optional[int] = None,
        attachment_ids: Optional[list[int]] = None,
    ) -> None:
        await self._client.send_message(self.id, content, reply_to=reply_to, attachment_ids=attachment_ids)

    async def set_typing(self, is_typing: bool = True) -> None:
        await self._client.set_typing(self.id, is_typing)

    async def remove_member(self, user_id: int) -> None:
        await self._client.remove_member(self.id, user_id)

    async def upload_attachment(self, file: FileInput, filename: Optional[str] = None) -> MessageAttachment:
        return await self._client.upload_attachment(self.id, file, filename=filename)

    def __repr__(self) -> str:
        return f"ChatEntity(id={self.id!r})"


class UserEntity(BaseEntity):
    __slots__ = ("_data",)

    def __init__(self, client: AsyncPigeonClient, data: User):
        super().__init__(client)
        self._data = data

    @property
    def data(self) -> User:
        return self._data

    @property
    def id(self) -> int:
        return self._data.id

    async def fetch(self) -> UserEntity:
        self._data = await self._client.get_user(self.id)
        return self

    def __repr__(self) -> str:
        return f"UserEntity(id={self.id!r})"
