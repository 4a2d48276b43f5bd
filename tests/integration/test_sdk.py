"""
Integration tests for pigeon-bot — tests against a running Pigeon server.

Requires environment variables:
  PIGEON_BOT_TOKEN  — bot token (without the `Bot ` prefix)
  PIGEON_BASE_URL   — (optional) defaults to http://localhost:8000
  PIGEON_WS_URL     — (optional) websocket URL override
  PIGEON_CHAT_ID    — (optional) a chat the bot is a member of

Run: PIGEON_INTEGRATION=1 pytest tests/integration/ -v
"""

import asyncio
import os

import pytest

from pigeon_bot import ApiError, AsyncPigeonClient, AuthError, ConnectionError

SKIP = not os.environ.get("PIGEON_INTEGRATION")
TOKEN = os.environ.get("PIGEON_BOT_TOKEN", "")
BASE_URL = os.environ.get("PIGEON_BASE_URL", "http://localhost:8000")
WS_URL = os.environ.get("PIGEON_WS_URL") or None
CHAT_ID = os.environ.get("PIGEON_CHAT_ID")

pytestmark = [pytest.mark.integration, pytest.mark.skipif(SKIP, reason="PIGEON_INTEGRATION not set")]


def make_client(**kwargs) -> AsyncPigeonClient:
    return AsyncPigeonClient(TOKEN, base_url=BASE_URL, ws_url=WS_URL, auto_reconnect=False, **kwargs)


class TestConnectionLifecycle:
    @pytest.mark.asyncio
    async def test_connects_and_receives_ready(self):
        client = make_client()
        await client.start()
        assert client.connected
        assert client.authenticated
        await client.close()
        assert not client.connected

    @pytest.mark.asyncio
    async def test_rejects_invalid_token(self):
        client = AsyncPigeonClient("invalid", base_url=BASE_URL, ws_url=WS_URL, auto_reconnect=False, ready_timeout=5)
        with pytest.raises(TimeoutError):
            await client.start()
        await client.close()

    @pytest.mark.asyncio
    async def test_commands_rejected_before_ready(self):
        client = make_client()
        client.connect()
        with pytest.raises((ConnectionError, AuthError)):
            await client.send_message(1, "too early")
        await client.close()


class TestLookups:
    @pytest.mark.asyncio
    async def test_get_me(self):
        client = make_client()
        me = await client.get_me()
        assert me.is_bot
        fetched = await client.get_user(me.id)
        assert fetched.id == me.id
        await client.close()

    @pytest.mark.asyncio
    async def test_list_chats(self):
        client = make_client()
        chats = await client.get_my_chats()
        assert isinstance(chats, list)
        await client.close()

    @pytest.mark.asyncio
    async def test_get_nonexistent_chat(self):
        client = make_client()
        with pytest.raises(ApiError):
            await client.get_chat(999_999_999)
        await client.close()


class TestRealtime:
    @pytest.mark.asyncio
    async def test_online_list_includes_bot(self):
        client = make_client()
        await client.start()
        users = await client.get_online_list()
        assert client.user_id in [u.id for u in users]
        await client.close()

    @pytest.mark.skipif(not CHAT_ID, reason="PIGEON_CHAT_ID not set")
    @pytest.mark.asyncio
    async def test_send_message_round_trip(self):
        client = make_client()
        received = asyncio.get_running_loop().create_future()

        @client.on("new_message")
        def on_message(message, data):
            if message.sender_id == client.user_id and not received.done():
                received.set_result(message)

        await client.start()
        await client.send_message(int(CHAT_ID), "integration ping")
        message = await asyncio.wait_for(received, timeout=10)
        assert message.content == "integration ping"
        await message.delete()
        await client.close()
