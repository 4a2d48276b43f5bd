"""EventEmitter registration and delivery."""

import asyncio

import pytest

from pigeon_bot.emitter import EventEmitter


def test_emit_calls_handlers_in_order():
    events = EventEmitter()
    calls = []
    events.on("x", lambda *a: calls.append(("first", a)))
    events.on("x", lambda *a: calls.append(("second", a)))

    assert events.emit("x", 1, 2) is True
    assert calls == [("first", (1, 2)), ("second", (1, 2))]


def test_emit_without_listeners():
    assert EventEmitter().emit("nobody") is False


def test_decorator_and_off():
    events = EventEmitter()
    calls = []

    @events.on("x")
    def handler(value):
        calls.append(value)

    events.emit("x", 1)
    events.off("x", handler)
    events.emit("x", 2)
    assert calls == [1]
    assert events.listener_count("x") == 0


def test_off_all():
    events = EventEmitter()
    events.on("x", lambda: None)
    events.on("x", lambda: None)
    events.off("x")
    assert events.listener_count("x") == 0


def test_once():
    events = EventEmitter()
    calls = []
    events.once("x", calls.append)
    events.emit("x", 1)
    events.emit("x", 2)
    assert calls == [1]


def test_once_can_be_removed_by_plain_handler():
    events = EventEmitter()
    calls = []
    events.once("x", calls.append)
    events.off("x", calls.append)
    events.emit("x", 1)
    assert calls == []


def test_once_removes_only_itself():
    events = EventEmitter()
    calls = []

    def handler(value):
        calls.append(value)

    events.on("x", handler)
    events.once("x", handler)
    events.emit("x", 1)
    events.emit("x", 2)
    assert calls == [1, 1, 2]
    assert events.listener_count("x") == 1


def test_sync_exception_propagates():
    events = EventEmitter()

    def boom():
        raise ValueError("boom")

    events.on("x", boom)
    with pytest.raises(ValueError):
        events.emit("x")


@pytest.mark.asyncio
async def test_coroutine_handlers_are_scheduled():
    events = EventEmitter()
    done = asyncio.Event()

    async def handler(value):
        await asyncio.sleep(0)
        done.set()

    events.on("x", handler)
    events.emit("x", 1)
    assert not done.is_set()
    await asyncio.wait_for(done.wait(), timeout=1)


@pytest.mark.asyncio
async def test_coroutine_failure_goes_to_error_event():
    events = EventEmitter()
    errors = []
    events.on("error", errors.append)

    async def handler():
        raise RuntimeError("late boom")

    events.on("x", handler)
    events.emit("x")
    await events.drain()
    assert [str(e) for e in errors] == ["late boom"]


@pytest.mark.asyncio
async def test_coroutine_failure_without_error_listener_is_logged(caplog):
    events = EventEmitter()

    async def handler():
        raise RuntimeError("nobody listening")

    events.on("x", handler)
    events.emit("x")
    await events.drain()
    assert "Unhandled exception in 'x' handler" in caplog.text
