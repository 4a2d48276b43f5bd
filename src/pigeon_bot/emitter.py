"""
Named-channel event emitter used by the client to publish events.

Sync handlers run inline, in registration order. Coroutine handlers are
scheduled as tasks on the running loop, so a handler can await a correlated
request without stalling the frame reader. A failing coroutine handler is
reported through the `error` event.
"""

import asyncio
import functools
import inspect
import logging
from typing import Any, Callable, Optional

from pigeon_bot.models.events import ClientEvent

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class EventEmitter:
    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._tasks: set[asyncio.Task[Any]] = set()

    def on(self, event: str, handler: Optional[Handler] = None) -> Any:
        """Register a handler. Without `handler`, returns a decorator."""
        if handler is None:
            def decorator(fn: Handler) -> Handler:
                self.on(event, fn)
                return fn
            return decorator
        self._handlers.setdefault(event, []).append(handler)
        return handler

    def once(self, event: str, handler: Optional[Handler] = None) -> Any:
        """Register a handler that is removed after its first call."""
        if handler is None:
            def decorator(fn: Handler) -> Handler:
                self.once(event, fn)
                return fn
            return decorator

        @functools.wraps(handler)
        def wrapper(*args: Any) -> Any:
            self._discard(event, wrapper)
            return handler(*args)

        self._handlers.setdefault(event, []).append(wrapper)
        return handler

    def off(self, event: str, handler: Optional[Handler] = None) -> None:
        """Remove one handler, or every handler of `event` when none is given."""
        if handler is None:
            self._handlers.pop(event, None)
            return
        for registered in self._handlers.get(event, []):
            if registered == handler or getattr(registered, "__wrapped__", None) == handler:
                self._discard(event, registered)
                break

    def _discard(self, event: str, registered: Handler) -> None:
        handlers = self._handlers.get(event, [])
        for i, candidate in enumerate(handlers):
            if candidate is registered:
                del handlers[i]
                break
        if not handlers:
            self._handlers.pop(event, None)

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))

    def emit(self, event: str, *args: Any) -> bool:
        """Call every handler of `event`. Returns False when nobody listens.

        Exceptions from sync handlers propagate to the caller.
        """
        handlers = list(self._handlers.get(event, ()))
        for handler in handlers:
            result = handler(*args)
            if inspect.isawaitable(result):
                self._schedule(event, result)
        return bool(handlers)

    def _schedule(self, event: str, awaitable: Any) -> None:
        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        task.add_done_callback(functools.partial(self._on_task_done, event))

    def _on_task_done(self, event: str, task: "asyncio.Task[Any]") -> None:
        self._tasks.discard(task)
        if task.cancelled() or task.exception() is None:
            return
        exc = task.exception()
        if event != ClientEvent.ERROR and self.listener_count(ClientEvent.ERROR):
            try:
                self.emit(ClientEvent.ERROR, exc)
            except Exception:
                logger.exception("error handler raised while reporting a %r handler failure", event)
        else:
            logger.error("Unhandled exception in %r handler", event, exc_info=exc)

    async def drain(self) -> None:
        """Wait for scheduled coroutine handlers to finish."""
        current = asyncio.current_task()
        while True:
            tasks = [t for t in self._tasks if t is not current]
            if not tasks:
                return
            await asyncio.gather(*tasks, return_exceptions=True)
