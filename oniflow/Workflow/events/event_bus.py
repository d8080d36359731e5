"""
Event Bus

A simple publish/subscribe bus for kernel events (workflow:*, command:*,
notification:*, ...). Workflow event triggers subscribe here and the engine
reports run lifecycle events here.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

import structlog

logger = structlog.get_logger(__name__)

EventHandler = Callable[[Any], Any]


class EventBus:
    """
    Event bus with sync and async subscribers.

    A handler returning an awaitable is scheduled as a task on the running
    loop; drain() waits for those tasks. A failing subscriber is logged and
    does not affect the others.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[EventHandler]] = {}
        self._tasks: Set["asyncio.Task[Any]"] = set()

    def on(self, event: str, handler: EventHandler) -> Callable[[], bool]:
        """
        Subscribe to an event.

        Returns:
            A callable that removes this subscription
        """
        self._subscribers.setdefault(event, []).append(handler)
        logger.debug("Event subscriber added", event_type=event)
        return lambda: self.off(event, handler)

    def off(self, event: str, handler: EventHandler) -> bool:
        """
        Unsubscribe from an event.

        Returns:
            True if handler was found and removed, False otherwise
        """
        handlers = self._subscribers.get(event)
        if not handlers:
            return False
        try:
            handlers.remove(handler)
        except ValueError:
            return False
        if not handlers:
            del self._subscribers[event]
        return True

    def emit(self, event: str, payload: Any = None) -> None:
        """
        Emit an event to all subscribers, in subscription order.
        """
        subscribers = list(self._subscribers.get(event, []))
        if subscribers:
            logger.debug("Emitting event", event_type=event, subscriber_count=len(subscribers))

        for handler in subscribers:
            try:
                result = handler(payload)
            except Exception as e:
                logger.error("Error in event subscriber", event_type=event, error=str(e))
                continue
            if inspect.isawaitable(result):
                self._schedule(event, result)

    def _schedule(self, event: str, awaitable: Awaitable[Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as e:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            logger.error("Cannot schedule async event subscriber", event_type=event, error=str(e))
            return
        task = asyncio.ensure_future(awaitable, loop=loop)
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._on_task_done(event, t))

    def _on_task_done(self, event: str, task: "asyncio.Task[Any]") -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Error in async event subscriber", event_type=event, error=str(error))

    async def drain(self) -> None:
        """Wait for async subscribers scheduled so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def listener_count(self, event: Optional[str] = None) -> int:
        if event is not None:
            return len(self._subscribers.get(event, []))
        return sum(len(handlers) for handlers in self._subscribers.values())

    def clear(self, event: Optional[str] = None) -> None:
        """
        Clear all subscribers for an event, or all subscribers if no event specified.
        """
        if event:
            self._subscribers.pop(event, None)
        else:
            self._subscribers.clear()
