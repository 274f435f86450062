"""Engine notifications for dashboards and other observers."""

from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Iterator

from pydantic import BaseModel, Field

from src.utils.logging import get_logger

logger = get_logger(__name__)


class Severity(str, Enum):
    """How prominently an observer should surface an event."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class EngineEvent(BaseModel):
    """User-facing notification produced by an engine operation."""

    kind: str
    title: str
    description: str
    severity: Severity = Severity.INFO
    timestamp: datetime = Field(default_factory=datetime.utcnow)


EventHandler = Callable[[EngineEvent], Awaitable[None]]

_collecting: ContextVar[list[EngineEvent] | None] = ContextVar("engine_events", default=None)


class EventBus:
    """
    Collects events during an operation and delivers them afterwards.

    Components ``emit`` while the store transaction is open. The engine
    wraps each operation in ``collect()`` so that its events go to a list of
    its own, and ``publish``es that list once the transaction is released;
    slow observers never hold the store lock. Events emitted outside
    ``collect()`` wait for ``flush()``.
    """

    def __init__(self) -> None:
        self._subscribers: list[EventHandler] = []
        self._pending: list[EngineEvent] = []

    def subscribe(self, handler: EventHandler) -> None:
        """Register an async observer."""
        self._subscribers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove an observer if registered."""
        if handler in self._subscribers:
            self._subscribers.remove(handler)

    @contextmanager
    def collect(self, events: list[EngineEvent]) -> Iterator[list[EngineEvent]]:
        """Route events emitted by the current task into ``events``."""
        token = _collecting.set(events)
        try:
            yield events
        finally:
            _collecting.reset(token)

    def emit(self, event: EngineEvent) -> None:
        """Queue an event on the current operation, or for the next flush."""
        pending = _collecting.get()
        if pending is None:
            pending = self._pending
        pending.append(event)

    async def publish(self, events: list[EngineEvent]) -> None:
        """Deliver events to every observer."""
        for event in events:
            for handler in list(self._subscribers):
                try:
                    await handler(event)
                except Exception as e:
                    logger.warning("event_handler_failed", kind=event.kind, error=str(e))

    async def flush(self) -> list[EngineEvent]:
        """Deliver events queued outside any operation and return them."""
        events, self._pending = self._pending, []
        await self.publish(events)
        return events
