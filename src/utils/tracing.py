"""Assistant turn tracing."""

import time
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generator

from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class TraceEvent:
    """One timed step of an assistant turn: an LLM call or a tool call."""

    timestamp: datetime
    event_type: str
    conversation_id: int
    duration_ms: float | None = None
    failed: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)


class OperationTracer:
    """Collects the steps of one assistant turn for the interaction log."""

    def __init__(self, conversation_id: int):
        self.conversation_id = conversation_id
        self.events: list[TraceEvent] = []
        self.start_time = time.time()

    def add_event(
        self,
        event_type: str,
        duration_ms: float | None = None,
        failed: bool = False,
        **metadata: Any,
    ) -> TraceEvent:
        event = TraceEvent(
            timestamp=datetime.utcnow(),
            event_type=event_type,
            conversation_id=self.conversation_id,
            duration_ms=duration_ms,
            failed=failed,
            metadata=metadata,
        )
        self.events.append(event)

        logger.debug(
            "trace_event",
            conversation_id=self.conversation_id,
            event_type=event_type,
            duration_ms=duration_ms,
            failed=failed,
            **metadata,
        )
        return event

    @contextmanager
    def trace_operation(self, operation: str, **metadata: Any) -> Generator[None, None, None]:
        """Time a step; a step that raises is recorded as failed and the error propagates."""
        start = time.time()
        failed = False
        try:
            yield
        except Exception:
            failed = True
            raise
        finally:
            duration_ms = (time.time() - start) * 1000
            self.add_event(operation, duration_ms=duration_ms, failed=failed, **metadata)

    def get_trace_summary(self) -> dict[str, Any]:
        """Counts per step type plus the full event list."""
        total_duration = (time.time() - self.start_time) * 1000
        counts = Counter(event.event_type for event in self.events)

        return {
            "conversation_id": self.conversation_id,
            "total_duration_ms": total_duration,
            "total_events": len(self.events),
            "llm_calls": counts.get("llm_call", 0),
            "tool_calls": counts.get("tool_call", 0),
            "failed_events": sum(1 for event in self.events if event.failed),
            "events": [
                {
                    "timestamp": event.timestamp.isoformat(),
                    "event_type": event.event_type,
                    "duration_ms": event.duration_ms,
                    "failed": event.failed,
                    "metadata": event.metadata,
                }
                for event in self.events
            ],
        }
