"""
Observability for the reward pipeline.

Components never log errors into shared state. They are handed an `EventRecorder`
and call `record(error, context)`; what happens next is the recorder's business.
`LoggingRecorder` just logs, `MemoryRecorder` also keeps a bounded history that
tests and reports can inspect.
"""

from __future__ import annotations

import datetime
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.datetime.now(tz=datetime.timezone.utc).isoformat()


@dataclass
class ErrorContext:
    operation: str = "unknown"
    chain_id: Optional[int] = None
    campaign_id: Optional[int] = None
    user: Optional[str] = None
    page: Optional[int] = None
    timestamp: str = field(default_factory=_now)


@dataclass
class RecordedEvent:
    error: Exception
    context: ErrorContext


class EventRecorder(Protocol):
    def record(self, error: Exception, context: ErrorContext) -> None:
        ...


class LoggingRecorder:
    """Stateless recorder, logs a warning per event"""

    def record(self, error: Exception, context: ErrorContext) -> None:
        logger.warning(
            "[%s] %s: %s (chain=%s campaign=%s user=%s page=%s)",
            context.operation,
            type(error).__name__,
            error,
            context.chain_id,
            context.campaign_id,
            context.user,
            context.page,
        )


class MemoryRecorder(LoggingRecorder):
    """
    Logs like `LoggingRecorder` and keeps the last `max_size` events.
    Create one per run (or per test) instead of sharing it.
    """

    def __init__(self, max_size: int = 1000):
        self.max_size = max_size
        self.events: list[RecordedEvent] = []

    def record(self, error: Exception, context: ErrorContext) -> None:
        super().record(error, context)
        self.events.append(RecordedEvent(error, context))
        if len(self.events) > self.max_size:
            self.events = self.events[-self.max_size :]

    def recent(self, limit: int = 10) -> list[RecordedEvent]:
        return self.events[-limit:]

    def stats(self) -> dict:
        return {
            "total": len(self.events),
            "by_type": dict(Counter(type(e.error).__name__ for e in self.events)),
            "by_operation": dict(Counter(e.context.operation for e in self.events)),
        }
