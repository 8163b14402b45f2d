"""Per-run event records for the JSONL stream."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class EventType(StrEnum):
    SESSION_STARTED = "session_started"
    REFRESH_STARTED = "refresh_started"
    STATE_PUBLISHED = "state_published"
    SESSION_STOPPED = "session_stopped"


@dataclass(frozen=True)
class EngineEvent:
    """One line of a run's events.jsonl."""

    run_id: str
    event_type: EventType
    payload: Mapping[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def to_record(self) -> dict[str, Any]:
        return {
            "ts": self.occurred_at.isoformat(),
            "run_id": self.run_id,
            "event_type": str(self.event_type),
            "payload": dict(self.payload),
        }
