"""JSONL event sink and console presentation sink."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from marketsignal.domain.events import EngineEvent, EventType
from marketsignal.engine.view import EngineView
from marketsignal.logging.logger import HumanLogger
from marketsignal.signals.labels import metric_statuses


class JsonlEventSink:
    """Append-only JSONL writer."""

    def __init__(self, path: str, run_id: str = "") -> None:
        output_path = Path(path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.path = output_path
        self.run_id = run_id

    def emit(self, event: EngineEvent) -> None:
        record = event.to_record()
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, sort_keys=True))
            handle.write("\n")

    def publish(self, view: EngineView) -> None:
        if view.is_refreshing:
            event_type = EventType.REFRESH_STARTED
        else:
            event_type = EventType.STATE_PUBLISHED
        self.emit(EngineEvent(run_id=self.run_id, event_type=event_type, payload=view.to_record()))


class ConsoleSink:
    """Log per-metric statuses once a refresh settles."""

    def __init__(self, human_logger: HumanLogger) -> None:
        self.human_logger = human_logger

    def publish(self, view: EngineView) -> None:
        if view.is_refreshing:
            return
        self.human_logger.status(
            tally=view.tally,
            statuses=metric_statuses(view.current),
            last_updated=view.last_updated.isoformat(),
            last_error=view.last_error.value if view.last_error else None,
        )


def load_events(path: str | Path) -> list[dict[str, Any]]:
    """Load JSONL records from disk."""
    records: list[dict[str, Any]] = []
    input_path = Path(path)
    if not input_path.exists():
        return records
    with input_path.open("r", encoding="utf-8") as handle:
        for line in handle:
            text = line.strip()
            if not text:
                continue
            records.append(json.loads(text))
    return records
