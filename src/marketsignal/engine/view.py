"""Presentation-facing view of engine state."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol, Self

from marketsignal.data.payload import snapshot_to_payload
from marketsignal.domain.models import EngineState, ErrorKind, MarketSnapshot, SignalTally
from marketsignal.signals.evaluator import evaluate


@dataclass(frozen=True)
class EngineView:
    """Everything a presentation layer needs for one state transition."""

    current: MarketSnapshot
    tally: SignalTally
    is_refreshing: bool
    last_updated: datetime
    last_error: ErrorKind | None = None
    last_error_message: str | None = None

    @classmethod
    def from_state(cls, state: EngineState) -> Self:
        return cls(
            current=state.current,
            tally=evaluate(state.current),
            is_refreshing=state.is_refreshing,
            last_updated=state.last_updated,
            last_error=state.last_error,
            last_error_message=state.last_error_message,
        )

    def to_record(self) -> dict[str, Any]:
        """Convert view to a JSON-friendly dict."""
        return {
            "is_refreshing": self.is_refreshing,
            "last_updated": self.last_updated.isoformat(),
            "last_error": self.last_error.value if self.last_error else None,
            "last_error_message": self.last_error_message,
            "tally": {
                "bullish": self.tally.bullish,
                "bearish": self.tally.bearish,
                "neutral": self.tally.neutral,
                "overall": self.tally.overall.value,
            },
            "snapshot": snapshot_to_payload(self.current),
        }


class PresentationSink(Protocol):
    """Receiver of engine views; never writes back into the engine."""

    def publish(self, view: EngineView) -> None:
        """Render or record one state transition."""
