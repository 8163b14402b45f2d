"""Domain models and event types."""

from .events import EngineEvent, EventType
from .models import (
    EngineState,
    ErrorKind,
    HistoryPoint,
    IndexQuote,
    IndicatorVote,
    MarketSnapshot,
    RsiZone,
    Signal,
    SignalTally,
    TreasuryYield,
    VolatilityQuote,
    Vote,
)

__all__ = [
    "EngineEvent",
    "EventType",
    "EngineState",
    "ErrorKind",
    "HistoryPoint",
    "IndexQuote",
    "IndicatorVote",
    "MarketSnapshot",
    "RsiZone",
    "Signal",
    "SignalTally",
    "TreasuryYield",
    "VolatilityQuote",
    "Vote",
]
