"""Core market signal domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum


class Vote(StrEnum):
    """Direction a single indicator points to."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class Signal(StrEnum):
    """Overall trading recommendation."""

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class RsiZone(StrEnum):
    """Gauge band for the relative strength index."""

    OVERSOLD = "oversold"
    NEUTRAL = "neutral"
    OVERBOUGHT = "overbought"


class ErrorKind(StrEnum):
    """Failure categories recorded by the refresh scheduler."""

    UNAVAILABLE = "unavailable"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class IndexQuote:
    """Tracked equity index with its precomputed technicals."""

    price: float
    change: float
    change_percent: float
    moving_average_50: float
    moving_average_200: float
    rsi: float
    price_to_earnings: float


@dataclass(frozen=True)
class VolatilityQuote:
    """Volatility index reading (VIX)."""

    price: float
    change: float
    change_percent: float


@dataclass(frozen=True)
class TreasuryYield:
    """10-year treasury yield reading."""

    yield_percent: float
    change: float


@dataclass(frozen=True)
class HistoryPoint:
    """Single period close used for the trend series."""

    period_label: str
    price: float


@dataclass(frozen=True)
class MarketSnapshot:
    """Point-in-time read of every tracked metric."""

    index: IndexQuote
    volatility_index: VolatilityQuote
    treasury_yield: TreasuryYield
    gdp_growth_percent: float
    semiconductor_index: float
    history: tuple[HistoryPoint, ...]
    captured_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def __post_init__(self) -> None:
        # Providers may hand over any sequence; store it immutably.
        object.__setattr__(self, "history", tuple(self.history))


@dataclass(frozen=True)
class IndicatorVote:
    """Vote cast by one named rule."""

    rule: str
    vote: Vote


@dataclass(frozen=True)
class SignalTally:
    """Vote counts and the recommendation they imply."""

    bullish: int
    bearish: int
    neutral: int
    overall: Signal

    @property
    def total(self) -> int:
        return self.bullish + self.bearish + self.neutral


@dataclass(frozen=True)
class EngineState:
    """State owned by the refresh scheduler, replaced wholesale on every transition."""

    current: MarketSnapshot
    is_refreshing: bool = False
    last_updated: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    last_error: ErrorKind | None = None
    last_error_message: str | None = None
    refresh_count: int = 0
    failure_count: int = 0
