"""Simulated market data provider for demos and offline runs."""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from time import sleep

from marketsignal.domain.models import (
    HistoryPoint,
    IndexQuote,
    MarketSnapshot,
    TreasuryYield,
    VolatilityQuote,
)

DEMO_HISTORY = (
    ("2024-01", 15000.0),
    ("2024-02", 15500.0),
    ("2024-03", 16000.0),
    ("2024-04", 15800.0),
    ("2024-05", 16200.0),
    ("2024-06", 16800.0),
    ("2024-07", 17200.0),
    ("2024-08", 17000.0),
    ("2024-09", 17500.0),
    ("2024-10", 17800.0),
    ("2024-11", 18100.0),
    ("2024-12", 18245.0),
)


def demo_snapshot(captured_at: datetime | None = None) -> MarketSnapshot:
    """Return the Nasdaq demo snapshot the simulator starts from."""
    return MarketSnapshot(
        index=IndexQuote(
            price=18245.67,
            change=125.43,
            change_percent=0.69,
            moving_average_50=17890.23,
            moving_average_200=16745.89,
            rsi=65.4,
            price_to_earnings=28.7,
        ),
        volatility_index=VolatilityQuote(price=18.45, change=-1.23, change_percent=-6.25),
        treasury_yield=TreasuryYield(yield_percent=4.25, change=0.05),
        gdp_growth_percent=2.8,
        semiconductor_index=145.67,
        history=tuple(
            HistoryPoint(period_label=label, price=price) for label, price in DEMO_HISTORY
        ),
        captured_at=captured_at or datetime.now(tz=UTC),
    )


class SimulatedDataProvider:
    """Random-walk the index price around the previous snapshot."""

    def __init__(
        self,
        seed_snapshot: MarketSnapshot | None = None,
        max_move: float = 50.0,
        latency_seconds: float = 0.0,
        seed: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if max_move < 0:
            raise ValueError("max_move must be non-negative")
        if latency_seconds < 0:
            raise ValueError("latency_seconds must be non-negative")
        self.seed_snapshot = seed_snapshot or demo_snapshot()
        self.max_move = max_move
        self.latency_seconds = latency_seconds
        self._random = random.Random(seed)
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    def fetch(self, previous: MarketSnapshot | None = None) -> MarketSnapshot:
        if self.latency_seconds > 0:
            sleep(self.latency_seconds)
        basis = previous or self.seed_snapshot
        move = (self._random.random() - 0.5) * self.max_move
        prior_price = basis.index.price
        change_percent = (move / prior_price) * 100.0 if prior_price else 0.0
        index = replace(
            basis.index,
            price=prior_price + move,
            change=move,
            change_percent=change_percent,
        )
        return replace(basis, index=index, captured_at=self._clock())
