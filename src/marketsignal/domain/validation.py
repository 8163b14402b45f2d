"""Snapshot invariant checks applied before evaluation."""

from __future__ import annotations

import math

import pandas as pd

from marketsignal.domain.models import MarketSnapshot
from marketsignal.errors import MalformedSnapshotError


def validate_snapshot(snapshot: object) -> MarketSnapshot:
    """Return the snapshot unchanged or raise MalformedSnapshotError."""
    if not isinstance(snapshot, MarketSnapshot):
        raise MalformedSnapshotError(
            f"provider returned {type(snapshot).__name__}, expected MarketSnapshot"
        )

    numbers = {
        "index.price": snapshot.index.price,
        "index.change": snapshot.index.change,
        "index.change_percent": snapshot.index.change_percent,
        "index.moving_average_50": snapshot.index.moving_average_50,
        "index.moving_average_200": snapshot.index.moving_average_200,
        "index.rsi": snapshot.index.rsi,
        "index.price_to_earnings": snapshot.index.price_to_earnings,
        "volatility_index.price": snapshot.volatility_index.price,
        "volatility_index.change": snapshot.volatility_index.change,
        "volatility_index.change_percent": snapshot.volatility_index.change_percent,
        "treasury_yield.yield_percent": snapshot.treasury_yield.yield_percent,
        "treasury_yield.change": snapshot.treasury_yield.change,
        "gdp_growth_percent": snapshot.gdp_growth_percent,
        "semiconductor_index": snapshot.semiconductor_index,
    }
    for name, value in numbers.items():
        if not _is_finite_number(value):
            raise MalformedSnapshotError(f"{name} must be a finite number, got {value!r}")

    rsi = float(snapshot.index.rsi)
    if rsi < 0.0 or rsi > 100.0:
        raise MalformedSnapshotError(f"index.rsi must be within [0, 100], got {rsi}")

    _validate_history(snapshot)
    return snapshot


def _validate_history(snapshot: MarketSnapshot) -> None:
    history = snapshot.history
    if not history:
        raise MalformedSnapshotError("history must contain at least one point")

    labels: list[str] = []
    for position, point in enumerate(history):
        label = str(point.period_label).strip()
        if not label:
            raise MalformedSnapshotError(f"history[{position}] has an empty period label")
        if not _is_finite_number(point.price):
            raise MalformedSnapshotError(
                f"history[{position}].price must be a finite number, got {point.price!r}"
            )
        labels.append(label)

    if len(set(labels)) != len(labels):
        raise MalformedSnapshotError("history period labels must be unique")

    # Only full ISO dates ("2024-01", "2024-01-31") are ordered; anything else,
    # such as year-less month names, is taken in supplied order.
    parsed = pd.to_datetime(pd.Series(labels), format="ISO8601", errors="coerce")
    if parsed.isna().any():
        return
    if not parsed.is_monotonic_increasing:
        raise MalformedSnapshotError("history must be in chronological order")


def _is_finite_number(value: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(float(value))
