"""JSON payload codec for market snapshots.

Payloads use the dashboard feed layout::

    {
      "nasdaq": {"price", "change", "changePercent", "ma50", "ma200", "rsi", "pe"},
      "vix": {"price", "change", "changePercent"},
      "treasury": {"yield", "change"},
      "gdpGrowth": 2.8,
      "semiconductorIndex": 145.67,
      "historicalData": [{"date": "2024-01", "price": 15000}, ...],
      "capturedAt": "2024-12-31T21:00:00+00:00"
    }

``capturedAt`` is optional; the caller's timestamp is used when absent.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from marketsignal.domain.models import (
    HistoryPoint,
    IndexQuote,
    MarketSnapshot,
    TreasuryYield,
    VolatilityQuote,
)
from marketsignal.errors import MalformedSnapshotError


def snapshot_from_payload(
    payload: Any,
    captured_at: datetime | None = None,
    history: Sequence[HistoryPoint] | None = None,
) -> MarketSnapshot:
    """Decode a feed payload; `history` overrides the embedded series when given."""
    root = _require_mapping(payload, "payload")
    nasdaq = _require_mapping(root.get("nasdaq"), "nasdaq")
    vix = _require_mapping(root.get("vix"), "vix")
    treasury = _require_mapping(root.get("treasury"), "treasury")

    if history is None:
        history = parse_history(root.get("historicalData"))

    timestamp = captured_at or datetime.now(tz=UTC)
    raw_captured = root.get("capturedAt")
    if raw_captured is not None:
        timestamp = _parse_timestamp(raw_captured)

    return MarketSnapshot(
        index=IndexQuote(
            price=_number(nasdaq, "price", "nasdaq"),
            change=_number(nasdaq, "change", "nasdaq"),
            change_percent=_number(nasdaq, "changePercent", "nasdaq"),
            moving_average_50=_number(nasdaq, "ma50", "nasdaq"),
            moving_average_200=_number(nasdaq, "ma200", "nasdaq"),
            rsi=_number(nasdaq, "rsi", "nasdaq"),
            price_to_earnings=_number(nasdaq, "pe", "nasdaq"),
        ),
        volatility_index=VolatilityQuote(
            price=_number(vix, "price", "vix"),
            change=_number(vix, "change", "vix"),
            change_percent=_number(vix, "changePercent", "vix"),
        ),
        treasury_yield=TreasuryYield(
            yield_percent=_number(treasury, "yield", "treasury"),
            change=_number(treasury, "change", "treasury"),
        ),
        gdp_growth_percent=_number(root, "gdpGrowth", "payload"),
        semiconductor_index=_number(root, "semiconductorIndex", "payload"),
        history=tuple(history),
        captured_at=timestamp,
    )


def parse_history(raw: Any) -> list[HistoryPoint]:
    """Decode the `historicalData` list."""
    if not isinstance(raw, list):
        raise MalformedSnapshotError("historicalData must be a list")
    points: list[HistoryPoint] = []
    for position, item in enumerate(raw):
        entry = _require_mapping(item, f"historicalData[{position}]")
        label = entry.get("date")
        if label is None or not str(label).strip():
            raise MalformedSnapshotError(f"historicalData[{position}] missing 'date'")
        points.append(
            HistoryPoint(
                period_label=str(label).strip(),
                price=_number(entry, "price", f"historicalData[{position}]"),
            )
        )
    return points


def snapshot_to_payload(snapshot: MarketSnapshot) -> dict[str, Any]:
    """Encode a snapshot in the feed layout."""
    return {
        "nasdaq": {
            "price": snapshot.index.price,
            "change": snapshot.index.change,
            "changePercent": snapshot.index.change_percent,
            "ma50": snapshot.index.moving_average_50,
            "ma200": snapshot.index.moving_average_200,
            "rsi": snapshot.index.rsi,
            "pe": snapshot.index.price_to_earnings,
        },
        "vix": {
            "price": snapshot.volatility_index.price,
            "change": snapshot.volatility_index.change,
            "changePercent": snapshot.volatility_index.change_percent,
        },
        "treasury": {
            "yield": snapshot.treasury_yield.yield_percent,
            "change": snapshot.treasury_yield.change,
        },
        "gdpGrowth": snapshot.gdp_growth_percent,
        "semiconductorIndex": snapshot.semiconductor_index,
        "historicalData": [
            {"date": point.period_label, "price": point.price} for point in snapshot.history
        ],
        "capturedAt": snapshot.captured_at.isoformat(),
    }


def _require_mapping(value: Any, name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedSnapshotError(f"{name} must be an object")
    return value


def _number(section: Mapping[str, Any], key: str, name: str) -> float:
    if key not in section:
        raise MalformedSnapshotError(f"{name} missing '{key}'")
    value = section[key]
    if isinstance(value, bool):
        raise MalformedSnapshotError(f"{name}.{key} must be numeric, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise MalformedSnapshotError(f"{name}.{key} must be numeric, got {value!r}") from exc


def _parse_timestamp(value: Any) -> datetime:
    text = str(value).strip().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise MalformedSnapshotError(f"capturedAt is not an ISO timestamp: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
