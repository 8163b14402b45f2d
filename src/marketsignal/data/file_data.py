"""File-backed market data provider."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd

from marketsignal.data.payload import snapshot_from_payload
from marketsignal.domain.models import HistoryPoint, MarketSnapshot
from marketsignal.errors import MalformedSnapshotError, ProviderUnavailableError


class FileDataProvider:
    """Re-read a JSON metrics payload, and optionally a CSV price history, on every fetch."""

    label_column_candidates = ("date", "period", "datetime", "timestamp")
    price_column_candidates = ("price", "close", "adj close", "adj_close")

    def __init__(
        self,
        metrics_path: str,
        history_path: str | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.metrics_path = Path(metrics_path)
        self.history_path = Path(history_path) if history_path else None
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    def fetch(self, previous: MarketSnapshot | None = None) -> MarketSnapshot:
        _ = previous
        payload = self._read_metrics()
        history = None
        if self.history_path is not None:
            history = self._read_history(self.history_path)
        return snapshot_from_payload(payload, captured_at=self._clock(), history=history)

    def _read_metrics(self) -> object:
        try:
            text = self.metrics_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ProviderUnavailableError(
                f"cannot read metrics file {self.metrics_path}: {exc}"
            ) from exc
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedSnapshotError(
                f"metrics file {self.metrics_path} is not valid JSON: {exc}"
            ) from exc

    def _read_history(self, path: Path) -> list[HistoryPoint]:
        try:
            frame = pd.read_csv(path)
        except OSError as exc:
            raise ProviderUnavailableError(f"cannot read history file {path}: {exc}") from exc
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
            raise MalformedSnapshotError(f"history file {path} is not valid CSV: {exc}") from exc
        return self._normalize_history(frame)

    def _normalize_history(self, frame: pd.DataFrame) -> list[HistoryPoint]:
        lower_to_original = {str(column).strip().lower(): column for column in frame.columns}
        label_column = self._pick_column(lower_to_original, self.label_column_candidates)
        price_column = self._pick_column(lower_to_original, self.price_column_candidates)

        normalized = pd.DataFrame(
            {
                "label": frame[label_column].astype(str).str.strip(),
                "price": pd.to_numeric(frame[price_column], errors="coerce"),
            }
        )
        normalized = normalized.dropna(subset=["price"])
        normalized = normalized[normalized["label"] != ""]
        if normalized.empty:
            raise MalformedSnapshotError(f"history file {self.history_path} has no valid rows")
        return [
            HistoryPoint(period_label=str(row.label), price=float(row.price))
            for row in normalized.itertuples(index=False)
        ]

    def _pick_column(
        self,
        lower_to_original: dict[str, object],
        candidates: tuple[str, ...],
    ) -> object:
        for candidate in candidates:
            if candidate in lower_to_original:
                return lower_to_original[candidate]
        expected = ", ".join(candidates)
        raise MalformedSnapshotError(
            f"history file {self.history_path} missing column. Expected one of: {expected}"
        )
