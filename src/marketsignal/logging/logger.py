"""Concise human-readable engine logger."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from marketsignal.domain.models import SignalTally, Vote


class HumanLogger:
    """Console logger with fixed line types."""

    def __init__(self, level: str = "INFO") -> None:
        self._logger = logging.getLogger("marketsignal")
        self._logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self._logger.propagate = False
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s | %(message)s", "%Y-%m-%d %H:%M:%S")
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    def session_started(self, run_id: str, data_source: str, interval_seconds: float) -> None:
        self._logger.info(
            "session | %s | source %s | every %ss",
            self._short_id(run_id),
            data_source,
            f"{interval_seconds:g}",
        )

    def scheduler_started(self, interval_seconds: float) -> None:
        self._logger.debug("scheduler | started | every %ss", f"{interval_seconds:g}")

    def scheduler_stopped(self) -> None:
        self._logger.info("scheduler | stopped")

    def refresh_started(self, trigger: str) -> None:
        self._logger.debug("refresh | %s", trigger)

    def snapshot_applied(
        self,
        price: float,
        change: float,
        change_percent: float,
        tally: SignalTally,
    ) -> None:
        self._logger.info(
            "snapshot | index %s | %s (%s) | %s | bull %d bear %d neutral %d",
            f"{price:,.2f}",
            f"{change:+,.2f}",
            f"{change_percent:+.2f}%",
            tally.overall.value,
            tally.bullish,
            tally.bearish,
            tally.neutral,
        )

    def refresh_failed(self, kind: str, message: str) -> None:
        self._logger.warning("refresh failed | %s | %s | keeping last snapshot", kind, message)

    def status(
        self,
        tally: SignalTally,
        statuses: Mapping[str, Vote],
        last_updated: str,
        last_error: str | None = None,
    ) -> None:
        parts = [f"status | {tally.overall.value}", f"updated {self._short_ts(last_updated)}"]
        parts.extend(f"{name} {vote.value}" for name, vote in statuses.items())
        if last_error:
            parts.append(f"last_error {last_error}")
        self._logger.info(" | ".join(parts))

    def error(self, message: str) -> None:
        self._logger.error("error | %s", message)

    @staticmethod
    def _short_id(value: str | None, head: int = 10) -> str:
        if not value:
            return ""
        return str(value)[:head]

    @staticmethod
    def _short_ts(value: str) -> str:
        text = value.strip()
        if "T" not in text:
            return text
        return text.split("T", 1)[1][:8]
