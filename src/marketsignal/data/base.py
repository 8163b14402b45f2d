"""Market data provider contract."""

from __future__ import annotations

from typing import Protocol

from marketsignal.domain.models import MarketSnapshot


class DataProvider(Protocol):
    """Interface for snapshot retrieval."""

    def fetch(self, previous: MarketSnapshot | None = None) -> MarketSnapshot:
        """Return a new snapshot, optionally derived from the previous one.

        Raises ProviderUnavailableError or MalformedSnapshotError on failure.
        """
