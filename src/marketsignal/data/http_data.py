"""HTTP JSON market data provider."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from time import sleep

import requests

from marketsignal.data.payload import snapshot_from_payload
from marketsignal.domain.models import MarketSnapshot
from marketsignal.errors import MalformedSnapshotError, ProviderUnavailableError


class HttpDataProvider:
    """Fetch the metrics payload from an HTTP endpoint serving the feed JSON layout."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        max_retries: int = 3,
        retry_delay_seconds: float = 1.0,
        session: requests.Session | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not url.strip():
            raise ValueError("url is required")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.url = url.strip()
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    def fetch(self, previous: MarketSnapshot | None = None) -> MarketSnapshot:
        _ = previous
        response = self._request_with_retry()
        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedSnapshotError(f"{self.url} returned a non-JSON body") from exc
        return snapshot_from_payload(payload, captured_at=self._clock())

    def _request_with_retry(self) -> requests.Response:
        for attempt in range(1, self.max_retries + 1):
            try:
                response = self.session.get(self.url, timeout=self.timeout)
            except requests.RequestException as exc:
                if attempt == self.max_retries:
                    raise ProviderUnavailableError(f"metrics request failed: {exc}") from exc
                self._backoff(attempt)
                continue
            if response.status_code == 429:
                if attempt == self.max_retries:
                    raise ProviderUnavailableError("metrics provider rate limit exceeded")
                self._backoff(attempt)
                continue
            if response.status_code >= 500:
                if attempt == self.max_retries:
                    raise ProviderUnavailableError(
                        f"metrics provider server error: {response.status_code}"
                    )
                self._backoff(attempt)
                continue
            if response.status_code >= 400:
                detail = response.text.strip() or "No response body"
                raise ProviderUnavailableError(
                    f"metrics provider error {response.status_code}: {detail}"
                )
            return response
        raise ProviderUnavailableError("metrics request exhausted retries")

    def _backoff(self, attempt: int) -> None:
        if self.retry_delay_seconds > 0:
            sleep(self.retry_delay_seconds * attempt)
