"""Environment and CLI runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Self

from dotenv import load_dotenv

from marketsignal.errors import ConfigError

DATA_SOURCES = ("simulated", "file", "http")


def parse_bool(value: str | None, default: bool) -> bool:
    """Parse truthy environment strings."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_optional_int(value: str | None, *, field_name: str) -> int | None:
    """Parse optional integer values from env strings."""
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError as exc:
        raise ConfigError(f"{field_name} must be an integer") from exc


def parse_float(value: str | None, default: float, *, field_name: str) -> float:
    """Parse a float env string, falling back to the default when unset."""
    if value is None or not value.strip():
        return default
    try:
        return float(value.strip())
    except ValueError as exc:
        raise ConfigError(f"{field_name} must be a number") from exc


def normalize_data_source(value: str | None, default: str = "simulated") -> str:
    """Normalize data source selector values."""
    mapping = {
        "sim": "simulated",
        "simulated": "simulated",
        "demo": "simulated",
        "mock": "simulated",
        "file": "file",
        "json": "file",
        "http": "http",
        "https": "http",
        "url": "http",
    }
    if value is None or not value.strip():
        return default
    candidate = value.strip().lower()
    return mapping.get(candidate, candidate)


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings."""

    data_source: str = "simulated"
    refresh_interval_seconds: float = 30.0
    metrics_path: str = "market_metrics.json"
    history_path: str = ""
    provider_url: str = ""
    request_timeout_seconds: float = 10.0
    max_retries: int = 3
    simulated_latency_seconds: float = 1.0
    simulated_max_move: float = 50.0
    simulated_seed: int | None = None
    events_dir: str = "runs"
    log_level: str = "INFO"
    write_events: bool = True

    @classmethod
    def from_env(cls) -> Self:
        """Create settings from environment variables."""
        load_dotenv()
        max_retries = parse_optional_int(os.getenv("MAX_RETRIES"), field_name="max_retries")
        raw = cls(
            data_source=normalize_data_source(os.getenv("DATA_SOURCE")),
            refresh_interval_seconds=parse_float(
                os.getenv("REFRESH_INTERVAL_SECONDS"),
                30.0,
                field_name="refresh_interval_seconds",
            ),
            metrics_path=str(os.getenv("METRICS_PATH", "market_metrics.json")).strip(),
            history_path=str(os.getenv("HISTORY_PATH", "")).strip(),
            provider_url=str(os.getenv("PROVIDER_URL", "")).strip(),
            request_timeout_seconds=parse_float(
                os.getenv("REQUEST_TIMEOUT_SECONDS"),
                10.0,
                field_name="request_timeout_seconds",
            ),
            max_retries=3 if max_retries is None else max_retries,
            simulated_latency_seconds=parse_float(
                os.getenv("SIMULATED_LATENCY_SECONDS"),
                1.0,
                field_name="simulated_latency_seconds",
            ),
            simulated_max_move=parse_float(
                os.getenv("SIMULATED_MAX_MOVE"),
                50.0,
                field_name="simulated_max_move",
            ),
            simulated_seed=parse_optional_int(
                os.getenv("SIMULATED_SEED"),
                field_name="simulated_seed",
            ),
            events_dir=str(os.getenv("EVENTS_DIR", "runs")).strip(),
            log_level=str(os.getenv("LOG_LEVEL", "INFO")).strip().upper(),
            write_events=parse_bool(os.getenv("WRITE_EVENTS"), True),
        )
        return raw.validate()

    def with_overrides(self, **kwargs: object) -> Self:
        """Return a new settings object with updated values."""
        overrides = dict(kwargs)
        source_override = overrides.get("data_source")
        if isinstance(source_override, str):
            overrides["data_source"] = normalize_data_source(source_override, self.data_source)
        updated = replace(self, **overrides)
        return updated.validate()

    def validate(self) -> Self:
        """Validate settings fields."""
        if self.data_source not in DATA_SOURCES:
            raise ConfigError(f"data_source must be one of {', '.join(DATA_SOURCES)}")
        if self.refresh_interval_seconds <= 0:
            raise ConfigError("refresh_interval_seconds must be positive")
        if self.request_timeout_seconds <= 0:
            raise ConfigError("request_timeout_seconds must be positive")
        if self.max_retries < 1:
            raise ConfigError("max_retries must be at least 1")
        if self.simulated_latency_seconds < 0:
            raise ConfigError("simulated_latency_seconds must be non-negative")
        if self.simulated_max_move < 0:
            raise ConfigError("simulated_max_move must be non-negative")
        if self.data_source == "http" and not self.provider_url:
            raise ConfigError("PROVIDER_URL is required for the http data source")
        if self.data_source == "file" and not self.metrics_path:
            raise ConfigError("METRICS_PATH is required for the file data source")
        return self
