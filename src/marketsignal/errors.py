"""Custom exceptions for clearer error handling across the engine."""

from __future__ import annotations

from marketsignal.domain.models import ErrorKind


class MarketSignalError(Exception):
    """Base exception for all engine-specific errors."""


class ConfigError(MarketSignalError, ValueError):
    """Raised when environment or CLI configuration is invalid."""


class DataProviderError(MarketSignalError):
    """Raised when a data provider cannot supply a usable snapshot."""

    kind: ErrorKind = ErrorKind.UNAVAILABLE


class ProviderUnavailableError(DataProviderError):
    """Raised when the provider could not produce a snapshot at all."""

    kind = ErrorKind.UNAVAILABLE


class MalformedSnapshotError(DataProviderError):
    """Raised when a payload or snapshot violates the data model."""

    kind = ErrorKind.MALFORMED
