"""Market data provider implementations."""

from .base import DataProvider
from .file_data import FileDataProvider
from .http_data import HttpDataProvider
from .payload import snapshot_from_payload, snapshot_to_payload
from .simulated import SimulatedDataProvider, demo_snapshot

__all__ = [
    "DataProvider",
    "FileDataProvider",
    "HttpDataProvider",
    "SimulatedDataProvider",
    "demo_snapshot",
    "snapshot_from_payload",
    "snapshot_to_payload",
]
