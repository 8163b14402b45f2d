"""Refresh scheduling and presentation views."""

from .scheduler import RefreshScheduler
from .view import EngineView, PresentationSink

__all__ = ["EngineView", "PresentationSink", "RefreshScheduler"]
