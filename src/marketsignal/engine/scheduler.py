"""Refresh scheduler owning the engine state.

A single lock guards the in-flight marker, so the timer thread and manual
triggers can never both start a fetch. State is an immutable ``EngineState``
replaced wholesale; observers only ever see complete transitions.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future
from dataclasses import replace
from datetime import UTC, datetime

from marketsignal.data.base import DataProvider
from marketsignal.domain.models import EngineState, MarketSnapshot
from marketsignal.domain.validation import validate_snapshot
from marketsignal.engine.view import EngineView, PresentationSink
from marketsignal.errors import DataProviderError, ProviderUnavailableError
from marketsignal.logging.logger import HumanLogger

DEFAULT_INTERVAL_SECONDS = 30.0


class RefreshScheduler:
    """Keep the current snapshot fresh on a fixed cadence and on demand."""

    def __init__(
        self,
        provider: DataProvider,
        initial: MarketSnapshot,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        sinks: Iterable[PresentationSink] = (),
        human_logger: HumanLogger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.provider = provider
        self.interval_seconds = float(interval_seconds)
        self.human_logger = human_logger or HumanLogger()
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._sinks: list[PresentationSink] = list(sinks)
        self._lock = threading.Lock()
        self._state = EngineState(current=validate_snapshot(initial), last_updated=self._clock())
        self._inflight: Future[EngineState] | None = None
        self._stop_event: threading.Event | None = None
        self._worker: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._stop_event is not None

    def add_sink(self, sink: PresentationSink) -> None:
        with self._lock:
            self._sinks.append(sink)

    def get_state(self) -> EngineState:
        """Return the current state; it is immutable, so callers cannot alter it."""
        with self._lock:
            return self._state

    def view(self) -> EngineView:
        return EngineView.from_state(self.get_state())

    def start(self) -> bool:
        """Refresh immediately, then every interval until stopped.

        Returns False when the scheduler is already running.
        """
        with self._lock:
            if self._stop_event is not None:
                return False
            stop_event = threading.Event()
            self._stop_event = stop_event
        self.human_logger.scheduler_started(self.interval_seconds)
        self._refresh(trigger="startup", gate=stop_event)
        with self._lock:
            if stop_event.is_set():
                return True
            worker = threading.Thread(
                target=self._run_periodic,
                args=(stop_event,),
                name="marketsignal-refresh",
                daemon=True,
            )
            self._worker = worker
            worker.start()
        return True

    def stop(self, wait: bool = False, timeout: float | None = None) -> bool:
        """Cancel future cycles. An in-flight refresh still completes and is applied.

        Returns False when the scheduler was not running.
        """
        with self._lock:
            stop_event = self._stop_event
            worker = self._worker
            if stop_event is None:
                return False
            stop_event.set()
            self._stop_event = None
            self._worker = None
        self.human_logger.scheduler_stopped()
        if wait and worker is not None and worker is not threading.current_thread():
            worker.join(timeout)
        return True

    def refresh_now(self) -> Future[EngineState]:
        """Run an out-of-band refresh, or join the one already in flight."""
        return self._refresh(trigger="manual")

    def _run_periodic(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval_seconds):
            self._refresh(trigger="scheduled", gate=stop_event)

    def _refresh(self, trigger: str, gate: threading.Event | None = None) -> Future[EngineState]:
        with self._lock:
            if self._inflight is not None:
                return self._inflight
            if gate is not None and gate.is_set():
                skipped: Future[EngineState] = Future()
                skipped.set_result(self._state)
                return skipped
            future: Future[EngineState] = Future()
            self._inflight = future
            previous = self._state
            started = replace(previous, is_refreshing=True)
            self._state = started

        try:
            self.human_logger.refresh_started(trigger)
            self._publish(started)
            final = self._run_cycle(previous)
        except BaseException as exc:
            with self._lock:
                self._state = previous
            self._publish(previous)
            with self._lock:
                self._inflight = None
            future.set_exception(exc)
            raise

        with self._lock:
            self._state = final
        self._publish(final)
        with self._lock:
            self._inflight = None
        future.set_result(final)
        return future

    def _run_cycle(self, previous: EngineState) -> EngineState:
        try:
            snapshot = validate_snapshot(self.provider.fetch(previous.current))
        except DataProviderError as exc:
            return self._failed(previous, exc)
        except Exception as exc:
            error = ProviderUnavailableError(f"provider raised {type(exc).__name__}: {exc}")
            return self._failed(previous, error)

        final = replace(
            previous,
            current=snapshot,
            is_refreshing=False,
            last_updated=self._clock(),
            last_error=None,
            last_error_message=None,
            refresh_count=previous.refresh_count + 1,
        )
        view = EngineView.from_state(final)
        self.human_logger.snapshot_applied(
            price=snapshot.index.price,
            change=snapshot.index.change,
            change_percent=snapshot.index.change_percent,
            tally=view.tally,
        )
        return final

    def _failed(self, previous: EngineState, error: DataProviderError) -> EngineState:
        self.human_logger.refresh_failed(error.kind.value, str(error))
        return replace(
            previous,
            is_refreshing=False,
            last_error=error.kind,
            last_error_message=str(error),
            refresh_count=previous.refresh_count + 1,
            failure_count=previous.failure_count + 1,
        )

    def _publish(self, state: EngineState) -> None:
        with self._lock:
            sinks = list(self._sinks)
        if not sinks:
            return
        view = EngineView.from_state(state)
        for sink in sinks:
            try:
                sink.publish(view)
            except Exception as exc:
                self.human_logger.error(f"presentation sink {type(sink).__name__} failed: {exc}")
