from __future__ import annotations

import dataclasses
import threading
import time
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from marketsignal.domain.models import ErrorKind, MarketSnapshot, Signal
from marketsignal.engine.scheduler import RefreshScheduler
from marketsignal.engine.view import EngineView
from marketsignal.errors import MalformedSnapshotError, ProviderUnavailableError
from marketsignal.logging.logger import HumanLogger


class ScriptedProvider:
    """Return or raise the queued outcomes in order, repeating the last one."""

    def __init__(self, outcomes: list[Any]) -> None:
        self.outcomes = list(outcomes)
        self.calls = 0
        self.previous_seen: list[MarketSnapshot | None] = []

    def fetch(self, previous: MarketSnapshot | None = None) -> MarketSnapshot:
        self.calls += 1
        self.previous_seen.append(previous)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class BlockingProvider:
    def __init__(self, snapshot: MarketSnapshot) -> None:
        self.snapshot = snapshot
        self.entered = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def fetch(self, previous: MarketSnapshot | None = None) -> MarketSnapshot:
        self.calls += 1
        self.entered.set()
        self.release.wait(5)
        return self.snapshot


class RecordingSink:
    def __init__(self) -> None:
        self.views: list[EngineView] = []

    def publish(self, view: EngineView) -> None:
        self.views.append(view)


class ExplodingSink:
    def publish(self, view: EngineView) -> None:
        raise RuntimeError("render failed")


def _quiet_logger() -> HumanLogger:
    return HumanLogger(level="CRITICAL")


def _scheduler(provider: Any, initial: MarketSnapshot, **kwargs: Any) -> RefreshScheduler:
    kwargs.setdefault("interval_seconds", 3600.0)
    kwargs.setdefault("human_logger", _quiet_logger())
    return RefreshScheduler(provider=provider, initial=initial, **kwargs)


def _wait_for(predicate: Any, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_successful_refresh_replaces_snapshot(make_snapshot) -> None:
    initial = make_snapshot(price=17000.0)
    fresh = make_snapshot(price=17100.0)
    provider = ScriptedProvider([fresh])
    start = datetime(2025, 1, 1, tzinfo=UTC)
    ticks = iter([start, start + timedelta(seconds=30)])
    scheduler = _scheduler(provider, initial, clock=lambda: next(ticks))

    state = scheduler.refresh_now().result(timeout=5)

    assert state.current is fresh
    assert state.last_error is None
    assert state.is_refreshing is False
    assert state.last_updated == start + timedelta(seconds=30)
    assert state.refresh_count == 1
    assert provider.previous_seen == [initial]
    assert scheduler.get_state() is state


def test_failed_refresh_keeps_last_good_snapshot(make_snapshot) -> None:
    initial = make_snapshot(price=17000.0)
    first = make_snapshot(price=17050.0)
    provider = ScriptedProvider([first, ProviderUnavailableError("rate limited")])
    scheduler = _scheduler(provider, initial)

    scheduler.refresh_now()
    applied_at = scheduler.get_state().last_updated
    scheduler.refresh_now()
    state = scheduler.get_state()

    assert provider.calls == 2
    assert state.current is first
    assert state.last_error is ErrorKind.UNAVAILABLE
    assert state.last_error_message == "rate limited"
    assert state.last_updated == applied_at
    assert state.failure_count == 1
    assert state.is_refreshing is False


def test_invalid_snapshot_is_rejected_as_malformed(make_snapshot) -> None:
    initial = make_snapshot()
    provider = ScriptedProvider([make_snapshot(rsi=140.0)])
    scheduler = _scheduler(provider, initial)

    state = scheduler.refresh_now().result(timeout=5)

    assert state.current is initial
    assert state.last_error is ErrorKind.MALFORMED


def test_provider_malformed_error_is_distinguished(make_snapshot) -> None:
    provider = ScriptedProvider([MalformedSnapshotError("historicalData must be a list")])
    scheduler = _scheduler(provider, make_snapshot())

    state = scheduler.refresh_now().result(timeout=5)

    assert state.last_error is ErrorKind.MALFORMED


def test_unexpected_provider_exception_is_absorbed(make_snapshot) -> None:
    initial = make_snapshot()
    provider = ScriptedProvider([KeyError("nasdaq")])
    scheduler = _scheduler(provider, initial)

    state = scheduler.refresh_now().result(timeout=5)

    assert state.current is initial
    assert state.last_error is ErrorKind.UNAVAILABLE
    assert "KeyError" in (state.last_error_message or "")


def test_success_after_failure_clears_error(make_snapshot) -> None:
    fresh = make_snapshot(price=17200.0)
    provider = ScriptedProvider([ProviderUnavailableError("down"), fresh])
    scheduler = _scheduler(provider, make_snapshot())

    scheduler.refresh_now()
    state = scheduler.refresh_now().result(timeout=5)

    assert state.current is fresh
    assert state.last_error is None
    assert state.last_error_message is None


def test_refresh_now_while_in_flight_does_not_fetch_again(make_snapshot) -> None:
    fresh = make_snapshot(price=17300.0)
    provider = BlockingProvider(fresh)
    scheduler = _scheduler(provider, make_snapshot())

    worker = threading.Thread(target=scheduler.refresh_now)
    worker.start()
    assert provider.entered.wait(5)
    assert scheduler.get_state().is_refreshing is True

    joined = scheduler.refresh_now()
    assert not joined.done()

    provider.release.set()
    state = joined.result(timeout=5)
    worker.join(5)

    assert provider.calls == 1
    assert state.current is fresh
    assert scheduler.get_state().is_refreshing is False


def test_sinks_see_loading_transition_before_result(make_snapshot) -> None:
    initial = make_snapshot(
        price=15000.0,
        rsi=75.0,
        volatility=25.0,
        gdp_growth=1.0,
        treasury_yield=5.0,
    )
    fresh = make_snapshot()
    sink = RecordingSink()
    scheduler = _scheduler(ScriptedProvider([fresh]), initial, sinks=[sink])

    scheduler.refresh_now()

    assert [view.is_refreshing for view in sink.views] == [True, False]
    assert sink.views[0].current is initial
    assert sink.views[0].tally.overall is Signal.SELL
    assert sink.views[1].current is fresh
    assert sink.views[1].tally.overall is Signal.BUY


def test_failing_sink_does_not_break_refresh(make_snapshot) -> None:
    fresh = make_snapshot(price=17400.0)
    recorder = RecordingSink()
    scheduler = _scheduler(
        ScriptedProvider([fresh]),
        make_snapshot(),
        sinks=[ExplodingSink(), recorder],
    )

    state = scheduler.refresh_now().result(timeout=5)

    assert state.current is fresh
    assert len(recorder.views) == 2


def test_start_refreshes_immediately_and_is_idempotent(make_snapshot) -> None:
    provider = ScriptedProvider([make_snapshot(price=17500.0)])
    scheduler = _scheduler(provider, make_snapshot())

    assert scheduler.start() is True
    assert provider.calls == 1
    assert scheduler.start() is False
    assert provider.calls == 1
    assert scheduler.is_running

    assert scheduler.stop(wait=True, timeout=5) is True
    assert scheduler.stop() is False
    assert not scheduler.is_running


def test_periodic_refresh_continues_through_failures_and_stops(make_snapshot) -> None:
    initial = make_snapshot()
    provider = ScriptedProvider([ProviderUnavailableError("offline")])
    scheduler = _scheduler(provider, initial, interval_seconds=0.01)

    scheduler.start()
    assert _wait_for(lambda: provider.calls >= 3)
    scheduler.stop(wait=True, timeout=5)
    calls_after_stop = provider.calls
    time.sleep(0.05)

    assert provider.calls == calls_after_stop
    assert scheduler.get_state().current is initial
    assert scheduler.get_state().failure_count >= 3


def test_stop_lets_in_flight_refresh_apply(make_snapshot) -> None:
    fresh = make_snapshot(price=17600.0)
    provider = BlockingProvider(fresh)
    scheduler = _scheduler(provider, make_snapshot())

    worker = threading.Thread(target=scheduler.refresh_now)
    worker.start()
    assert provider.entered.wait(5)
    scheduler.start()
    scheduler.stop()
    provider.release.set()
    worker.join(5)

    assert provider.calls == 1
    assert scheduler.get_state().current is fresh
    assert scheduler.get_state().is_refreshing is False


def test_state_cannot_be_mutated_by_callers(make_snapshot) -> None:
    scheduler = _scheduler(ScriptedProvider([make_snapshot()]), make_snapshot())
    state = scheduler.get_state()

    with pytest.raises(dataclasses.FrozenInstanceError):
        state.is_refreshing = True  # type: ignore[misc]


def test_invalid_initial_snapshot_is_rejected(make_snapshot) -> None:
    with pytest.raises(MalformedSnapshotError):
        _scheduler(ScriptedProvider([make_snapshot()]), make_snapshot(rsi=-5.0))


def test_non_positive_interval_is_rejected(make_snapshot) -> None:
    with pytest.raises(ValueError, match="interval_seconds"):
        _scheduler(ScriptedProvider([make_snapshot()]), make_snapshot(), interval_seconds=0)


def test_interrupted_refresh_publishes_restored_state(make_snapshot) -> None:
    initial = make_snapshot()
    fresh = make_snapshot(price=17700.0)
    provider = ScriptedProvider([KeyboardInterrupt(), fresh])
    sink = RecordingSink()
    scheduler = _scheduler(provider, initial, sinks=[sink])

    with pytest.raises(KeyboardInterrupt):
        scheduler.refresh_now()

    assert [view.is_refreshing for view in sink.views] == [True, False]
    assert sink.views[-1].current is initial
    assert scheduler.get_state().is_refreshing is False

    state = scheduler.refresh_now().result(timeout=5)
    assert state.current is fresh
