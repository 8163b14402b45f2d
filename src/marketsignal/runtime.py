"""Runtime wiring and operator command loop."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from pathlib import Path
from time import sleep
from uuid import uuid4

from marketsignal.config import Settings
from marketsignal.data.base import DataProvider
from marketsignal.data.file_data import FileDataProvider
from marketsignal.data.http_data import HttpDataProvider
from marketsignal.data.simulated import SimulatedDataProvider
from marketsignal.domain.events import EngineEvent, EventType
from marketsignal.domain.models import MarketSnapshot
from marketsignal.domain.validation import validate_snapshot
from marketsignal.engine.scheduler import RefreshScheduler
from marketsignal.engine.view import PresentationSink
from marketsignal.errors import DataProviderError
from marketsignal.logging.event_sink import ConsoleSink, JsonlEventSink
from marketsignal.logging.logger import HumanLogger

REFRESH_COMMANDS = {"r", "refresh"}
STATUS_COMMANDS = {"s", "status"}
QUIT_COMMANDS = {"q", "quit", "exit"}


def run(
    settings: Settings,
    once: bool = False,
    commands: Iterable[str] | None = None,
) -> int:
    """Run the signal engine until the operator quits, or for a single refresh."""
    human_logger = HumanLogger(level=settings.log_level)
    run_id = uuid4().hex

    try:
        provider = build_data_provider(settings)
        initial = load_initial_snapshot(provider)
    except (ValueError, DataProviderError) as exc:
        human_logger.error(f"cannot obtain an initial snapshot: {exc}")
        return 1

    try:
        event_sink = build_event_sink(settings, run_id)
    except OSError as exc:
        human_logger.error(f"cannot create events directory {settings.events_dir}: {exc}")
        return 1
    sinks: list[PresentationSink] = [ConsoleSink(human_logger)]
    if event_sink is not None:
        sinks.append(event_sink)
        event_sink.emit(
            EngineEvent(
                run_id=run_id,
                event_type=EventType.SESSION_STARTED,
                payload={
                    "data_source": settings.data_source,
                    "interval_seconds": settings.refresh_interval_seconds,
                    "once": once,
                },
            )
        )

    scheduler = RefreshScheduler(
        provider=provider,
        initial=initial,
        interval_seconds=settings.refresh_interval_seconds,
        sinks=sinks,
        human_logger=human_logger,
    )
    human_logger.session_started(run_id, settings.data_source, settings.refresh_interval_seconds)

    exit_code = 0
    try:
        if once:
            scheduler.refresh_now().result()
        else:
            scheduler.start()
            lines = sys.stdin if commands is None else commands
            if not serve_commands(scheduler, lines, human_logger):
                wait_until_stopped(scheduler)
    except KeyboardInterrupt:
        exit_code = 0
    except Exception as exc:
        human_logger.error(str(exc))
        exit_code = 1
    finally:
        scheduler.stop()
        if event_sink is not None:
            state = scheduler.get_state()
            event_sink.emit(
                EngineEvent(
                    run_id=run_id,
                    event_type=EventType.SESSION_STOPPED,
                    payload={
                        "exit_code": exit_code,
                        "refresh_count": state.refresh_count,
                        "failure_count": state.failure_count,
                    },
                )
            )

    return exit_code


def serve_commands(
    scheduler: RefreshScheduler,
    lines: Iterable[str],
    human_logger: HumanLogger,
) -> bool:
    """Dispatch operator commands. Returns True when the operator asked to quit."""
    for line in lines:
        command = line.strip().lower()
        if not command:
            continue
        if command in REFRESH_COMMANDS:
            scheduler.refresh_now()
        elif command in STATUS_COMMANDS:
            log_status(scheduler, human_logger)
        elif command in QUIT_COMMANDS:
            return True
        else:
            human_logger.error(f"unknown command '{command}'. Use refresh, status or quit")
    return False


def log_status(scheduler: RefreshScheduler, human_logger: HumanLogger) -> None:
    """Print the current view through the console sink."""
    ConsoleSink(human_logger).publish(scheduler.view())


def wait_until_stopped(scheduler: RefreshScheduler) -> None:
    """Block the main thread while the periodic refresh keeps running."""
    while scheduler.is_running:
        sleep(min(1.0, scheduler.interval_seconds))


def load_initial_snapshot(provider: DataProvider) -> MarketSnapshot:
    """Use the simulator seed, otherwise bootstrap with a first fetch."""
    if isinstance(provider, SimulatedDataProvider):
        return provider.seed_snapshot
    return validate_snapshot(provider.fetch(None))


def build_data_provider(settings: Settings) -> DataProvider:
    """Select data provider from settings."""
    if settings.data_source == "file":
        return FileDataProvider(
            metrics_path=settings.metrics_path,
            history_path=settings.history_path or None,
        )
    if settings.data_source == "http":
        if not settings.provider_url:
            raise ValueError("PROVIDER_URL is required for the http data source")
        return HttpDataProvider(
            url=settings.provider_url,
            timeout=settings.request_timeout_seconds,
            max_retries=settings.max_retries,
        )
    return SimulatedDataProvider(
        max_move=settings.simulated_max_move,
        latency_seconds=settings.simulated_latency_seconds,
        seed=settings.simulated_seed,
    )


def build_event_sink(settings: Settings, run_id: str) -> JsonlEventSink | None:
    """Create the per-run JSONL sink under the events directory."""
    if not settings.write_events:
        return None
    events_path = Path(settings.events_dir) / run_id / "events.jsonl"
    return JsonlEventSink(str(events_path), run_id=run_id)
