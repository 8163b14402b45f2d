"""Command-line interface for the market signal engine."""

from __future__ import annotations

import argparse
import sys

from marketsignal.config import DATA_SOURCES, Settings
from marketsignal.errors import ConfigError
from marketsignal.runtime import run


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        description="Periodically refresh market metrics and print a BUY/SELL/HOLD signal"
    )
    parser.add_argument("--data-source", choices=list(DATA_SOURCES), help="Snapshot source")
    parser.add_argument(
        "--interval-seconds",
        type=float,
        help="Seconds between scheduled refreshes",
    )
    parser.add_argument("--metrics-path", type=str, help="JSON metrics file for --data-source file")
    parser.add_argument("--history-path", type=str, help="Optional CSV price history file")
    parser.add_argument("--url", type=str, help="Metrics endpoint for --data-source http")
    parser.add_argument("--events-dir", type=str, help="Run outputs directory")
    parser.add_argument("--no-events", action="store_true", help="Do not write events.jsonl")
    parser.add_argument("--seed", type=int, help="Random seed for the simulated source")
    parser.add_argument("--log-level", type=str, help="Console log level")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Perform a single refresh, print the signal, then exit",
    )
    return parser


def apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Apply CLI values onto environment-derived settings."""
    overrides: dict[str, object] = {}
    if args.data_source:
        overrides["data_source"] = args.data_source
    if args.interval_seconds is not None:
        overrides["refresh_interval_seconds"] = args.interval_seconds
    if args.metrics_path:
        overrides["metrics_path"] = args.metrics_path
    if args.history_path:
        overrides["history_path"] = args.history_path
    if args.url:
        overrides["provider_url"] = args.url
    if args.events_dir:
        overrides["events_dir"] = args.events_dir
    if args.no_events:
        overrides["write_events"] = False
    if args.seed is not None:
        overrides["simulated_seed"] = args.seed
    if args.log_level:
        overrides["log_level"] = args.log_level.strip().upper()
    return settings.with_overrides(**overrides)


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = apply_cli_overrides(Settings.from_env(), args)
    except ConfigError as exc:
        print(f"Configuration error: {exc}")
        return 2
    return run(settings, once=args.once)


if __name__ == "__main__":
    sys.exit(main())
