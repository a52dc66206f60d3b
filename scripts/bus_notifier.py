"""Command-line entry point for the Bus ETA Notifier."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from loguru import logger

from src.app import COMMAND_HELP, DEFAULT_THRESHOLD_MINUTES, NotifierApp, build_app, handle_command
from src.config import load_config
from src.data.registry import MonitorConfig
from src.log import setup_logging


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Alert before a bus reaches your stop")
    parser.add_argument("--config", default="config/config.yaml", help="Path to the YAML config")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Add a stop/route to monitor")
    add.add_argument("stop")
    add.add_argument("route")
    add.add_argument("--threshold", type=int, default=DEFAULT_THRESHOLD_MINUTES, help="Minutes before arrival")

    remove = sub.add_parser("remove", help="Remove a monitored stop")
    remove.add_argument("id")

    sub.add_parser("list", help="List monitored stops")
    sub.add_parser("test-notify", help="Send a sample notification")
    sub.add_parser("run", help="Monitor all stops until 'quit'")
    return parser.parse_args()


def _run_interactive(app: NotifierApp) -> None:
    app.supervisor.start()
    print(COMMAND_HELP, flush=True)
    try:
        for line in sys.stdin:
            reply = handle_command(app, line)
            if reply is None:
                break
            if reply:
                print(reply, flush=True)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        app.supervisor.shutdown()


def main() -> int:
    args = _parse_args()
    try:
        config = load_config(args.config)
    except ValueError as exc:
        print(f"Config error: {exc}", file=sys.stderr)
        return 1
    setup_logging(config.log)
    app = build_app(config)

    if args.command == "add":
        entry = app.registry.add(MonitorConfig.create(args.stop, args.route, args.threshold))
        print(entry.id)
    elif args.command == "remove":
        try:
            app.registry.remove(args.id)
        except KeyError:
            print(f"Unknown monitored stop {args.id}", file=sys.stderr)
            return 1
    elif args.command == "list":
        for entry in app.registry.entries():
            print(f"{entry.id}  stop {entry.stop}  route {entry.route}  notify before {entry.notification_threshold} min")
    elif args.command == "test-notify":
        app.notifier.notify("1", "1", 1)
    elif args.command == "run":
        _run_interactive(app)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
