from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from src.app import COMMAND_HELP, build_app, format_snapshot, handle_command
from src.config import AppConfig, EtaConfig, LoggingConfig, NotifierConfig, RegistryConfig
from src.data.registry import MonitorConfig
from src.logic.monitor import Lifecycle, MonitorSnapshot


@pytest.fixture()
def app_config(tmp_path) -> AppConfig:
    return AppConfig(
        eta=EtaConfig(
            base_url="example.com/html",
            robots_url="https://example.com/robots.txt",
            user_agent="test",
            poll_interval_seconds=60,
            cache_ttl_seconds=1,
            timeout_seconds=1,
        ),
        notifier=NotifierConfig(backend="log", app_name="Test"),
        registry=RegistryConfig(path=str(tmp_path / "stops.json")),
        log=LoggingConfig(level="INFO", log_dir=str(tmp_path / "logs")),
    )


@pytest.fixture()
def app(app_config: AppConfig):
    source = MagicMock()
    source.get_eta.return_value = 8
    app = build_app(app_config, source=source, notifier=MagicMock(), failures=MagicMock())
    app.supervisor.start()
    yield app
    app.supervisor.shutdown()


def test_add_command_spawns_enabled_monitor(app) -> None:
    reply = handle_command(app, "add 1234 22 4")

    entry_id = reply.split()[-1]
    monitor = app.supervisor.monitor(entry_id)
    assert monitor.enabled is True
    assert monitor.config.notification_threshold == 4


def test_toggle_and_arrived_commands(app) -> None:
    entry_id = handle_command(app, "add 1234 22").split()[-1]

    assert handle_command(app, f"arrived {entry_id}") == f"{entry_id} disabled"
    assert handle_command(app, f"toggle {entry_id}") == f"{entry_id} enabled"


def test_remove_command_destroys_monitor(app) -> None:
    entry_id = handle_command(app, "add 1234 22").split()[-1]
    monitor = app.supervisor.monitor(entry_id)

    assert handle_command(app, f"remove {entry_id}") == f"Removed {entry_id}"
    assert monitor.is_stopped
    assert app.registry.entries() == []


def test_unknown_id_and_bad_input(app) -> None:
    assert handle_command(app, "toggle nope") == "Unknown monitored stop nope"
    assert handle_command(app, "add 1234 22 soon").startswith("Error:")
    assert handle_command(app, "dance") == COMMAND_HELP
    assert handle_command(app, "status") == "No monitored stops"
    assert handle_command(app, "quit") is None


def test_format_snapshot() -> None:
    config = MonitorConfig(id="a", stop="1234", route="22", notification_threshold=5)

    loading = format_snapshot(MonitorSnapshot(config, True, None, Lifecycle.ACTIVE))
    due = format_snapshot(MonitorSnapshot(config, False, 0, Lifecycle.ACTIVE))

    assert "loading" in loading and "[enabled]" in loading
    assert "DUE" in due and "[disabled]" in due
