from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from src.data.registry import ADDED, REMOVED, JsonFileRegistry, MonitorConfig


def test_create_builds_id_and_clamps_threshold() -> None:
    config = MonitorConfig.create(" 1234 ", "22", 0)

    assert config.stop == "1234"
    assert config.route == "22"
    assert config.notification_threshold == 1
    assert config.id.endswith("-1234-22")


def test_create_requires_stop_and_route() -> None:
    with pytest.raises(ValueError):
        MonitorConfig.create("", "22", 5)


def test_from_dict_uses_persisted_keys() -> None:
    config = MonitorConfig.from_dict({"id": "a", "stop": "1", "route": "2", "notificationTime": 7})

    assert config == MonitorConfig(id="a", stop="1", route="2", notification_threshold=7)
    assert config.to_dict()["notificationTime"] == 7


def test_from_dict_rejects_missing_fields() -> None:
    with pytest.raises(ValueError):
        MonitorConfig.from_dict({"id": "a", "stop": "1"})


def test_load_missing_file_is_empty(tmp_path) -> None:
    registry = JsonFileRegistry(tmp_path / "stops.json")

    assert registry.load() == []


def test_add_persists_in_order(tmp_path) -> None:
    path = tmp_path / "data" / "stops.json"
    registry = JsonFileRegistry(path)
    first = MonitorConfig(id="a", stop="1", route="2", notification_threshold=5)
    second = MonitorConfig(id="b", stop="3", route="4", notification_threshold=3)

    registry.add(first)
    registry.add(second)

    stored = json.loads(path.read_text())
    assert [item["id"] for item in stored] == ["a", "b"]
    reloaded = JsonFileRegistry(path)
    assert reloaded.load() == [first, second]


def test_add_duplicate_id_raises(tmp_path) -> None:
    registry = JsonFileRegistry(tmp_path / "stops.json")
    config = MonitorConfig(id="a", stop="1", route="2", notification_threshold=5)
    registry.add(config)

    with pytest.raises(ValueError):
        registry.add(config)


def test_remove_unknown_raises(tmp_path) -> None:
    registry = JsonFileRegistry(tmp_path / "stops.json")

    with pytest.raises(KeyError):
        registry.remove("missing")


def test_listeners_receive_changes(tmp_path) -> None:
    registry = JsonFileRegistry(tmp_path / "stops.json")
    events = []
    registry.subscribe(events.append)
    config = MonitorConfig(id="a", stop="1", route="2", notification_threshold=5)

    registry.add(config)
    registry.remove("a")
    registry.unsubscribe(events.append)
    registry.add(config)

    assert [(event.kind, event.config.id) for event in events] == [(ADDED, "a"), (REMOVED, "a")]
    assert registry.get("a") == config


def test_load_rejects_malformed_file(tmp_path) -> None:
    path = tmp_path / "stops.json"
    path.write_text("{not json")

    with pytest.raises(ValueError):
        JsonFileRegistry(path).load()


def test_load_rejects_non_list(tmp_path) -> None:
    path = tmp_path / "stops.json"
    path.write_text(json.dumps({"id": "a"}))

    with pytest.raises(ValueError):
        JsonFileRegistry(path).load()


def test_failed_save_on_remove_keeps_entry_and_sends_no_event(tmp_path) -> None:
    path = tmp_path / "stops.json"
    registry = JsonFileRegistry(path)
    config = MonitorConfig(id="a", stop="1", route="2", notification_threshold=5)
    registry.add(config)
    events = []
    registry.subscribe(events.append)

    with patch.object(JsonFileRegistry, "_save_locked", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            registry.remove("a")

    assert registry.entries() == [config]
    assert events == []
    assert [item["id"] for item in json.loads(path.read_text())] == ["a"]


def test_failed_save_on_add_leaves_registry_unchanged(tmp_path) -> None:
    registry = JsonFileRegistry(tmp_path / "stops.json")
    events = []
    registry.subscribe(events.append)

    with patch.object(JsonFileRegistry, "_save_locked", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            registry.add(MonitorConfig(id="a", stop="1", route="2", notification_threshold=5))

    assert registry.entries() == []
    assert events == []
    assert not (tmp_path / "stops.json").exists()


def test_save_leaves_no_temp_file(tmp_path) -> None:
    registry = JsonFileRegistry(tmp_path / "stops.json")

    registry.add(MonitorConfig(id="a", stop="1", route="2", notification_threshold=5))

    assert sorted(p.name for p in tmp_path.iterdir()) == ["stops.json"]
