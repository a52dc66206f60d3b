"""Configuration loader for the Bus ETA Notifier."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Any

from dotenv import load_dotenv
import yaml

DEFAULT_USER_AGENT = "bus-eta-notifier/0.1"
NOTIFIER_BACKENDS = ("desktop", "log")


@dataclass(frozen=True)
class EtaConfig:
    """ETA source and polling configuration."""

    base_url: str
    robots_url: str
    user_agent: str
    poll_interval_seconds: float
    cache_ttl_seconds: float
    timeout_seconds: float


@dataclass(frozen=True)
class NotifierConfig:
    """Notification delivery configuration."""

    backend: str
    app_name: str


@dataclass(frozen=True)
class RegistryConfig:
    """Where the monitored stop list is stored."""

    path: str


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""

    level: str
    log_dir: str


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    eta: EtaConfig
    notifier: NotifierConfig
    registry: RegistryConfig
    log: LoggingConfig


def _require_key(mapping: dict[str, Any], key: str, context: str) -> Any:
    if key not in mapping:
        raise ValueError(f"Missing required key '{key}' in {context} config")
    return mapping[key]


def _require_section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = _require_key(data, name, name)
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' config must be a mapping")
    return section


def _positive_number(mapping: dict[str, Any], key: str, context: str) -> float:
    value = _require_key(mapping, key, context)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"'{key}' in {context} config must be a positive number")
    return float(value)


def load_config(path: str = "config/config.yaml") -> AppConfig:
    """Load application configuration from a YAML file."""
    load_dotenv()
    user_agent = os.environ.get("BUS_ETA_USER_AGENT", "").strip() or DEFAULT_USER_AGENT
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise ValueError(f"Config file not found: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the top level")

    eta_section = _require_section(data, "eta")
    notifier_section = _require_section(data, "notifier")
    registry_section = _require_section(data, "registry")
    logging_section = _require_section(data, "logging")

    eta = EtaConfig(
        base_url=_require_key(eta_section, "base_url", "eta"),
        robots_url=_require_key(eta_section, "robots_url", "eta"),
        user_agent=user_agent,
        poll_interval_seconds=_positive_number(eta_section, "poll_interval_seconds", "eta"),
        cache_ttl_seconds=_positive_number(eta_section, "cache_ttl_seconds", "eta"),
        timeout_seconds=_positive_number(eta_section, "timeout_seconds", "eta"),
    )

    backend = _require_key(notifier_section, "backend", "notifier")
    if backend not in NOTIFIER_BACKENDS:
        raise ValueError(f"'backend' in notifier config must be one of {', '.join(NOTIFIER_BACKENDS)}")
    notifier = NotifierConfig(
        backend=backend,
        app_name=notifier_section.get("app_name", "Bus ETA Notifier"),
    )

    registry = RegistryConfig(path=_require_key(registry_section, "path", "registry"))

    logging = LoggingConfig(
        level=_require_key(logging_section, "level", "logging"),
        log_dir=_require_key(logging_section, "log_dir", "logging"),
    )

    return AppConfig(eta=eta, notifier=notifier, registry=registry, log=logging)
