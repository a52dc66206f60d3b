"""CTA Bus Tracker ETA client."""

from __future__ import annotations

import re
import threading
import time
from typing import Protocol

import requests
from loguru import logger

CTA_BASE_URL = "www.ctabustracker.com/bustime/wireless/html"
CTA_ROBOTS_URL = "https://www.ctabustracker.com/bustime/wireless/robots.txt"
ROBOTS_ALLOW_ALL = "User-agent: *\nDisallow:"

ROUTE_LABEL_RE = re.compile(r'<strong class="larger">#([0-9]+)&nbsp;</strong>')
DUE_LABEL_RE = re.compile(r'<strong class="larger">DUE</strong>')
MIN_LABEL_RE = re.compile(r'<strong class="larger">([0-9]+)&nbsp;MIN</strong>')

DUE_MINUTES = 1


class PollFailure(Exception):
    """Raised when an ETA lookup fails for any reason."""


class EtaSource(Protocol):
    """Anything that can answer "minutes until the next bus" for a stop/route."""

    def get_eta(self, stop: str, route: str) -> int:
        ...


def build_eta_url(base_url: str, route: str, stop: str) -> str:
    return (
        f"https://{base_url}/eta.jsp?route={route}&direction=---&displaydirection=---"
        f"&stop={stop}&findstop=on&selectedRtpiFeeds=&id={stop}"
    )


def parse_eta(html: str, route: str) -> int:
    """Extract the ETA in minutes for ``route`` from a Bus Tracker page."""
    found = None
    for match in ROUTE_LABEL_RE.finditer(html):
        if match.group(1) == route:
            found = match
            break

    if found is None:
        raise PollFailure(f"Route {route} not found in response.")

    remainder = html[found.end():]
    if DUE_LABEL_RE.search(remainder):
        return DUE_MINUTES

    minutes = MIN_LABEL_RE.search(remainder)
    if minutes is None:
        raise PollFailure("No ETA found.")
    try:
        return int(minutes.group(1))
    except ValueError as exc:
        raise PollFailure("Cannot parse ETA.") from exc


class CtaBusTrackerClient:
    """Scrapes ETAs from the CTA Bus Tracker wireless pages using requests."""

    def __init__(
        self,
        base_url: str = CTA_BASE_URL,
        robots_url: str = CTA_ROBOTS_URL,
        user_agent: str = "bus-eta-notifier",
        timeout_seconds: float = 10,
        cache_ttl_seconds: float = 1.0,
        check_robots: bool = True,
    ) -> None:
        self._base_url = base_url
        self._robots_url = robots_url
        self._headers = {"User-Agent": user_agent}
        self._timeout_seconds = timeout_seconds
        self._cache_ttl_seconds = cache_ttl_seconds
        self._check_robots = check_robots
        self._robots_result: str | None = None
        self._robots_checked = False
        self._cache: dict[tuple[str, str], tuple[float, int]] = {}
        self._lock = threading.Lock()
        self._robots_lock = threading.Lock()

    def get_eta(self, stop: str, route: str) -> int:
        """Return minutes until the next ``route`` bus reaches ``stop``."""
        key = (stop, route)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            stored_at, eta = cached
            if time.monotonic() - stored_at < self._cache_ttl_seconds:
                logger.debug(f"Cache hit for stop {stop}, route {route}")
                return eta

        self._ensure_robots_allowed()
        html = self._get_text(build_eta_url(self._base_url, route, stop))
        eta = parse_eta(html, route)
        with self._lock:
            self._cache[key] = (time.monotonic(), eta)
        logger.debug(f"Fetched ETA for stop {stop}, route {route}: {eta} min")
        return eta

    def _ensure_robots_allowed(self) -> None:
        if not self._check_robots:
            return
        # Held across the fetch so concurrent first polls share one robots.txt check.
        with self._robots_lock:
            if not self._robots_checked:
                self._robots_result = self._fetch_robots_verdict()
                self._robots_checked = True
            error = self._robots_result
        if error is not None:
            raise PollFailure(error)

    def _fetch_robots_verdict(self) -> str | None:
        logger.info(f"Checking robots.txt at {self._robots_url}")
        try:
            response = requests.get(
                self._robots_url, headers=self._headers, timeout=self._timeout_seconds
            )
        except requests.RequestException as exc:
            return f"Failed to fetch robots.txt: {exc}"

        if not 200 <= response.status_code < 300:
            logger.info(f"No robots.txt found (status {response.status_code}), assuming crawling is allowed")
            return None
        if response.text != ROBOTS_ALLOW_ALL:
            return "Please check robots.txt manually"
        return None

    def _get_text(self, url: str) -> str:
        try:
            response = requests.get(url, headers=self._headers, timeout=self._timeout_seconds)
        except requests.RequestException as exc:
            raise PollFailure(f"Bus Tracker request failed: {exc}") from exc

        if response.status_code != 200:
            raise PollFailure(f"Bus Tracker request failed: Status {response.status_code}")
        return response.text


__all__ = [
    "CtaBusTrackerClient",
    "EtaSource",
    "PollFailure",
    "build_eta_url",
    "parse_eta",
]
