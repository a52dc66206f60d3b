"""First-order ETA trend classification."""

from __future__ import annotations

from enum import Enum


class Trend(Enum):
    """Outcome of comparing two consecutive ETA samples."""

    NONE = "none"
    ARRIVAL_IMMINENT = "arrival_imminent"
    VEHICLE_PASSED = "vehicle_passed"


def classify(previous: int | None, current: int, threshold: int) -> Trend:
    """Classify the move from ``previous`` to ``current`` minutes.

    A rising ETA means the tracked bus has come and gone. A falling ETA that is
    now under ``threshold`` is the only case worth an alert. Equal samples are
    not a trend.
    """
    if previous is None:
        return Trend.NONE
    if current > previous:
        return Trend.VEHICLE_PASSED
    if current < previous and current < threshold:
        return Trend.ARRIVAL_IMMINENT
    return Trend.NONE


__all__ = ["Trend", "classify"]
