from __future__ import annotations

import pytest

from src.logic.trend import Trend, classify


def test_first_sample_is_no_trend() -> None:
    assert classify(None, 2, 5) is Trend.NONE


def test_rising_eta_means_vehicle_passed() -> None:
    assert classify(3, 10, 5) is Trend.VEHICLE_PASSED


def test_rising_eta_below_threshold_still_passed() -> None:
    assert classify(1, 2, 5) is Trend.VEHICLE_PASSED


def test_falling_under_threshold_is_imminent() -> None:
    assert classify(6, 3, 5) is Trend.ARRIVAL_IMMINENT


@pytest.mark.parametrize(
    ("previous", "current"),
    [
        (8, 6),
        (6, 5),
        (3, 3),
        (0, 0),
    ],
)
def test_no_trend_cases(previous: int, current: int) -> None:
    assert classify(previous, current, 5) is Trend.NONE


def test_drop_to_zero_is_imminent() -> None:
    assert classify(1, 0, 1) is Trend.ARRIVAL_IMMINENT
