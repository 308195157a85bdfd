# src/erlangstaff/intervals.py
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .staffing import ForecastPoint
from .validation import is_valid_time

MINUTES_PER_DAY = 1440


@dataclass(frozen=True)
class HoursOfOperation:
    """
    Open window for one day. start_time/end_time are "HH:MM" strings,
    end-exclusive. Leaving both unset means the operation runs 24h.

    Overnight windows are supported:
      start_time="22:00", end_time="06:00"
      => open from 22:00..24:00 and 00:00..06:00.
    """

    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @property
    def is_24h(self) -> bool:
        return self.start_time is None and self.end_time is None


@dataclass(frozen=True)
class TimeInterval:
    start: str
    end: str
    duration: int  # minutes


# -----------------------------
# Helpers
# -----------------------------
def time_to_minutes(t: str) -> int:
    hh, mm = t.split(":")
    return int(hh) * 60 + int(mm)


def minutes_to_time(minutes: int) -> str:
    minutes = int(minutes) % MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _check_interval_minutes(interval_minutes: int) -> None:
    if interval_minutes <= 0 or (MINUTES_PER_DAY % interval_minutes) != 0:
        raise ValueError("interval_minutes must be > 0 and divide 1440 evenly (e.g., 15, 30, 60).")


def _open_window(hours: HoursOfOperation) -> tuple[int, int]:
    """Returns (start, end) in minutes since 00:00; end may pass midnight."""
    if hours.is_24h:
        return 0, MINUTES_PER_DAY
    if not hours.start_time or not hours.end_time:
        raise ValueError("Specific-hours operations need both start_time and end_time")
    for t in (hours.start_time, hours.end_time):
        if not is_valid_time(t):
            raise ValueError(f"Invalid time {t!r}; use HH:MM")

    start_m = time_to_minutes(hours.start_time)
    end_m = time_to_minutes(hours.end_time)
    if end_m <= start_m:
        end_m += MINUTES_PER_DAY
    return start_m, end_m


# -----------------------------
# Interval grids
# -----------------------------
def generate_time_intervals(hours: HoursOfOperation, interval_minutes: int) -> List[TimeInterval]:
    """
    Interval grid for the open window. A window that does not divide evenly
    ends with a shorter interval at the closing time.
    """
    _check_interval_minutes(interval_minutes)
    start_m, end_m = _open_window(hours)

    intervals: List[TimeInterval] = []
    current = start_m
    while current < end_m:
        nxt = min(current + interval_minutes, end_m)
        intervals.append(TimeInterval(start=minutes_to_time(current), end=minutes_to_time(nxt), duration=nxt - current))
        current = nxt
    return intervals


def intraday_time_grid(interval_minutes: int) -> pd.DataFrame:
    """
    Returns a full-day HH:MM grid for the chosen interval length.
    Example: 15-min => 96 rows from 00:00..23:45
    """
    _check_interval_minutes(interval_minutes)
    times = pd.date_range("2000-01-01 00:00:00", periods=MINUTES_PER_DAY // interval_minutes, freq=f"{interval_minutes}min")
    return pd.DataFrame({"time": times.strftime("%H:%M")})


def interval_label(interval: TimeInterval) -> str:
    if interval.duration < 60:
        return f"{interval.start} - {interval.end}"
    return f"{interval.start}h"


def total_operation_hours(hours: HoursOfOperation) -> float:
    start_m, end_m = _open_window(hours)
    return (end_m - start_m) / 60.0


# -----------------------------
# Forecast shaping
# -----------------------------
def create_empty_forecast(intervals: Sequence[TimeInterval]) -> List[ForecastPoint]:
    return [ForecastPoint(time=i.start, calls=0) for i in intervals]


def sort_forecast(points: Sequence[ForecastPoint]) -> List[ForecastPoint]:
    """Chronological order; labels that are not HH:MM sort last, as given."""

    def key(p: ForecastPoint) -> tuple[int, int]:
        if is_valid_time(p.time):
            return 0, time_to_minutes(p.time)
        return 1, 0

    return sorted(points, key=key)


def fill_missing_intervals(
    points: Sequence[ForecastPoint],
    hours: HoursOfOperation,
    interval_minutes: int,
) -> List[ForecastPoint]:
    """One point per expected interval, in grid order; gaps get zero calls."""
    by_time: Dict[str, ForecastPoint] = {}
    for p in points:
        by_time.setdefault(p.time, p)

    return [
        by_time.get(i.start, ForecastPoint(time=i.start, calls=0))
        for i in generate_time_intervals(hours, interval_minutes)
    ]


def validate_forecast_alignment(
    points: Sequence[ForecastPoint],
    hours: HoursOfOperation,
    interval_minutes: int,
) -> List[str]:
    errors: List[str] = []
    expected = generate_time_intervals(hours, interval_minutes)
    expected_times = {i.start for i in expected}
    by_time = {p.time: p for p in points}

    for interval in expected:
        point = by_time.get(interval.start)
        if point is None:
            errors.append(f"Interval {interval.start} is missing from the forecast")
            continue
        if point.calls < 0:
            errors.append(f"Interval {point.time}: calls cannot be negative")
        if point.aht is not None and point.aht <= 0:
            errors.append(f"Interval {point.time}: AHT must be greater than zero")

    for point in points:
        if point.time not in expected_times:
            errors.append(f"Interval {point.time} is not expected for these hours of operation")

    return errors


def _is_gap(point: ForecastPoint) -> bool:
    return point.calls is None or point.calls == 0


def interpolate_missing_calls(points: Sequence[ForecastPoint]) -> List[ForecastPoint]:
    """
    Linear interpolation of zero-call intervals between two non-zero
    neighbours. Leading and trailing gaps are left at zero.
    """
    result = list(points)

    for i, point in enumerate(result):
        if not _is_gap(point):
            continue

        prev_idx = i - 1
        while prev_idx >= 0 and _is_gap(result[prev_idx]):
            prev_idx -= 1
        next_idx = i + 1
        while next_idx < len(result) and _is_gap(result[next_idx]):
            next_idx += 1

        if prev_idx >= 0 and next_idx < len(result):
            prev_calls = float(result[prev_idx].calls)
            next_calls = float(result[next_idx].calls)
            position = (i - prev_idx) / (next_idx - prev_idx)
            value = prev_calls + (next_calls - prev_calls) * position
            result[i] = replace(point, calls=int(math.floor(value + 0.5)))

    return result


def generate_sample_forecast(
    interval_minutes: int = 60,
    *,
    seed: Optional[Union[int, np.random.Generator]] = None,
) -> List[ForecastPoint]:
    """
    Typical 08:00-18:00 day: morning peak 09-11 (top at 10), afternoon peak
    14-16 (top at 15), plus +/-5 calls of noise.
    """
    if interval_minutes <= 0 or 60 % interval_minutes != 0:
        raise ValueError("interval_minutes must divide an hour evenly (e.g., 15, 30, 60).")

    rng = seed if isinstance(seed, np.random.Generator) else np.random.default_rng(seed)

    points: List[ForecastPoint] = []
    for hour in range(8, 18):
        for minute in range(0, 60, interval_minutes):
            calls = 20
            if 9 <= hour <= 11:
                calls += 30
            if 14 <= hour <= 16:
                calls += 25
            if hour == 10:
                calls += 20
            if hour == 15:
                calls += 15

            calls += int(math.floor(rng.random() * 10 - 5))
            points.append(ForecastPoint(time=f"{hour:02d}:{minute:02d}", calls=max(0, calls)))

    return points


__all__ = [
    "MINUTES_PER_DAY",
    "HoursOfOperation",
    "TimeInterval",
    "time_to_minutes",
    "minutes_to_time",
    "generate_time_intervals",
    "intraday_time_grid",
    "interval_label",
    "total_operation_hours",
    "create_empty_forecast",
    "sort_forecast",
    "fill_missing_intervals",
    "validate_forecast_alignment",
    "interpolate_missing_calls",
    "generate_sample_forecast",
]
