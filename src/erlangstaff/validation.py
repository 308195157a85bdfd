from __future__ import annotations

import math
import re
from typing import TYPE_CHECKING, Any, List, Optional, Sequence

import pandas as pd

if TYPE_CHECKING:
    from .shrinkage import ShrinkageConfig
    from .staffing import CallCenterParams, ForecastPoint, ServiceParameters


# 24-hour clock; the hour may be written with one digit ("9:30")
TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


class ForecastValidationError(ValueError):
    """Raised when a forecast is rejected before any staffing is calculated."""

    def __init__(self, errors: Sequence[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def _as_number(value: Any) -> Optional[float]:
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(out):
        return None
    return out


def is_valid_time(label: Any) -> bool:
    return isinstance(label, str) and TIME_PATTERN.match(label) is not None


def validate_forecast(points: Sequence["ForecastPoint"]) -> List[str]:
    """
    Structural checks on a forecast before calculation.
    Returns human-readable messages; an empty list means the forecast is usable.
    """
    errors: List[str] = []

    if len(points) == 0:
        errors.append("Forecast must contain at least one interval")
        return errors

    for index, point in enumerate(points):
        calls = _as_number(point.calls)
        if calls is None:
            errors.append(f"Interval {point.time}: calls must be a number")
        elif calls < 0:
            errors.append(f"Interval {point.time}: calls cannot be negative")

        if point.aht is not None:
            aht = _as_number(point.aht)
            if aht is None or aht <= 0:
                errors.append(f"Interval {point.time}: AHT must be greater than zero")

        if not is_valid_time(point.time):
            errors.append(f"Interval {index + 1}: invalid time format {point.time!r} (use HH:MM)")

    seen = set()
    reported = set()
    for point in points:
        if point.time in seen and point.time not in reported:
            errors.append(f"Duplicate interval time: {point.time}")
            reported.add(point.time)
        seen.add(point.time)

    return errors


def validate_service_parameters(params: "ServiceParameters") -> List[str]:
    errors: List[str] = []

    aht = _as_number(params.default_aht)
    if aht is None or aht <= 0:
        errors.append("Default AHT must be greater than zero")

    sl = _as_number(params.service_level)
    if sl is None or sl <= 0 or sl > 100:
        errors.append("Service level target must be between 0 (exclusive) and 100")

    tat = _as_number(params.target_answer_time)
    if tat is None or tat < 0:
        errors.append("Target answer time cannot be negative")

    if params.abandonment_rate is not None:
        ab = _as_number(params.abandonment_rate)
        if ab is None or ab < 0 or ab > 100:
            errors.append("Abandonment rate must be between 0 and 100")

    return errors


def validate_shrinkage(config: "ShrinkageConfig") -> List[str]:
    errors: List[str] = []
    for name, pct in config.components():
        value = _as_number(pct)
        if value is None or value < 0 or value > 100:
            errors.append(f"Shrinkage '{name or '<unnamed>'}' must be between 0 and 100")
    for factor in config.custom_factors:
        if not str(factor.name).strip():
            errors.append("Custom shrinkage factors need a name")
    return errors


def validate_call_center_params(params: "CallCenterParams") -> List[str]:
    errors: List[str] = []

    calls = _as_number(params.calls_per_hour)
    if calls is None or calls <= 0:
        errors.append("Calls per hour must be greater than zero")

    aht = _as_number(params.average_handle_time)
    if aht is None or aht <= 0:
        errors.append("Average handle time must be greater than zero")

    sl = _as_number(params.service_level)
    if sl is None or sl <= 0 or sl > 100:
        errors.append("Service level target must be between 0 (exclusive) and 100")

    tat = _as_number(params.target_answer_time)
    if tat is None or tat < 0:
        errors.append("Target answer time cannot be negative")

    ab = _as_number(params.abandonment_rate)
    if ab is None or ab < 0 or ab > 100:
        errors.append("Abandonment rate must be between 0 and 100")

    return errors


def flag_forecast_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Row-level flags for a tabular forecast (columns: time, calls, optional aht).
    Returns a copy with boolean flag_* columns; nothing is dropped or fixed.
    """
    missing = {"time", "calls"} - set(df.columns)
    if missing:
        raise ValueError(f"Forecast dataframe missing required columns: {sorted(missing)}")

    out = df.copy()
    calls = pd.to_numeric(out["calls"], errors="coerce")
    times = out["time"].astype(str).str.strip()

    out["flag_calls_invalid"] = calls.isna()
    out["flag_calls_negative"] = calls < 0

    if "aht" in out.columns:
        aht = pd.to_numeric(out["aht"], errors="coerce")
        out["flag_aht_nonpositive"] = aht.notna() & (aht <= 0)
    else:
        out["flag_aht_nonpositive"] = False

    out["flag_time_invalid"] = ~times.map(is_valid_time).astype(bool)
    out["flag_time_duplicate"] = times.duplicated(keep=False)
    return out


__all__ = [
    "TIME_PATTERN",
    "ForecastValidationError",
    "is_valid_time",
    "validate_forecast",
    "validate_service_parameters",
    "validate_shrinkage",
    "validate_call_center_params",
    "flag_forecast_frame",
]
