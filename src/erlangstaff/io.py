from __future__ import annotations

import os
from typing import IO, List, Sequence, Union

import pandas as pd

from .intervals import sort_forecast
from .staffing import ForecastPoint, IntervalResult, result_to_dict

REQUIRED_COLUMNS = ["time", "calls"]
OPTIONAL_COLUMNS = ["aht"]

RESULT_COLUMNS = [
    "time",
    "calls",
    "traffic",
    "required_agents",
    "required_agents_with_shrinkage",
    "service_level",
    "average_wait_time",
    "probability_of_waiting",
    "occupancy_rate",
]


def _normalize_forecast_frame(df: pd.DataFrame) -> pd.DataFrame:
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}. Required: {REQUIRED_COLUMNS}")

    out = df.copy()
    out["time"] = out["time"].astype(str).str.strip()
    out["calls"] = pd.to_numeric(out["calls"], errors="coerce")
    if out["calls"].isna().any():
        bad = out.index[out["calls"].isna()].tolist()[:10]
        raise ValueError(f"calls must be numeric. Example bad rows: {bad}")

    if "aht" in out.columns:
        out["aht"] = pd.to_numeric(out["aht"], errors="coerce")
    else:
        out["aht"] = float("nan")

    return out.reset_index(drop=True)


def forecast_from_frame(df: pd.DataFrame) -> List[ForecastPoint]:
    """
    Converts a tabular forecast into ForecastPoints sorted by time.
    Blank aht cells fall back to the scenario default (aht=None).
    """
    out = _normalize_forecast_frame(df)
    points = [
        ForecastPoint(
            time=str(row.time),
            calls=float(row.calls),
            aht=None if pd.isna(row.aht) else float(row.aht),
        )
        for row in out.itertuples(index=False)
    ]
    # Same ordering as intervals.sort_forecast: HH:MM chronologically, other labels last
    return sort_forecast(points)


def read_forecast_csv(file: Union[str, os.PathLike, IO[bytes], IO[str]]) -> List[ForecastPoint]:
    """
    Reads an interval forecast CSV.
    Expected columns:
      time (HH:MM)
      calls (numeric, calls per hour)
      aht (optional, seconds; blank = scenario default)
    """
    df = pd.read_csv(file, dtype={"time": str})
    return forecast_from_frame(df)


def forecast_to_frame(points: Sequence[ForecastPoint]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "time": [p.time for p in points],
            "calls": [float(p.calls) for p in points],
            "aht": [float(p.aht) if p.aht is not None else float("nan") for p in points],
        }
    )


def results_to_frame(results: Sequence[IntervalResult]) -> pd.DataFrame:
    """One row per interval, in the order given."""
    rows = [result_to_dict(r) for r in results]
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


__all__ = [
    "REQUIRED_COLUMNS",
    "OPTIONAL_COLUMNS",
    "RESULT_COLUMNS",
    "forecast_from_frame",
    "read_forecast_csv",
    "forecast_to_frame",
    "results_to_frame",
]
