# src/erlangstaff/__init__.py
from __future__ import annotations

# -----------------------------
# Settings
# -----------------------------
from .config import DEFAULT_SETTINGS, EngineSettings, load_settings

# -----------------------------
# Erlang B / C primitives + metrics
# -----------------------------
from .erlangc import (
    average_wait_time,
    erlang_b,
    erlang_c,
    occupancy_rate,
    offered_load_erlangs,
    service_level,
)

# -----------------------------
# Shrinkage
# -----------------------------
from .shrinkage import (
    NO_SHRINKAGE,
    CustomFactor,
    ShrinkageConfig,
    shrinkage_multiplier,
    total_shrinkage_percent,
)

# -----------------------------
# Staffing engine
# -----------------------------
from .staffing import (
    CallCenterParams,
    CallCenterResults,
    ForecastPoint,
    IntervalResult,
    ScenarioSummary,
    ServiceParameters,
    StaffingPlan,
    calculate_average_service_level,
    calculate_call_center_staffing,
    calculate_interval_staffing,
    calculate_total_fte,
    find_minimum_agents,
    result_to_dict,
    staff_forecast,
    summarize_results,
)

# -----------------------------
# Validation
# -----------------------------
from .validation import (
    ForecastValidationError,
    validate_call_center_params,
    validate_forecast,
    validate_service_parameters,
    validate_shrinkage,
)

__all__ = [
    # Settings
    "EngineSettings",
    "DEFAULT_SETTINGS",
    "load_settings",
    # Erlang
    "offered_load_erlangs",
    "erlang_b",
    "erlang_c",
    "average_wait_time",
    "service_level",
    "occupancy_rate",
    # Shrinkage
    "CustomFactor",
    "ShrinkageConfig",
    "NO_SHRINKAGE",
    "total_shrinkage_percent",
    "shrinkage_multiplier",
    # Staffing
    "ForecastPoint",
    "ServiceParameters",
    "IntervalResult",
    "ScenarioSummary",
    "StaffingPlan",
    "CallCenterParams",
    "CallCenterResults",
    "find_minimum_agents",
    "calculate_interval_staffing",
    "calculate_total_fte",
    "calculate_average_service_level",
    "summarize_results",
    "staff_forecast",
    "calculate_call_center_staffing",
    "result_to_dict",
    # Validation
    "ForecastValidationError",
    "validate_forecast",
    "validate_service_parameters",
    "validate_shrinkage",
    "validate_call_center_params",
]
