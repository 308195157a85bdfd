# src/erlangstaff/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "ERLANGSTAFF_"

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(frozen=True)
class EngineSettings:
    # Solver searches [ceil(traffic), ceil(traffic) + max_extra_agents]
    max_extra_agents: int = 50
    # Shrinkage above this is clamped (80% => 5x multiplier)
    shrinkage_cap_percent: float = 80.0
    # Forecast volumes are calls per hour
    period_seconds: float = 3600.0
    # Rounding applied to reported metrics
    decimals: int = 2
    log_level: str = "WARNING"


DEFAULT_SETTINGS = EngineSettings()


def _int_from_env(env: Mapping[str, str], name: str, default: int, *, minimum: int) -> int:
    raw = env.get(ENV_PREFIX + name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{ENV_PREFIX}{name} must be >= {minimum}, got {value}")
    return value


def _float_from_env(env: Mapping[str, str], name: str, default: float, *, low: float, high: float) -> float:
    raw = env.get(ENV_PREFIX + name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from None
    if not (low <= value < high):
        raise ValueError(f"{ENV_PREFIX}{name} must be in [{low}, {high}), got {value}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> EngineSettings:
    """
    Build settings from ERLANGSTAFF_* variables, falling back to the defaults.

    Only callers that opt in read the environment; the calculation functions
    always receive settings explicitly (DEFAULT_SETTINGS unless overridden).
    """
    source = os.environ if env is None else env

    level = source.get(ENV_PREFIX + "LOG_LEVEL", "").strip().upper() or DEFAULT_SETTINGS.log_level
    if level not in _LOG_LEVELS:
        raise ValueError(f"{ENV_PREFIX}LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got {level!r}")

    return EngineSettings(
        max_extra_agents=_int_from_env(source, "MAX_EXTRA_AGENTS", DEFAULT_SETTINGS.max_extra_agents, minimum=1),
        shrinkage_cap_percent=_float_from_env(
            source, "SHRINKAGE_CAP", DEFAULT_SETTINGS.shrinkage_cap_percent, low=0.0, high=100.0
        ),
        period_seconds=DEFAULT_SETTINGS.period_seconds,
        decimals=_int_from_env(source, "DECIMALS", DEFAULT_SETTINGS.decimals, minimum=0),
        log_level=level,
    )


__all__ = [
    "ENV_PREFIX",
    "EngineSettings",
    "DEFAULT_SETTINGS",
    "load_settings",
]
