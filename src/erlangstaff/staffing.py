# src/erlangstaff/staffing.py
from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import DEFAULT_SETTINGS, EngineSettings
from .erlangc import average_wait_time, erlang_c, occupancy_rate, offered_load_erlangs, service_level
from .shrinkage import NO_SHRINKAGE, ShrinkageConfig, shrinkage_multiplier
from .validation import (
    ForecastValidationError,
    validate_call_center_params,
    validate_forecast,
    validate_service_parameters,
    validate_shrinkage,
)

logger = logging.getLogger(__name__)

# Float noise tolerated before rounding a headcount up (8 * 1.25 must stay 10)
_CEIL_EPSILON = 1e-9


# -----------------------------
# Data models
# -----------------------------
@dataclass(frozen=True)
class ForecastPoint:
    time: str
    calls: float
    # Per-interval AHT override (seconds); None falls back to the scenario default
    aht: Optional[float] = None


@dataclass(frozen=True)
class ServiceParameters:
    default_aht: float
    service_level: float
    target_answer_time: float
    abandonment_rate: float = 0.0


@dataclass(frozen=True)
class IntervalResult:
    time: str
    calls: float
    required_agents: int
    required_agents_with_shrinkage: int
    service_level: float
    average_wait_time: float
    probability_of_waiting: float
    occupancy_rate: float
    traffic: float


@dataclass(frozen=True)
class ScenarioSummary:
    # Mean of scheduled agents per interval (the dashboard's "total FTE")
    total_fte: float
    average_service_level: float
    peak_agents: int
    peak_time: Optional[str]
    total_calls: float
    average_occupancy: float
    # Scheduled agents x interval length, in hours
    agent_hours: float


@dataclass(frozen=True)
class StaffingPlan:
    results: Tuple[IntervalResult, ...]
    summary: ScenarioSummary


@dataclass(frozen=True)
class CallCenterParams:
    calls_per_hour: float
    average_handle_time: float
    service_level: float
    target_answer_time: float
    abandonment_rate: float = 0.0


@dataclass(frozen=True)
class CallCenterResults:
    agents_required: int
    traffic: float
    probability_of_waiting: float
    average_wait_time: float
    actual_service_level: float
    utilization_rate: float
    agents_suggested: Tuple[int, ...]
    service_levels: Tuple[float, ...]


# -----------------------------
# Internal helpers
# -----------------------------
def _round(value: float, decimals: int) -> float:
    # Half-up, like Math.round(x * 100) / 100 in the dashboard
    if not math.isfinite(value):
        return float(value)
    scale = 10.0**decimals
    return math.floor(float(value) * scale + 0.5) / scale


def _ceil_agents(value: float) -> int:
    return int(math.ceil(float(value) - _CEIL_EPSILON))


def _scheduled_from_on_phone(on_phone: int, multiplier: float) -> int:
    return _ceil_agents(on_phone * multiplier)


def _meets_target(
    *,
    traffic: float,
    agents: int,
    aht: float,
    target_service_level: float,
    target_answer_time: float,
) -> bool:
    return service_level(traffic, agents, aht, target_answer_time) >= float(target_service_level)


def _empty_interval(time: str, calls: float = 0) -> IntervalResult:
    return IntervalResult(
        time=time,
        calls=calls,
        required_agents=0,
        required_agents_with_shrinkage=0,
        service_level=100.0,
        average_wait_time=0.0,
        probability_of_waiting=0.0,
        occupancy_rate=0.0,
        traffic=0.0,
    )


def _staff_interval(
    point: ForecastPoint,
    params: ServiceParameters,
    multiplier: float,
    settings: EngineSettings,
) -> IntervalResult:
    calls = float(point.calls)
    if calls <= 0:
        return _empty_interval(point.time)

    aht = float(point.aht) if point.aht is not None and point.aht > 0 else float(params.default_aht)
    abandonment = float(params.abandonment_rate or 0.0)
    traffic = offered_load_erlangs(calls, aht, abandonment, settings.period_seconds)
    # Fully abandoned volume leaves nothing to answer
    if traffic <= 0:
        return _empty_interval(point.time, point.calls)

    on_phone = find_minimum_agents(
        calls,
        aht,
        params.service_level,
        params.target_answer_time,
        abandonment,
        settings=settings,
    )
    scheduled = _scheduled_from_on_phone(on_phone, multiplier)

    # Reported metrics reflect the scheduled headcount, not the idealized solve
    sl = service_level(traffic, scheduled, aht, params.target_answer_time)
    asa = average_wait_time(traffic, scheduled, aht)
    pw = erlang_c(traffic, scheduled)
    occ = occupancy_rate(traffic, scheduled)

    d = settings.decimals
    return IntervalResult(
        time=point.time,
        calls=point.calls,
        required_agents=on_phone,
        required_agents_with_shrinkage=scheduled,
        service_level=_round(sl, d),
        average_wait_time=_round(asa, d),
        probability_of_waiting=_round(100.0 * pw, d),
        occupancy_rate=_round(occ, d),
        traffic=_round(traffic, d),
    )


# -----------------------------
# Public API
# -----------------------------
def find_minimum_agents(
    calls: float,
    aht: float,
    target_service_level: float,
    target_answer_time: float,
    abandonment_rate: float = 0.0,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> int:
    """
    Smallest on-phone N with service_level(a, N) >= target.

    The search window is [ceil(a), ceil(a) + max_extra_agents]. Service level
    is non-decreasing in N, so the window is binary searched with its upper
    edge treated as feasible: an unreachable target (e.g. 100%) returns the
    edge as a best-effort headcount instead of failing.
    """
    traffic = offered_load_erlangs(calls, aht, abandonment_rate, settings.period_seconds)
    if traffic <= 0:
        return 0

    low = int(math.ceil(traffic))
    cap = low + int(settings.max_extra_agents)

    def feasible(n: int) -> bool:
        return _meets_target(
            traffic=traffic,
            agents=n,
            aht=aht,
            target_service_level=target_service_level,
            target_answer_time=target_answer_time,
        )

    lo, hi = low, cap
    while lo < hi:
        mid = (lo + hi) // 2
        if feasible(mid):
            hi = mid
        else:
            lo = mid + 1

    n = int(lo)
    if n == cap and not feasible(cap):
        logger.warning(
            "Service level target %.2f%% not reachable for %.3f Erlangs within %d agents; using %d",
            float(target_service_level),
            traffic,
            cap,
            cap,
        )
    else:
        logger.debug("Minimum agents for %.3f Erlangs: %d (window %d..%d)", traffic, n, low, cap)
    return n


def calculate_interval_staffing(
    points: Sequence[ForecastPoint],
    service_params: ServiceParameters,
    shrinkage_config: ShrinkageConfig = NO_SHRINKAGE,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> List[IntervalResult]:
    """
    Staff every forecast interval independently.

    Output order mirrors the input; use intervals.sort_forecast first when a
    chronological listing is needed. Idle intervals (calls <= 0) are staffed
    at zero with a 100% service level.
    """
    multiplier = shrinkage_multiplier(shrinkage_config, settings.shrinkage_cap_percent)
    results = [_staff_interval(p, service_params, multiplier, settings) for p in points]
    logger.debug("Staffed %d intervals (shrinkage multiplier %.4f)", len(results), multiplier)
    return results


def calculate_total_fte(results: Sequence[IntervalResult], *, decimals: int = DEFAULT_SETTINGS.decimals) -> float:
    """
    Mean scheduled agents across intervals.

    This is a representative staffing level, not peak or headcount-hours;
    see summarize_results for those views.
    """
    if len(results) == 0:
        return 0.0
    scheduled = np.array([r.required_agents_with_shrinkage for r in results], dtype=float)
    return _round(float(np.mean(scheduled)), decimals)


def calculate_average_service_level(
    results: Sequence[IntervalResult], *, decimals: int = DEFAULT_SETTINGS.decimals
) -> float:
    if len(results) == 0:
        return 0.0
    levels = np.array([r.service_level for r in results], dtype=float)
    return _round(float(np.mean(levels)), decimals)


def summarize_results(
    results: Sequence[IntervalResult],
    interval_minutes: int = 60,
    *,
    decimals: int = DEFAULT_SETTINGS.decimals,
) -> ScenarioSummary:
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be > 0")

    if len(results) == 0:
        return ScenarioSummary(
            total_fte=0.0,
            average_service_level=0.0,
            peak_agents=0,
            peak_time=None,
            total_calls=0.0,
            average_occupancy=0.0,
            agent_hours=0.0,
        )

    scheduled = np.array([r.required_agents_with_shrinkage for r in results], dtype=int)
    peak_idx = int(np.argmax(scheduled))
    occupancy = np.array([r.occupancy_rate for r in results], dtype=float)

    return ScenarioSummary(
        total_fte=calculate_total_fte(results, decimals=decimals),
        average_service_level=calculate_average_service_level(results, decimals=decimals),
        peak_agents=int(scheduled[peak_idx]),
        peak_time=results[peak_idx].time,
        total_calls=float(sum(float(r.calls) for r in results)),
        average_occupancy=_round(float(np.mean(occupancy)), decimals),
        agent_hours=_round(float(scheduled.sum()) * interval_minutes / 60.0, decimals),
    )


def staff_forecast(
    points: Sequence[ForecastPoint],
    service_params: ServiceParameters,
    shrinkage_config: ShrinkageConfig = NO_SHRINKAGE,
    interval_minutes: int = 60,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> StaffingPlan:
    """
    Validate, staff and summarize a forecast in one call.

    Raises ForecastValidationError before any calculation when the forecast,
    the service parameters or the shrinkage configuration are not coherent.
    """
    errors = (
        validate_forecast(points)
        + validate_service_parameters(service_params)
        + validate_shrinkage(shrinkage_config)
    )
    if errors:
        logger.info("Rejected forecast with %d validation error(s)", len(errors))
        raise ForecastValidationError(errors)

    results = calculate_interval_staffing(points, service_params, shrinkage_config, settings=settings)
    summary = summarize_results(results, interval_minutes, decimals=settings.decimals)
    return StaffingPlan(results=tuple(results), summary=summary)


def calculate_call_center_staffing(
    params: CallCenterParams,
    *,
    settings: EngineSettings = DEFAULT_SETTINGS,
) -> CallCenterResults:
    """
    Single-scenario calculator: one hour of volume, no shrinkage.

    Runs through the interval engine and adds the service-level curve for
    headcounts from N-5 to N+10 (stable counts only) for what-if charts.
    """
    errors = validate_call_center_params(params)
    if errors:
        raise ForecastValidationError(errors)

    service_params = ServiceParameters(
        default_aht=params.average_handle_time,
        service_level=params.service_level,
        target_answer_time=params.target_answer_time,
        abandonment_rate=params.abandonment_rate,
    )
    (res,) = calculate_interval_staffing(
        [ForecastPoint(time="00:00", calls=params.calls_per_hour)],
        service_params,
        NO_SHRINKAGE,
        settings=settings,
    )

    traffic = offered_load_erlangs(
        params.calls_per_hour, params.average_handle_time, params.abandonment_rate, settings.period_seconds
    )
    n = res.required_agents
    suggested: List[int] = []
    levels: List[float] = []
    for agents in range(max(1, n - 5), n + 11):
        if agents > traffic:
            suggested.append(agents)
            sl = service_level(traffic, agents, params.average_handle_time, params.target_answer_time)
            levels.append(_round(sl, settings.decimals))

    return CallCenterResults(
        agents_required=n,
        traffic=res.traffic,
        probability_of_waiting=res.probability_of_waiting,
        average_wait_time=res.average_wait_time,
        actual_service_level=res.service_level,
        utilization_rate=res.occupancy_rate,
        agents_suggested=tuple(suggested),
        service_levels=tuple(levels),
    )


_CAMEL_KEYS = {
    "required_agents": "requiredAgents",
    "required_agents_with_shrinkage": "requiredAgentsWithShrinkage",
    "service_level": "serviceLevel",
    "average_wait_time": "averageWaitTime",
    "probability_of_waiting": "probabilityOfWaiting",
    "occupancy_rate": "occupancyRate",
}


def result_to_dict(result: IntervalResult, *, camel_case: bool = False) -> Dict[str, Any]:
    out = asdict(result)
    if camel_case:
        out = {_CAMEL_KEYS.get(k, k): v for k, v in out.items()}
    return out


__all__ = [
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
]
