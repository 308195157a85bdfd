import logging
import math

import pytest

from erlangstaff.config import EngineSettings
from erlangstaff.erlangc import offered_load_erlangs, service_level
from erlangstaff.shrinkage import NO_SHRINKAGE
from erlangstaff.staffing import (
    CallCenterParams,
    ForecastPoint,
    IntervalResult,
    ServiceParameters,
    calculate_average_service_level,
    calculate_call_center_staffing,
    calculate_interval_staffing,
    calculate_total_fte,
    find_minimum_agents,
    result_to_dict,
    staff_forecast,
    summarize_results,
)
from erlangstaff.validation import ForecastValidationError


def _result(time: str, scheduled: int, sl: float, calls: float = 10.0, occ: float = 80.0) -> IntervalResult:
    return IntervalResult(
        time=time,
        calls=calls,
        required_agents=scheduled,
        required_agents_with_shrinkage=scheduled,
        service_level=sl,
        average_wait_time=5.0,
        probability_of_waiting=20.0,
        occupancy_rate=occ,
        traffic=1.0,
    )


# -----------------------------
# Solver
# -----------------------------
def test_minimum_agents_is_minimal():
    traffic = 100 * 300 / 3600
    n = find_minimum_agents(calls=100, aht=300, target_service_level=80, target_answer_time=20)

    assert n >= math.ceil(traffic)
    assert service_level(traffic, n, 300, 20) >= 80
    assert service_level(traffic, n - 1, 300, 20) < 80


@pytest.mark.parametrize("calls,aht,target,tat", [(30, 180, 90, 15), (400, 420, 80, 30), (2500, 300, 95, 10)])
def test_minimum_agents_minimal_across_loads(calls, aht, target, tat):
    traffic = offered_load_erlangs(calls, aht)
    n = find_minimum_agents(calls, aht, target, tat)

    assert service_level(traffic, n, aht, tat) >= target
    assert service_level(traffic, n - 1, aht, tat) < target


def test_no_load_needs_no_agents():
    assert find_minimum_agents(calls=0, aht=300, target_service_level=80, target_answer_time=20) == 0
    assert find_minimum_agents(calls=50, aht=300, target_service_level=80, target_answer_time=20, abandonment_rate=100) == 0


def test_abandonment_never_increases_requirement():
    base = find_minimum_agents(calls=200, aht=300, target_service_level=80, target_answer_time=20)
    reduced = find_minimum_agents(calls=200, aht=300, target_service_level=80, target_answer_time=20, abandonment_rate=15)
    assert reduced <= base


def test_unreachable_target_returns_search_cap(caplog):
    traffic = 100 * 300 / 3600
    with caplog.at_level(logging.WARNING, logger="erlangstaff.staffing"):
        n = find_minimum_agents(calls=100, aht=300, target_service_level=100.5, target_answer_time=20)

    assert n == math.ceil(traffic) + 50
    assert "not reachable" in caplog.text


def test_hundred_percent_target_is_bounded():
    traffic = 100 * 300 / 3600
    n = find_minimum_agents(calls=100, aht=300, target_service_level=100, target_answer_time=20)
    assert math.ceil(traffic) <= n <= math.ceil(traffic) + 50


def test_search_window_follows_settings():
    settings = EngineSettings(max_extra_agents=3)
    n = find_minimum_agents(
        calls=100, aht=300, target_service_level=99.9, target_answer_time=20, settings=settings
    )
    assert n == 9 + 3


# -----------------------------
# Interval aggregation
# -----------------------------
def test_zero_call_interval_short_circuits(service_params, shrinkage_20):
    (res,) = calculate_interval_staffing([ForecastPoint("10:00", 0)], service_params, shrinkage_20)
    assert res.required_agents == 0
    assert res.required_agents_with_shrinkage == 0
    assert res.service_level == 100
    assert res.traffic == 0.0


def test_shrinkage_inflates_scheduled_agents(day_forecast, service_params, shrinkage_20):
    results = calculate_interval_staffing(day_forecast, service_params, shrinkage_20)

    for res in results:
        assert res.required_agents_with_shrinkage == math.ceil(res.required_agents * 1.25)
        assert res.required_agents_with_shrinkage >= res.required_agents


def test_without_shrinkage_scheduled_equals_on_phone(day_forecast, service_params):
    results = calculate_interval_staffing(day_forecast, service_params, NO_SHRINKAGE)
    assert all(r.required_agents_with_shrinkage == r.required_agents for r in results)


def test_results_keep_input_order(service_params):
    points = [ForecastPoint("12:00", 50), ForecastPoint("08:00", 60), ForecastPoint("10:00", 70)]
    results = calculate_interval_staffing(points, service_params)
    assert [r.time for r in results] == ["12:00", "08:00", "10:00"]


def test_fully_abandoned_interval_reported_as_idle():
    params = ServiceParameters(300, 80, 20, abandonment_rate=100)
    results = calculate_interval_staffing([ForecastPoint("09:00", 50), ForecastPoint("10:00", 0)], params)

    res = results[0]
    assert res.calls == 50
    assert res.required_agents == 0
    assert res.required_agents_with_shrinkage == 0
    assert res.service_level == 100
    assert res.probability_of_waiting == 0
    assert res.average_wait_time == 0
    assert res.traffic == 0
    assert calculate_average_service_level(results) == 100.0


def test_unreachable_interval_does_not_disturb_neighbours():
    params = ServiceParameters(300, 100, 20)
    points = [ForecastPoint("08:00", 0), ForecastPoint("09:00", 100), ForecastPoint("10:00", 100000)]
    results = calculate_interval_staffing(points, params, NO_SHRINKAGE)

    assert [r.time for r in results] == ["08:00", "09:00", "10:00"]
    assert results[0].required_agents == 0
    assert results[0].service_level == 100

    for point, res in zip(points[1:], results[1:]):
        traffic = offered_load_erlangs(point.calls, 300)
        cap = math.ceil(traffic) + 50
        assert res.required_agents <= cap
        if service_level(traffic, res.required_agents, 300, 20) < 100:
            assert res.required_agents == cap

    heavy_traffic = offered_load_erlangs(100000, 300)
    assert results[2].required_agents == math.ceil(heavy_traffic) + 50

    for point, res in zip(points, results):
        assert calculate_interval_staffing([point], params, NO_SHRINKAGE) == [res]


def test_metrics_reported_at_scheduled_headcount(service_params, shrinkage_20):
    (res,) = calculate_interval_staffing([ForecastPoint("09:00", 100)], service_params, shrinkage_20)
    traffic = 100 * 300 / 3600

    assert res.traffic == pytest.approx(8.33)
    assert res.service_level == pytest.approx(service_level(traffic, res.required_agents_with_shrinkage, 300, 20), abs=0.01)
    assert res.occupancy_rate == pytest.approx(100 * traffic / res.required_agents_with_shrinkage, abs=0.01)
    assert 0.0 <= res.probability_of_waiting <= 100.0
    assert math.isfinite(res.average_wait_time)


def test_interval_aht_override(service_params):
    results = calculate_interval_staffing(
        [ForecastPoint("09:00", 100), ForecastPoint("10:00", 100, aht=600)], service_params
    )
    assert results[0].traffic == pytest.approx(8.33)
    assert results[1].traffic == pytest.approx(16.67)
    assert results[1].required_agents > results[0].required_agents


def test_abandonment_rate_applied_per_interval():
    params = ServiceParameters(default_aht=360, service_level=80, target_answer_time=20, abandonment_rate=10)
    (res,) = calculate_interval_staffing([ForecastPoint("09:00", 100)], params)
    assert res.traffic == pytest.approx(9.0)


def test_calculation_is_idempotent(day_forecast, service_params, shrinkage_20):
    first = calculate_interval_staffing(day_forecast, service_params, shrinkage_20)
    second = calculate_interval_staffing(day_forecast, service_params, shrinkage_20)
    assert first == second


def test_reported_values_rounded_to_two_decimals(day_forecast, service_params, shrinkage_20):
    for res in calculate_interval_staffing(day_forecast, service_params, shrinkage_20):
        for value in (res.service_level, res.average_wait_time, res.probability_of_waiting, res.occupancy_rate, res.traffic):
            assert round(value, 2) == pytest.approx(value)


# -----------------------------
# Aggregates
# -----------------------------
def test_total_fte_single_interval_is_that_interval(service_params, shrinkage_20):
    results = calculate_interval_staffing([ForecastPoint("09:00", 100)], service_params, shrinkage_20)
    assert calculate_total_fte(results) == results[0].required_agents_with_shrinkage


def test_total_fte_is_mean_of_scheduled():
    results = [_result("09:00", 10, 80.0), _result("10:00", 11, 90.0), _result("11:00", 12, 85.0)]
    assert calculate_total_fte(results) == 11.0
    assert calculate_total_fte(results[:2]) == 10.5


def test_average_service_level():
    results = [_result("09:00", 10, 80.0), _result("10:00", 11, 90.0)]
    assert calculate_average_service_level(results) == 85.0


def test_aggregates_of_empty_results():
    assert calculate_total_fte([]) == 0.0
    assert calculate_average_service_level([]) == 0.0
    summary = summarize_results([])
    assert summary.peak_agents == 0
    assert summary.peak_time is None


def test_summarize_results_views():
    results = [
        _result("09:00", 10, 80.0, calls=100, occ=70.0),
        _result("09:30", 14, 90.0, calls=150, occ=80.0),
    ]
    summary = summarize_results(results, interval_minutes=30)

    assert summary.total_fte == 12.0
    assert summary.average_service_level == 85.0
    assert summary.peak_agents == 14
    assert summary.peak_time == "09:30"
    assert summary.total_calls == 250.0
    assert summary.average_occupancy == 75.0
    assert summary.agent_hours == 12.0


# -----------------------------
# Entry points
# -----------------------------
def test_staff_forecast_returns_results_and_summary(day_forecast, service_params, shrinkage_20):
    plan = staff_forecast(day_forecast, service_params, shrinkage_20)

    assert len(plan.results) == len(day_forecast)
    assert plan.summary.total_fte == calculate_total_fte(plan.results)
    assert plan.summary.average_service_level == calculate_average_service_level(plan.results)


def test_staff_forecast_rejects_empty_forecast(service_params):
    with pytest.raises(ForecastValidationError) as exc:
        staff_forecast([], service_params)
    assert exc.value.errors == ["Forecast must contain at least one interval"]


def test_staff_forecast_rejects_bad_parameters(day_forecast):
    params = ServiceParameters(default_aht=0, service_level=120, target_answer_time=20)
    with pytest.raises(ForecastValidationError) as exc:
        staff_forecast(day_forecast, params)
    assert len(exc.value.errors) == 2
    assert isinstance(exc.value, ValueError)


def test_call_center_calculator_matches_interval_engine():
    params = CallCenterParams(calls_per_hour=100, average_handle_time=300, service_level=80, target_answer_time=20)
    res = calculate_call_center_staffing(params)
    traffic = 100 * 300 / 3600

    assert res.agents_required == find_minimum_agents(100, 300, 80, 20)
    assert res.traffic == pytest.approx(8.33)
    assert res.actual_service_level >= 80
    assert res.utilization_rate == pytest.approx(100 * traffic / res.agents_required, abs=0.01)

    assert res.agents_required in res.agents_suggested
    assert all(n > traffic for n in res.agents_suggested)
    assert max(res.agents_suggested) == res.agents_required + 10
    assert len(res.service_levels) == len(res.agents_suggested)


def test_call_center_calculator_rejects_zero_volume():
    params = CallCenterParams(calls_per_hour=0, average_handle_time=300, service_level=80, target_answer_time=20)
    with pytest.raises(ForecastValidationError):
        calculate_call_center_staffing(params)


def test_result_to_dict_camel_case():
    out = result_to_dict(_result("09:00", 10, 80.0), camel_case=True)
    assert out["requiredAgentsWithShrinkage"] == 10
    assert out["serviceLevel"] == 80.0
    assert "required_agents" not in out
