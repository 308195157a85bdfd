# tests/conftest.py
from __future__ import annotations

import pytest

from erlangstaff.shrinkage import CustomFactor, ShrinkageConfig
from erlangstaff.staffing import ForecastPoint, ServiceParameters


@pytest.fixture
def service_params() -> ServiceParameters:
    return ServiceParameters(default_aht=300, service_level=80, target_answer_time=20, abandonment_rate=0)


@pytest.fixture
def shrinkage_20() -> ShrinkageConfig:
    # 10 + 4 + 3 + 2 + 1 = 20%
    return ShrinkageConfig(regular_breaks=10, training=4, meetings=3, absenteeism=2, other=1)


@pytest.fixture
def shrinkage_over_cap() -> ShrinkageConfig:
    return ShrinkageConfig(
        regular_breaks=30,
        training=20,
        meetings=10,
        absenteeism=15,
        other=5,
        custom_factors=(CustomFactor(name="coaching", percentage=12),),
    )


@pytest.fixture
def day_forecast() -> list[ForecastPoint]:
    return [
        ForecastPoint(time="08:00", calls=40),
        ForecastPoint(time="09:00", calls=100),
        ForecastPoint(time="10:00", calls=0),
        ForecastPoint(time="11:00", calls=150, aht=240),
        ForecastPoint(time="12:00", calls=75),
    ]
