# src/erlangstaff/shrinkage.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Tuple

from .config import DEFAULT_SETTINGS


@dataclass(frozen=True)
class CustomFactor:
    name: str
    percentage: float


@dataclass(frozen=True)
class ShrinkageConfig:
    """Non-productive time, every component as a percentage of paid time."""

    regular_breaks: float = 0.0
    training: float = 0.0
    meetings: float = 0.0
    absenteeism: float = 0.0
    other: float = 0.0
    custom_factors: Tuple[CustomFactor, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ShrinkageConfig":
        """Accepts snake_case keys or the dashboard's camelCase ones."""

        def pick(snake: str, camel: str) -> float:
            return float(data.get(snake, data.get(camel, 0.0)) or 0.0)

        raw_factors = data.get("custom_factors", data.get("customFactors", ())) or ()
        factors = tuple(
            f
            if isinstance(f, CustomFactor)
            else CustomFactor(name=str(f.get("name", "")), percentage=float(f.get("percentage", 0.0)))
            for f in raw_factors
        )
        return cls(
            regular_breaks=pick("regular_breaks", "regularBreaks"),
            training=pick("training", "training"),
            meetings=pick("meetings", "meetings"),
            absenteeism=pick("absenteeism", "absenteeism"),
            other=pick("other", "other"),
            custom_factors=factors,
        )

    def components(self) -> Tuple[Tuple[str, float], ...]:
        named = (
            ("regular_breaks", self.regular_breaks),
            ("training", self.training),
            ("meetings", self.meetings),
            ("absenteeism", self.absenteeism),
            ("other", self.other),
        )
        return named + tuple((f.name, f.percentage) for f in self.custom_factors)


NO_SHRINKAGE = ShrinkageConfig()


def total_shrinkage_percent(config: ShrinkageConfig, cap: float = DEFAULT_SETTINGS.shrinkage_cap_percent) -> float:
    """
    Sum of all shrinkage components, clamped to [0, cap].

    The cap keeps 1 / (1 - s) finite: at the default 80% the scheduled
    headcount is at most 5x the on-phone requirement.
    """
    total = sum(float(pct) for _, pct in config.components())
    return max(0.0, min(float(total), float(cap)))


def shrinkage_multiplier(config: ShrinkageConfig, cap: float = DEFAULT_SETTINGS.shrinkage_cap_percent) -> float:
    """On-phone -> scheduled factor: 1 / (1 - shrinkage)."""
    return 100.0 / (100.0 - total_shrinkage_percent(config, cap))


__all__ = [
    "CustomFactor",
    "ShrinkageConfig",
    "NO_SHRINKAGE",
    "total_shrinkage_percent",
    "shrinkage_multiplier",
]
