from __future__ import annotations

import math


def offered_load_erlangs(
    calls: float,
    aht_seconds: float,
    abandonment_rate: float = 0.0,
    period_seconds: float = 3600.0,
) -> float:
    """
    Offered load a (Erlangs) = arrival_rate * AHT.
    Calls are counted per period (an hour by default) and abandoned contacts
    never reach an agent:
      effective_calls = calls * (1 - abandonment_rate/100)
      => a = effective_calls * aht_seconds / period_seconds
    """
    if period_seconds <= 0:
        raise ValueError("period_seconds must be > 0")
    if calls < 0:
        raise ValueError("calls must be >= 0")
    if aht_seconds <= 0 and calls > 0:
        raise ValueError("aht_seconds must be > 0 when calls > 0")
    if calls == 0:
        return 0.0
    effective_calls = float(calls) * (1.0 - float(abandonment_rate) / 100.0)
    return max(effective_calls, 0.0) * float(aht_seconds) / float(period_seconds)


def erlang_b(traffic: float, agents: int) -> float:
    """
    Erlang B blocking probability for an M/M/n/n loss system.

    Uses the recurrence
      B(0) = 1
      B(k) = a*B(k-1) / (k + a*B(k-1))
    which stays finite for any n (no a^n or n! terms).
    """
    if agents <= 0:
        return 1.0
    if traffic <= 0:
        return 0.0

    a = float(traffic)
    b = 1.0
    for k in range(1, int(agents) + 1):
        b = (a * b) / (k + a * b)
    return float(b)


def erlang_c(traffic: float, agents: int) -> float:
    """
    Erlang C probability of wait (Pw), derived from Erlang B:

    Pw = B / (1 - (a/n) * (1 - B))

    Requires n > a for stability; an unstable queue returns 1.
    """
    if agents <= 0:
        return 1.0
    if traffic <= 0:
        return 0.0
    if agents <= traffic:
        return 1.0

    b = erlang_b(traffic, agents)
    denom = 1.0 - (float(traffic) / float(agents)) * (1.0 - b)
    if denom <= 0:
        return 1.0
    return max(0.0, min(1.0, float(b / denom)))


def average_wait_time(traffic: float, agents: int, aht_seconds: float) -> float:
    """
    Average Speed of Answer (ASA) for M/M/n without abandonment.

    ASA = Pw * (AHT / (n-a))

    An unstable queue never clears, reported as math.inf.
    """
    if traffic <= 0:
        return 0.0
    if agents <= traffic:
        return math.inf
    pw = erlang_c(traffic, agents)
    return float(pw) * float(aht_seconds) / float(agents - traffic)


def service_level(traffic: float, agents: int, aht_seconds: float, target_answer_time: float) -> float:
    """
    Percentage of contacts answered within T seconds:

    SL(T) = 100 * (1 - Pw * exp(-(n-a) * (T / AHT)))
    """
    if agents <= 0:
        return 0.0
    if traffic <= 0:
        return 100.0
    if agents <= traffic:
        return 0.0

    T = max(float(target_answer_time), 0.0)
    pw = erlang_c(traffic, agents)
    expo = math.exp(-(agents - traffic) * (T / float(aht_seconds)))
    sl = 100.0 * (1.0 - pw * expo)
    # Clamp for safety
    return max(0.0, min(100.0, float(sl)))


def occupancy_rate(traffic: float, agents: int) -> float:
    """Percentage of agent time spent handling contacts (a / n)."""
    if agents <= 0:
        return 0.0
    return 100.0 * float(traffic) / float(agents)


__all__ = [
    "offered_load_erlangs",
    "erlang_b",
    "erlang_c",
    "average_wait_time",
    "service_level",
    "occupancy_rate",
]
