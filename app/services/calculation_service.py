"""
Uptime calculation service
Contains the core extrapolation algorithm
"""

from datetime import datetime
from typing import List, Tuple

from ..schemas.store import ACTIVE, BusinessInterval, LocalizedSample, WindowKind, WindowResult


def minutes_between(start: datetime, instant: datetime) -> int:
    return int((instant - start).total_seconds() // 60)


def extrapolate_uptime(
    observations: List[LocalizedSample],
    interval: BusinessInterval,
) -> Tuple[int, int]:
    """
    Extrapolate uptime/downtime from sparse observations

    Algorithm:
    - Only observations inside [interval.start, interval.end] count
    - If no observations, the whole interval is downtime
    - Before first observation: assume same status as first observation
    - Between observations: assume previous status continues
    - After last observation: assume same status as last observation

    Every boundary is truncated to whole minutes from interval.start, so
    the spans always add up to the interval's whole-minute duration.

    Returns: (uptime_minutes, downtime_minutes)
    """
    total_minutes = minutes_between(interval.start, interval.end)

    in_interval = [
        obs for obs in observations
        if interval.start <= obs.local_time <= interval.end
    ]
    if not in_interval:
        return 0, total_minutes

    boundaries = [interval.start] + [obs.local_time for obs in in_interval] + [interval.end]
    statuses = [in_interval[0].status] + [obs.status for obs in in_interval]

    uptime_minutes = 0
    downtime_minutes = 0

    for i, status in enumerate(statuses):
        span = (
            minutes_between(interval.start, boundaries[i + 1])
            - minutes_between(interval.start, boundaries[i])
        )
        if status == ACTIVE:
            uptime_minutes += span
        else:
            downtime_minutes += span

    return uptime_minutes, downtime_minutes


def aggregate_window(
    store_id: str,
    window_kind: WindowKind,
    observations: List[LocalizedSample],
    business_periods: List[BusinessInterval],
) -> WindowResult:
    """
    Sum interval estimates across every business period of one window
    No business periods gives an all-zero result
    """
    total_uptime_minutes = 0
    total_downtime_minutes = 0

    for period in business_periods:
        uptime_mins, downtime_mins = extrapolate_uptime(observations, period)
        total_uptime_minutes += uptime_mins
        total_downtime_minutes += downtime_mins

    return WindowResult(
        store_id=store_id,
        window_kind=window_kind,
        uptime_minutes=total_uptime_minutes,
        downtime_minutes=total_downtime_minutes,
    )
