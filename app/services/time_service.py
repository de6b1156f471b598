"""
Time and business hours calculation service
Handles timezone conversions, report windows and business period calculations
"""

import logging
from datetime import datetime, timedelta, time
import pytz
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ..schemas.store import (
    BusinessHoursRule,
    BusinessInterval,
    LocalizedSample,
    StatusSample,
    WindowKind,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Chicago"

WINDOW_DAYS = {
    WindowKind.DAY: 1,
    WindowKind.WEEK: 7,
}


class TimezoneProvider:
    """
    Resolves timezone names and converts instants between UTC and store
    local time. Passed explicitly to everything that needs a timezone.
    """

    def __init__(self, default_timezone: str = DEFAULT_TIMEZONE):
        self.default_timezone = pytz.timezone(default_timezone)

    def get_timezone(self, timezone_str: Optional[str]) -> pytz.BaseTzInfo:
        if not timezone_str:
            return self.default_timezone
        try:
            return pytz.timezone(timezone_str)
        except pytz.UnknownTimeZoneError:
            logger.warning(f"Unknown timezone '{timezone_str}', using {self.default_timezone.zone}")
            return self.default_timezone

    def to_local(self, instant: datetime, store_tz: pytz.BaseTzInfo) -> datetime:
        # Naive instants are UTC
        if instant.tzinfo is None:
            instant = pytz.UTC.localize(instant)
        return instant.astimezone(store_tz)

    def localize(self, wall_time: datetime, store_tz: pytz.BaseTzInfo) -> datetime:
        """Attach the store timezone to a naive local wall-clock time"""
        return store_tz.normalize(store_tz.localize(wall_time))


def resolve_window(
    now_utc: datetime,
    window_kind: WindowKind,
    store_tz: pytz.BaseTzInfo,
    tz_provider: TimezoneProvider,
) -> Tuple[datetime, datetime]:
    """
    Get the [start, end) report window in store local time

    The hour window is 60 elapsed minutes. Day and week windows step back
    whole local calendar days, so a window crossing a DST change is 23 or
    25 hours (or 167/169) long.
    """
    end_local = tz_provider.to_local(now_utc, store_tz)

    if window_kind == WindowKind.HOUR:
        start_local = store_tz.normalize(end_local - timedelta(hours=1))
    else:
        wall_start = end_local.replace(tzinfo=None) - timedelta(days=WINDOW_DAYS[window_kind])
        start_local = tz_provider.localize(wall_start, store_tz)

    return start_local, end_local


def parse_local_time(value: Union[str, time]) -> time:
    if isinstance(value, time):
        return value
    parts = [int(part) for part in value.strip().split(':')]
    while len(parts) < 3:
        parts.append(0)
    hour, minute, second = parts[:3]
    return time(hour, minute, second)


def get_business_periods_in_range(
    business_hours: List[BusinessHoursRule],
    start_time: datetime,
    end_time: datetime,
    store_tz: pytz.BaseTzInfo,
    tz_provider: TimezoneProvider,
) -> List[BusinessInterval]:
    """
    Get all business periods that overlap with the given local window
    Returns BusinessIntervals clipped to [start_time, end_time), ordered by start

    A store with no rules at all is open 24/7. An end time earlier than the
    start time runs into the next day; the day before the window is walked
    too so that such a shift's tail is counted.
    """
    if start_time >= end_time:
        return []

    if not business_hours:
        return [BusinessInterval(start_time, end_time)]

    hours_by_day: Dict[int, List[BusinessHoursRule]] = {}
    for rule in business_hours:
        hours_by_day.setdefault(rule.day_of_week, []).append(rule)

    business_periods = []

    # Process each local day in the range
    current_date = start_time.date() - timedelta(days=1)
    end_date = end_time.date()

    while current_date <= end_date:
        day_of_week = current_date.weekday()  # 0=Monday, 6=Sunday

        for hours in hours_by_day.get(day_of_week, []):
            open_time = parse_local_time(hours.start_time_local)
            close_time = parse_local_time(hours.end_time_local)

            close_date = current_date
            if close_time < open_time:
                # Overnight shift
                close_date = current_date + timedelta(days=1)

            business_start = tz_provider.localize(datetime.combine(current_date, open_time), store_tz)
            business_end = tz_provider.localize(datetime.combine(close_date, close_time), store_tz)

            # Clip to our analysis period
            period_start = max(business_start, start_time)
            period_end = min(business_end, end_time)

            if period_start < period_end:
                business_periods.append(BusinessInterval(period_start, period_end))

        current_date += timedelta(days=1)

    business_periods.sort(key=lambda period: period.start)
    return business_periods


def localize_samples(
    samples: Iterable[StatusSample],
    store_tz: pytz.BaseTzInfo,
    tz_provider: TimezoneProvider,
) -> List[LocalizedSample]:
    """Re-express samples in store local time, sorted ascending (stable for ties)"""
    localized = [
        LocalizedSample(
            timestamp_utc=sample.timestamp_utc,
            local_time=tz_provider.to_local(sample.timestamp_utc, store_tz),
            status=sample.status,
        )
        for sample in samples
    ]
    return sorted(localized, key=lambda sample: sample.local_time)
