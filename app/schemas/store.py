"""
In-memory store records
Plain immutable values the uptime calculation consumes and produces
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Union

ACTIVE = "active"
INACTIVE = "inactive"


class WindowKind(str, Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"


@dataclass(frozen=True)
class StatusSample:
    store_id: str
    timestamp_utc: datetime
    status: str  # "active" or "inactive"


@dataclass(frozen=True)
class BusinessHoursRule:
    store_id: str
    day_of_week: int  # 0=Monday, 6=Sunday
    start_time_local: Union[str, time]
    end_time_local: Union[str, time]


@dataclass(frozen=True)
class StoreTimezoneRecord:
    store_id: str
    timezone_str: str


@dataclass(frozen=True)
class LocalizedSample:
    timestamp_utc: datetime
    local_time: datetime
    status: str


@dataclass(frozen=True)
class BusinessInterval:
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


def round_hours(minutes: int) -> float:
    """minutes -> hours, two decimals, half-up"""
    hours = Decimal(minutes) / Decimal(60)
    return float(hours.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class WindowResult:
    store_id: str
    window_kind: WindowKind
    uptime_minutes: int
    downtime_minutes: int

    @property
    def uptime_hours(self) -> float:
        return round_hours(self.uptime_minutes)

    @property
    def downtime_hours(self) -> float:
        return round_hours(self.downtime_minutes)

    @property
    def uptime_value(self) -> Union[int, float]:
        """Reporting unit: minutes for the hour window, hours otherwise"""
        if self.window_kind == WindowKind.HOUR:
            return self.uptime_minutes
        return self.uptime_hours

    @property
    def downtime_value(self) -> Union[int, float]:
        if self.window_kind == WindowKind.HOUR:
            return self.downtime_minutes
        return self.downtime_hours


@dataclass(frozen=True)
class StoreReportRow:
    store_id: str
    uptime_last_hour: int
    downtime_last_hour: int
    uptime_last_day: float
    downtime_last_day: float
    uptime_last_week: float
    downtime_last_week: float
