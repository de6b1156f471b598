from datetime import datetime

import pytz

from app.schemas.store import BusinessHoursRule, StatusSample, StoreTimezoneRecord

CHICAGO = pytz.timezone("America/Chicago")


def utc(y, m, d, hh=0, mm=0, ss=0):
    return datetime(y, m, d, hh, mm, ss, tzinfo=pytz.UTC)


def chicago(y, m, d, hh=0, mm=0, ss=0):
    return CHICAGO.localize(datetime(y, m, d, hh, mm, ss))


def weekday_rules(store_id, start="09:00:00", end="17:00:00", days=range(5)):
    return [BusinessHoursRule(store_id, day, start, end) for day in days]


def sample(store_id, instant, status):
    return StatusSample(store_id=store_id, timestamp_utc=instant, status=status)


def timezone(store_id, name):
    return StoreTimezoneRecord(store_id=store_id, timezone_str=name)
