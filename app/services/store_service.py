"""
Store data service
Handles store-related data retrieval
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

import pytz

from ..models import StoreTimezone, StoreHours, StoreStatus
from ..schemas.store import BusinessHoursRule, StatusSample, StoreTimezoneRecord
from .time_service import TimezoneProvider


class StoreData:
    """
    All input rows grouped per store, built once per report run
    """

    def __init__(
        self,
        statuses: Iterable[StatusSample],
        business_hours: Iterable[BusinessHoursRule],
        timezones: Iterable[StoreTimezoneRecord],
    ):
        self.statuses: Dict[str, List[StatusSample]] = group_by_store(statuses)
        self.business_hours: Dict[str, List[BusinessHoursRule]] = group_by_store(business_hours)
        self.timezones: Dict[str, str] = {record.store_id: record.timezone_str for record in timezones}

    def store_ids(self) -> List[str]:
        """Every store seen in any collection, sorted"""
        return sorted(set(self.statuses) | set(self.business_hours) | set(self.timezones))


def group_by_store(records: Iterable) -> Dict[str, List]:
    grouped = defaultdict(list)
    for record in records:
        grouped[record.store_id].append(record)
    return dict(grouped)


def get_store_timezone(
    store_data: StoreData, store_id: str, tz_provider: TimezoneProvider
) -> pytz.BaseTzInfo:
    """
    Get store timezone, default timezone if missing
    """
    return tz_provider.get_timezone(store_data.timezones.get(store_id))


def get_store_business_hours(store_data: StoreData, store_id: str) -> List[BusinessHoursRule]:
    """
    Get store business hours; an empty list means the store is open 24/7
    """
    return store_data.business_hours.get(store_id, [])


def get_store_statuses(store_data: StoreData, store_id: str) -> List[StatusSample]:
    return store_data.statuses.get(store_id, [])


def load_report_inputs(db) -> Tuple[List[StatusSample], List[BusinessHoursRule], List[StoreTimezoneRecord]]:
    """
    Read all three input tables into plain records
    """
    statuses = [
        StatusSample(
            store_id=str(row.store_id),
            timestamp_utc=row.timestamp_utc,
            status=row.status.strip().lower(),
        )
        for row in db.query(StoreStatus).all()
    ]
    business_hours = [
        BusinessHoursRule(
            store_id=str(row.store_id),
            day_of_week=int(row.dayOfWeek),
            start_time_local=row.start_time_local,
            end_time_local=row.end_time_local,
        )
        for row in db.query(StoreHours).all()
    ]
    timezones = [
        StoreTimezoneRecord(store_id=str(row.store_id), timezone_str=row.timezone_str)
        for row in db.query(StoreTimezone).all()
    ]
    return statuses, business_hours, timezones
