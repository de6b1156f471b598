"""
Report generation service
Handles all report calculation logic
"""

import logging
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict
from datetime import datetime
from functools import partial
from typing import List, Optional

import pandas as pd
import pytz

from ..config import settings
from ..database import SessionLocal
from ..models import ReportJob
from ..schemas.store import (
    BusinessHoursRule,
    StatusSample,
    StoreReportRow,
    StoreTimezoneRecord,
    WindowKind,
)
from .calculation_service import aggregate_window
from .store_service import (
    StoreData,
    get_store_business_hours,
    get_store_statuses,
    get_store_timezone,
    load_report_inputs,
)
from .time_service import (
    TimezoneProvider,
    get_business_periods_in_range,
    localize_samples,
    resolve_window,
)

logger = logging.getLogger(__name__)

CSV_COLUMNS = {
    "store_id": "store_id",
    "uptime_last_hour": "uptime_last_hour(in minutes)",
    "uptime_last_day": "uptime_last_day(in hours)",
    "uptime_last_week": "uptime_last_week(in hours)",
    "downtime_last_hour": "downtime_last_hour(in minutes)",
    "downtime_last_day": "downtime_last_day(in hours)",
    "downtime_last_week": "downtime_last_week(in hours)",
}


class ReportGenerationError(Exception):
    pass


class NoStatusDataError(ReportGenerationError):
    pass


def find_reference_instant(statuses: List[StatusSample]) -> datetime:
    """
    Latest observed timestamp across the whole dataset, as aware UTC
    """
    if not statuses:
        raise NoStatusDataError("No status data found")

    def as_utc(instant: datetime) -> datetime:
        if instant.tzinfo is None:
            return pytz.UTC.localize(instant)
        return instant.astimezone(pytz.UTC)

    return max(as_utc(sample.timestamp_utc) for sample in statuses)


def calculate_store_uptime(
    store_data: StoreData,
    store_id: str,
    current_time: datetime,
    tz_provider: TimezoneProvider,
) -> StoreReportRow:
    """
    Calculate uptime and downtime for a store over the last hour, day and week
    Only considers business hours and extrapolates from observations
    """
    store_tz = get_store_timezone(store_data, store_id, tz_provider)
    business_hours = get_store_business_hours(store_data, store_id)
    observations = localize_samples(get_store_statuses(store_data, store_id), store_tz, tz_provider)

    results = {}
    for window_kind in WindowKind:
        start_local, end_local = resolve_window(current_time, window_kind, store_tz, tz_provider)
        business_periods = get_business_periods_in_range(
            business_hours, start_local, end_local, store_tz, tz_provider
        )
        results[window_kind] = aggregate_window(store_id, window_kind, observations, business_periods)

    hour = results[WindowKind.HOUR]
    day = results[WindowKind.DAY]
    week = results[WindowKind.WEEK]

    return StoreReportRow(
        store_id=store_id,
        uptime_last_hour=hour.uptime_value,
        downtime_last_hour=hour.downtime_value,
        uptime_last_day=day.uptime_value,
        downtime_last_day=day.downtime_value,
        uptime_last_week=week.uptime_value,
        downtime_last_week=week.downtime_value,
    )


def build_report_rows(
    statuses: List[StatusSample],
    business_hours: List[BusinessHoursRule],
    timezones: List[StoreTimezoneRecord],
    tz_provider: Optional[TimezoneProvider] = None,
    max_workers: int = 4,
) -> List[StoreReportRow]:
    """
    Compute one report row per store, ordered by store id

    The reference instant is found once, then stores are fanned out to a
    worker pool. Any store failing aborts the whole report.
    """
    if tz_provider is None:
        tz_provider = TimezoneProvider()

    current_time = find_reference_instant(statuses)
    store_data = StoreData(statuses, business_hours, timezones)
    store_ids = store_data.store_ids()

    logger.info(f"Computing uptime for {len(store_ids)} stores as of {current_time.isoformat()}")

    compute = partial(
        calculate_store_uptime,
        store_data,
        current_time=current_time,
        tz_provider=tz_provider,
    )
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        # map() yields in submission order and re-raises the first failure
        return list(executor.map(compute, store_ids))


def rows_to_dataframe(rows: List[StoreReportRow]) -> pd.DataFrame:
    df = pd.DataFrame([asdict(row) for row in rows], columns=list(CSV_COLUMNS))
    return df.rename(columns=CSV_COLUMNS)


def write_report_csv(rows: List[StoreReportRow], file_path: str) -> str:
    """
    Write the report atomically: a failed write never leaves a partial file
    """
    directory = os.path.dirname(os.path.abspath(file_path))
    os.makedirs(directory, exist_ok=True)

    df = rows_to_dataframe(rows)
    fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".csv.tmp")
    try:
        with os.fdopen(fd, "w", newline="") as tmp_file:
            df.to_csv(tmp_file, index=False)
        os.replace(tmp_path, file_path)
    except Exception:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise

    return file_path


def generate_report(report_id: str, tz_provider: Optional[TimezoneProvider] = None) -> str:
    """
    Generate the complete report from the database
    Returns the path of the written CSV file
    """
    if tz_provider is None:
        tz_provider = TimezoneProvider(settings.DEFAULT_TIMEZONE)

    db = SessionLocal()
    try:
        statuses, business_hours, timezones = load_report_inputs(db)
    finally:
        db.close()

    rows = build_report_rows(
        statuses,
        business_hours,
        timezones,
        tz_provider=tz_provider,
        max_workers=settings.REPORT_MAX_WORKERS,
    )

    file_path = os.path.join(settings.REPORTS_DIR, f"{report_id}.csv")
    write_report_csv(rows, file_path)
    logger.info(f"Report {report_id} written to {file_path} ({len(rows)} stores)")
    return file_path


def update_report_job(report_id: str, status: str, file_path: str = None, error_message: str = None):
    """
    Update report job status in database
    """
    db = SessionLocal()
    try:
        report_job = db.query(ReportJob).filter(ReportJob.report_id == report_id).first()
        if report_job:
            report_job.status = status
            report_job.completed_at = datetime.now(pytz.UTC)
            if file_path:
                report_job.file_path = file_path
            if error_message:
                report_job.error_message = error_message
            db.commit()
    finally:
        db.close()
