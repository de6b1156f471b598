import os
import time

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models import ReportJob, StoreHours, StoreStatus, StoreTimezone
from app.services.background_service import (
    create_report_job,
    get_report_status,
    start_report_generation,
)
from app.services.report_service import NoStatusDataError
from helpers import utc


def seed(db, bad_hours=False):
    db.add_all([
        StoreTimezone(store_id="a", timezone_str="America/Chicago"),
        StoreStatus(store_id="a", status="active", timestamp_utc=utc(2024, 1, 10, 15, 30)),
        StoreStatus(store_id="a", status="inactive", timestamp_utc=utc(2024, 1, 10, 19, 30)),
        StoreStatus(store_id="b", status="active", timestamp_utc=utc(2024, 1, 10, 20)),
    ])
    for day in range(5):
        db.add(StoreHours(store_id="a", dayOfWeek=day, start_time_local="09:00:00", end_time_local="17:00:00"))
    if bad_hours:
        db.add(StoreHours(store_id="a", dayOfWeek=2, start_time_local="??", end_time_local="17:00:00"))
    db.commit()


def test_report_job_completes_with_csv(db):
    seed(db)
    report_id = create_report_job()
    assert get_report_status(report_id)["status"] == "Running"

    file_path = start_report_generation(report_id).result(timeout=30)

    status = get_report_status(report_id)
    assert status["status"] == "Complete"
    assert status["file_path"] == file_path

    report = pd.read_csv(file_path, dtype={"store_id": str})
    assert list(report["store_id"]) == ["a", "b"]
    assert report.loc[0, "downtime_last_week(in hours)"] == 35.5
    assert report.loc[1, "uptime_last_hour(in minutes)"] == 60


def test_report_job_without_data_fails(db):
    report_id = create_report_job()
    future = start_report_generation(report_id)

    with pytest.raises(NoStatusDataError):
        future.result(timeout=30)

    status = get_report_status(report_id)
    assert status["status_code"] == 500
    assert "No status data found" in status["error"]


def test_failed_store_leaves_no_report_file(db):
    seed(db, bad_hours=True)
    report_id = create_report_job()

    with pytest.raises(ValueError):
        start_report_generation(report_id).result(timeout=30)

    job = db.query(ReportJob).filter(ReportJob.report_id == report_id).first()
    db.refresh(job)
    assert job.status == "Error"
    assert job.file_path is None
    assert not os.path.exists(os.path.join(os.environ["REPORTS_DIR"], f"{report_id}.csv"))


def test_unknown_report_is_not_found(db):
    assert get_report_status("missing")["status_code"] == 404


def test_api_trigger_and_download(db):
    seed(db)
    with TestClient(app) as client:
        assert client.get("/health").json()["status"] == "healthy"
        assert client.get("/stats").json()["store_status"] == 3

        report_id = client.post("/trigger_report").json()["report_id"]

        deadline = time.time() + 30
        response = client.get("/get_report", params={"report_id": report_id})
        while response.headers["content-type"].startswith("application/json") and time.time() < deadline:
            assert response.json() == {"status": "Running"}
            time.sleep(0.05)
            response = client.get("/get_report", params={"report_id": report_id})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.text.splitlines()[1] == "a,0,4.5,4.5,60,3.5,35.5"


def test_api_unknown_report(db):
    with TestClient(app) as client:
        response = client.get("/get_report", params={"report_id": "missing"})
        assert response.status_code == 404
