from datetime import datetime

from app.models import StoreHours, StoreStatus, StoreTimezone
from scripts.ingest_data import ingest_data


def test_ingest_loads_all_three_files(db, tmp_path):
    (tmp_path / "store_status.csv").write_text(
        "store_id,status,timestamp_utc\n"
        "a,active,2024-01-10 15:30:00.123456 UTC\n"
        "a,Inactive,2024-01-10 19:30:00 UTC\n"
    )
    (tmp_path / "menu_hours.csv").write_text(
        "store_id,dayOfWeek,start_time_local,end_time_local\n"
        "a,0,09:00:00,17:00:00\n"
        "a,1,22:00:00,06:00:00\n"
    )
    (tmp_path / "timezones.csv").write_text(
        "store_id,timezone_str\n"
        "a,America/Denver\n"
        "b,\n"
    )

    ingest_data(str(tmp_path))

    statuses = db.query(StoreStatus).order_by(StoreStatus.timestamp_utc).all()
    assert [s.status for s in statuses] == ["active", "inactive"]
    assert statuses[1].timestamp_utc.replace(tzinfo=None) == datetime(2024, 1, 10, 19, 30)

    hours = db.query(StoreHours).order_by(StoreHours.dayOfWeek).all()
    assert [(h.dayOfWeek, h.start_time_local, h.end_time_local) for h in hours] == [
        (0, "09:00:00", "17:00:00"),
        (1, "22:00:00", "06:00:00"),
    ]

    timezones = {tz.store_id: tz.timezone_str for tz in db.query(StoreTimezone).all()}
    assert timezones == {"a": "America/Denver", "b": "America/Chicago"}
