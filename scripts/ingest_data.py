# Filename: scripts/ingest_data.py
# Run from the project root: python -m scripts.ingest_data
import logging
import os

import pandas as pd
from sqlalchemy.orm import Session

from app.config import settings
from app.models import SessionLocal, StoreStatus, StoreHours, StoreTimezone, engine, Base

logger = logging.getLogger(__name__)

# --- File Names ---
# Looked up inside settings.DATA_DIR unless a directory is passed in.
STATUS_CSV = 'store_status.csv'
HOURS_CSV = 'menu_hours.csv'
TIMEZONE_CSV = 'timezones.csv'


def _read_timezones(path: str) -> list:
    tz_df = pd.read_csv(path, dtype={'store_id': str})
    tz_df = tz_df.rename(columns={'timezone': 'timezone_str'})
    tz_df['timezone_str'] = tz_df['timezone_str'].fillna(settings.DEFAULT_TIMEZONE)
    # One timezone per store
    tz_df = tz_df.drop_duplicates(subset='store_id', keep='first')
    return tz_df[['store_id', 'timezone_str']].to_dict(orient="records")


def _read_business_hours(path: str) -> list:
    hours_df = pd.read_csv(path, dtype={'store_id': str, 'start_time_local': str, 'end_time_local': str})
    hours_df = hours_df.rename(columns={'day': 'dayOfWeek', 'day_of_week': 'dayOfWeek'})
    hours_df['dayOfWeek'] = hours_df['dayOfWeek'].astype(int)
    columns = ['store_id', 'dayOfWeek', 'start_time_local', 'end_time_local']
    return hours_df[columns].to_dict(orient="records")


def _read_statuses(path: str) -> list:
    status_df = pd.read_csv(path, dtype={'store_id': str, 'status': str})
    status_df['status'] = status_df['status'].str.strip().str.lower()
    # Timestamps look like "2023-01-22 12:09:39.388884 UTC"
    status_df['timestamp_utc'] = pd.to_datetime(
        status_df['timestamp_utc'].str.replace(' UTC', '', regex=False), utc=True, format='mixed'
    )
    records = status_df[['store_id', 'status', 'timestamp_utc']].to_dict(orient="records")
    for record in records:
        record['timestamp_utc'] = record['timestamp_utc'].to_pydatetime()
    return records


def ingest_data(data_dir: str = None):
    """
    Reads the three CSV files and bulk inserts them in a single transaction.
    Any failure rolls the whole ingestion back.
    """
    data_dir = data_dir or settings.DATA_DIR

    # Create all tables if they don't already exist.
    logger.info("Initializing database tables...")
    Base.metadata.create_all(bind=engine)

    db: Session = SessionLocal()
    logger.info("Database session started.")

    try:
        # --- 1. Ingest Store Timezones ---
        timezone_path = os.path.join(data_dir, TIMEZONE_CSV)
        logger.info(f"Reading timezones from {timezone_path}...")
        tz_records = _read_timezones(timezone_path)
        if tz_records:
            db.bulk_insert_mappings(StoreTimezone, tz_records)
            logger.info(f"Successfully inserted {len(tz_records)} timezone records.")

        # --- 2. Ingest Store Business Hours ---
        hours_path = os.path.join(data_dir, HOURS_CSV)
        logger.info(f"Reading business hours from {hours_path}...")
        hours_records = _read_business_hours(hours_path)
        if hours_records:
            db.bulk_insert_mappings(StoreHours, hours_records)
            logger.info(f"Successfully inserted {len(hours_records)} business hour records.")

        # --- 3. Ingest Store Status ---
        status_path = os.path.join(data_dir, STATUS_CSV)
        logger.info(f"Reading store status data from {status_path}...")
        status_records = _read_statuses(status_path)
        if status_records:
            db.bulk_insert_mappings(StoreStatus, status_records)
            logger.info(f"Successfully inserted {len(status_records)} store status records.")

        db.commit()
        logger.info("All data has been successfully committed to the database.")

    except FileNotFoundError as e:
        logger.error(f"Error: The file was not found - {e}. Please check the file paths.")
        db.rollback()
        raise
    except Exception as e:
        logger.error(f"An error occurred during data ingestion: {e}")
        db.rollback()
        raise
    finally:
        logger.info("Database session closed.")
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')
    ingest_data()
