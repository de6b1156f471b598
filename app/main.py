"""
Store Monitoring API
Clean and simple API endpoints
"""

import logging
import os

from fastapi import FastAPI, BackgroundTasks, HTTPException
from fastapi.responses import FileResponse
from datetime import datetime
import pytz

from .config import settings
from .database import engine, SessionLocal
from .models import Base, StoreTimezone, StoreHours, StoreStatus
from .services.background_service import create_report_job, start_report_generation, get_report_status

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(levelname)s - %(message)s'
)

# Initialize FastAPI app
app = FastAPI(title=settings.PROJECT_NAME)


@app.on_event("startup")
def on_startup() -> None:
    """Create database tables on startup"""
    Base.metadata.create_all(bind=engine)


# ===== REPORT ENDPOINTS =====

@app.post("/trigger_report")
def trigger_report():
    """
    Trigger report generation from the data stored in DB
    Returns report_id for polling status
    """
    try:
        # Create report job
        report_id = create_report_job()

        # Start generation in background
        start_report_generation(report_id)

        return {"report_id": report_id}

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error triggering report: {str(e)}")


@app.get("/get_report")
def get_report(report_id: str):
    """
    Get report status or CSV file
    Returns "Running" if not complete, or CSV file if complete
    """
    try:
        result = get_report_status(report_id)

        if result.get("error"):
            raise HTTPException(status_code=result["status_code"], detail=result["error"])

        if result["status"] == "Running":
            return {"status": "Running"}

        file_path = result["file_path"]
        if not file_path or not os.path.exists(file_path):
            raise HTTPException(status_code=500, detail="Report file not found")

        return FileResponse(
            file_path,
            media_type="text/csv",
            filename=f"report_{report_id}.csv"
        )

    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error retrieving report: {str(e)}")


# ===== HELPER ENDPOINTS =====

@app.get("/")
def read_root():
    """Root endpoint"""
    return {"message": "Store Monitoring API is running"}


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now(pytz.UTC).isoformat()}


@app.get("/stats")
def get_stats():
    """Get basic statistics about the data"""
    db = SessionLocal()
    try:
        # Count records in each table
        timezone_count = db.query(StoreTimezone).count()
        hours_count = db.query(StoreHours).count()
        status_count = db.query(StoreStatus).count()

        # Get latest timestamp
        latest_status = db.query(StoreStatus).order_by(StoreStatus.timestamp_utc.desc()).first()
        latest_timestamp = latest_status.timestamp_utc if latest_status else None

        return {
            "store_timezones": timezone_count,
            "store_hours": hours_count,
            "store_status": status_count,
            "latest_status_timestamp": latest_timestamp.isoformat() if latest_timestamp else None
        }

    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Error getting stats: {str(e)}")
    finally:
        db.close()


@app.post("/ingest")
def trigger_ingestion(background_tasks: BackgroundTasks):
    """Trigger data ingestion from CSV files"""
    def _run_ingestion_job() -> None:
        from scripts.ingest_data import ingest_data
        ingest_data()

    background_tasks.add_task(_run_ingestion_job)
    return {"message": "Ingestion started"}
