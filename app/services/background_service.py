"""
Background job service
Handles async report generation
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
import pytz
import uuid

from ..database import SessionLocal
from ..models import ReportJob
from .report_service import generate_report, update_report_job

logger = logging.getLogger(__name__)

RUNNING = "Running"
COMPLETE = "Complete"
ERROR = "Error"

_executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="report")

def create_report_job() -> str:
    """
    Create a new report job and return the report_id
    """
    db = SessionLocal()
    try:
        # Generate unique report ID
        report_id = str(uuid.uuid4())

        # Create report job record
        report_job = ReportJob(
            report_id=report_id,
            status=RUNNING,
            created_at=datetime.now(pytz.UTC)
        )
        db.add(report_job)
        db.commit()

        return report_id

    finally:
        db.close()

def start_report_generation(report_id: str) -> Future:
    """
    Submit report generation to the background executor
    The returned future resolves once the job row has reached its terminal state
    """
    logger.info(f"Starting report generation for {report_id}")
    future = _executor.submit(_generate_report_job, report_id)
    return future

def _generate_report_job(report_id: str) -> str:
    """
    Generate the report and record the outcome on the job
    """
    try:
        file_path = generate_report(report_id)
    except Exception as e:
        logger.exception(f"Report generation failed for {report_id}")
        update_report_job(report_id, ERROR, error_message=str(e) or type(e).__name__)
        raise

    update_report_job(report_id, COMPLETE, file_path=file_path)
    logger.info(f"Report {report_id} completed successfully")
    return file_path


def get_report_status(report_id: str) -> dict:
    """
    Get report job status
    Returns dict with status info
    """
    db = SessionLocal()
    try:
        report_job = db.query(ReportJob).filter(ReportJob.report_id == report_id).first()

        if not report_job:
            return {"error": "Report not found", "status_code": 404}

        if report_job.status == RUNNING:
            return {"status": RUNNING, "status_code": 200}
        elif report_job.status == COMPLETE:
            return {
                "status": COMPLETE,
                "file_path": report_job.file_path,
                "status_code": 200
            }
        else:  # Error
            return {
                "error": f"Report generation failed: {report_job.error_message}",
                "status_code": 500
            }

    finally:
        db.close()
