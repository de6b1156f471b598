import os
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class Settings:
    def __init__(self):
        logger.debug("Loaded settings:")
        logger.debug(f"  DEFAULT_TIMEZONE: {self.DEFAULT_TIMEZONE}")
        logger.debug(f"  REPORTS_DIR: {self.REPORTS_DIR}")

    PROJECT_NAME: str = "Store Monitoring API"
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./store_monitoring.db")
    DEFAULT_TIMEZONE: str = os.getenv("DEFAULT_TIMEZONE", "America/Chicago")
    REPORTS_DIR: str = os.getenv("REPORTS_DIR", "./reports")
    REPORT_MAX_WORKERS: int = int(os.getenv("REPORT_MAX_WORKERS", 4))
    DATA_DIR: str = os.getenv("DATA_DIR", os.path.join("data", "input"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()
