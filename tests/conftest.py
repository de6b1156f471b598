import os
import tempfile

# Must be set before the app modules read their settings
_TEST_DIR = tempfile.mkdtemp(prefix="store-monitoring-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
os.environ["REPORTS_DIR"] = os.path.join(_TEST_DIR, "reports")
os.environ["DEFAULT_TIMEZONE"] = "America/Chicago"

import pytest

from app.database import engine, Base, SessionLocal
import app.models  # noqa: F401  registers the tables


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
