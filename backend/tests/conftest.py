from __future__ import annotations

import os
import sys
import tempfile
import uuid
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

_TEST_DB_DIR = Path(tempfile.mkdtemp(prefix="glucotrack-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB_DIR / 'test.db'}"
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ.pop("REMINDER_AI_API_KEY", None)

from db.database import Base, SessionLocal, engine  # noqa: E402
import db.models  # noqa: E402,F401

Base.metadata.create_all(bind=engine)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def unique_email():
    return f"user_{uuid.uuid4().hex[:10]}@example.com"
