"""
Pytest configuration and shared fixtures for all tests.

Tests run against an in-memory SQLite database (aiosqlite) with retry
backoff disabled, so no external services are needed.
"""

import os
import sys

# Add backend directory to path for imports FIRST
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

# Settings are instantiated at import time and require a database URL
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from roast_storage.core.config import Settings
from roast_storage.core.database import build_session_factory, init_db
from roast_storage.resumes.assembler import DocumentAssembler
from roast_storage.resumes.gateway import PersistenceGateway
from roast_storage.resumes.storage_service import ResumeStorageService


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        DATABASE_URL=TEST_DATABASE_URL,
        ENVIRONMENT="development",
        STORAGE_RETRY_BACKOFF_SECONDS=0.0,
    )


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test; StaticPool keeps one shared connection"""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def gateway(session_factory, test_settings):
    return PersistenceGateway(
        session_factory,
        max_retries=test_settings.STORAGE_MAX_RETRIES,
        backoff_seconds=test_settings.STORAGE_RETRY_BACKOFF_SECONDS,
    )


@pytest.fixture
def storage_service(test_settings, gateway):
    return ResumeStorageService(test_settings, gateway)


# ============================================================================
# SAMPLE INPUTS
# ============================================================================

@pytest.fixture
def sample_file():
    return {"originalname": "test.txt", "size": 12, "mimetype": "text/plain"}


@pytest.fixture
def sample_text():
    return "John Doe\nSoftware Developer"


@pytest.fixture
def sample_analysis():
    return {"score": 75, "roastFeedback": "Test feedback"}


@pytest.fixture
def sample_preferences():
    return {"roastLevel": "professional", "language": "english"}


@pytest.fixture
def make_document():
    """Factory for assembled documents with overridable score and upload time"""
    assembler = DocumentAssembler()

    def _make(resume_id="resume-test-0001", score=80, uploaded_at=None, name="Jane Roe"):
        document = assembler.assemble(
            resume_id,
            {"originalname": "cv.pdf", "size": 2048, "mimetype": "application/pdf"},
            f"{name}\njane.roe@example.com\nBackend engineer with Python and Docker",
            {"score": score, "roastFeedback": "Solid, but too modest."},
            {"roastLevel": "professional", "language": "english"},
            {"clientIP": "127.0.0.1", "userAgent": "pytest"},
            "req-test",
        )
        if uploaded_at is not None:
            document["timestamps"]["uploadedAt"] = uploaded_at
        return document

    return _make


@pytest.fixture
def utc():
    return lambda *args: datetime(*args, tzinfo=timezone.utc)
