# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Stubs the Redis publisher so no test needs a running Redis
# - Provides an authenticated TestClient factory
# =============================================================================

import os
from unittest.mock import MagicMock, patch
from uuid import UUID

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-at-least-32-characters-long")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from app.auth.models import AuthUser
from core.models.users import Role


USER_ID = "11111111-1111-1111-1111-111111111111"
OTHER_USER_ID = "22222222-2222-2222-2222-222222222222"
JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def redis_publisher():
    """Replace the Redis client used for publishing events."""
    client = MagicMock()
    with patch("app.streaming.broadcast.get_redis_client", return_value=client):
        yield client


@pytest.fixture
def make_client():
    """
    Build a TestClient authenticated as a user with the given role.

    Usage:
        client = make_client(Role.ADMIN)
        client.get("/api/v1/admin/users")
    """
    from fastapi.testclient import TestClient
    from app.auth import get_current_user, get_stream_user
    from app.main import app

    def _make(role: Role = Role.USER, user_id: str = USER_ID) -> TestClient:
        user = AuthUser(id=UUID(user_id), email="tester@example.com", role=role)
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_stream_user] = lambda: user
        return TestClient(app, raise_server_exceptions=False)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client():
    """TestClient without any auth override."""
    from fastapi.testclient import TestClient
    from app.main import app

    app.dependency_overrides.clear()
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def file_ref():
    """An uploaded file reference."""
    return {"public_id": "docs/abc123", "secure_url": "https://files.example.com/docs/abc123.pdf"}


@pytest.fixture
def startup_form(file_ref):
    """Minimal valid startup form payload (camelCase, as clients send it)."""
    return {
        "owner": {
            "fullName": "Asha Rao",
            "email": "asha@solarroof.in",
            "phone": "9876543210",
        },
        "startupDetails": {
            "startupName": "SolarRoof",
            "industry": "Energy",
            "founders": [{"name": "Asha Rao", "role": "CEO"}],
            "equitySplits": [{"ownerName": "Asha Rao", "equityPercentage": 60}],
        },
        "identityProof": file_ref,
    }


@pytest.fixture
def researcher_form():
    """Valid researcher form payload."""
    return {
        "personalInfo": {
            "fullName": "Dr. Meera Iyer",
            "email": "meera@iisc.ac.in",
            "phone": "9123456780",
            "institution": "IISc",
            "department": "Materials",
            "designation": "Professor",
            "orcid": "0000-0002-1825-0097",
            "identityProof": {"type": "PAN", "number": "ABCDE1234F"},
        },
        "academicInfo": {
            "highestQualification": "PhD",
            "specialization": "Photovoltaics",
            "yearsOfExperience": 12,
            "researchInterests": ["perovskites"],
        },
        "researchProposal": {
            "title": "Stable perovskite cells",
            "abstract": "A" * 120,
            "objectives": "B" * 60,
            "methodology": "C" * 60,
            "expectedOutcome": "D" * 60,
            "timeline": "Twenty four months total",
            "fundingRequired": True,
            "fundingAmount": 2500000,
        },
    }


@pytest.fixture
def pending_filing():
    """A stored Pending filing owned by a startup profile."""
    return {
        "id": "f0000000-0000-0000-0000-000000000001",
        "title": "Self-cleaning solar roof tile",
        "description": "A roof tile with a hydrophobic coating that sheds dust",
        "type": "Patent",
        "owner_type": "Startup",
        "owner_id": "s0000000-0000-0000-0000-000000000001",
        "filing_date": "2024-03-01T10:00:00+00:00",
        "status": "Pending",
        "related_documents": [],
        "transaction_hash": None,
        "reviewer_id": None,
        "review_message": None,
    }
