"""
Shared test fixtures.

Provides in-memory stores, a seeded profile, a fake dispatcher and LLM, and
a TestClient with dependency overrides so no Supabase or network access is
needed.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from alumni_finder.api import deps
from alumni_finder.auth.supabase_auth import AuthUser, verify_jwt
from alumni_finder.config import Settings
from alumni_finder.jobs.memory_store import InMemoryJobStore
from alumni_finder.jobs.models import InputMethod, InputName, JobRecord, JobStatus, utcnow
from alumni_finder.main import app
from alumni_finder.profiles.models import ProfileRecord, SenderProfile
from alumni_finder.profiles.store import InMemoryProfileStore

USER_ID = "user-1"
PROFILE_ID = "11111111-1111-1111-1111-111111111111"
OTHER_USER_ID = "user-2"
OTHER_PROFILE_ID = "22222222-2222-2222-2222-222222222222"
CALLBACK_SECRET = "callback-secret"
CRON_SECRET = "cron-secret"


@pytest.fixture
def test_settings():
    return Settings(
        _env_file=None,
        workflow_callback_secret=CALLBACK_SECRET,
        cron_secret=CRON_SECRET,
        job_timeout_minutes=10,
    )


@pytest.fixture
def job_store():
    return InMemoryJobStore()


@pytest.fixture
def sender_profile():
    return SenderProfile(
        education=["Yale", "MIT"],
        experience=["Acme", "Globex"],
        current_company="Globex",
        current_role="Product Manager",
        interests=["AI", "developer tools"],
    )


@pytest.fixture
def profile_store(sender_profile):
    store = InMemoryProfileStore()
    store.add(ProfileRecord(
        id=PROFILE_ID,
        user_id=USER_ID,
        email="ada@example.com",
        full_name="Ada Lovelace",
        sender_profile=sender_profile,
    ))
    store.add(ProfileRecord(id=OTHER_PROFILE_ID, user_id=OTHER_USER_ID, email="bob@example.com"))
    return store


@pytest.fixture
def dispatcher():
    mock = MagicMock()
    mock.pending = 0
    return mock


@pytest.fixture
def llm():
    mock = MagicMock()
    mock.chat = AsyncMock(return_value="Hi Grace, fellow Yale alum here. Would love to connect!")
    return mock


@pytest.fixture
def make_job():
    """Build a JobRecord; ``age_minutes`` backdates processing_started_at."""

    def _make(
        user_id=PROFILE_ID,
        status=JobStatus.PENDING,
        age_minutes=0.0,
        names=None,
        **overrides,
    ):
        started = utcnow() - timedelta(minutes=age_minutes)
        fields = dict(
            user_id=user_id,
            status=status,
            input_method=InputMethod.MANUAL,
            input_names=names or [InputName(name="Grace Hopper", school="Yale")],
            created_at=started,
            updated_at=started,
            processing_started_at=started,
        )
        fields.update(overrides)
        return JobRecord(**fields)

    return _make


@pytest.fixture
def client(test_settings, job_store, profile_store, dispatcher, llm):
    """Authenticated as USER_ID."""
    app.dependency_overrides[deps.get_settings] = lambda: test_settings
    app.dependency_overrides[deps.get_job_store] = lambda: job_store
    app.dependency_overrides[deps.get_profile_store] = lambda: profile_store
    app.dependency_overrides[deps.get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[deps.get_llm_client] = lambda: llm
    app.dependency_overrides[verify_jwt] = lambda: AuthUser(id=USER_ID, email="ada@example.com")
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anon_client(client):
    """Same wiring as ``client`` but with the real token check."""
    app.dependency_overrides.pop(verify_jwt, None)
    return client
