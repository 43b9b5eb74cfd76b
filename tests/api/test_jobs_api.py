from unittest.mock import AsyncMock

import pytest

from alumni_finder.auth.supabase_auth import AuthUser, verify_jwt
from alumni_finder.errors import StoreError
from alumni_finder.jobs.models import JobStatus

from conftest import CRON_SECRET, OTHER_PROFILE_ID, OTHER_USER_ID, PROFILE_ID


def _names(count):
    return [{"name": f"Person {i}", "school": "Yale"} for i in range(count)]


def test_create_job_returns_pending_job(client, job_store, dispatcher):
    response = client.post("/api/v1/jobs", json={"names": _names(2), "inputMethod": "manual"})

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert data["inputMethod"] == "manual"
    assert data["inputNames"] == _names(2)
    assert "createdAt" in data
    dispatcher.dispatch.assert_called_once()


@pytest.mark.parametrize(
    "payload",
    [
        {"names": _names(11), "inputMethod": "manual"},
        {"names": _names(101), "inputMethod": "file_upload"},
        {"names": [], "inputMethod": "manual"},
        {"names": [{"name": " ", "school": "Yale"}], "inputMethod": "manual"},
    ],
)
def test_create_job_rejects_invalid_batches(client, dispatcher, payload):
    response = client.post("/api/v1/jobs", json=payload)

    assert response.status_code == 400
    dispatcher.dispatch.assert_not_called()


def test_create_job_rejects_unknown_input_method(client):
    response = client.post("/api/v1/jobs", json={"names": _names(1), "inputMethod": "fax"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid request body"


def test_create_job_requires_token(anon_client):
    response = anon_client.post("/api/v1/jobs", json={"names": _names(1), "inputMethod": "manual"})
    assert response.status_code == 401


def test_create_job_without_profile(client, profile_store):
    profile_store._profiles.clear()
    response = client.post("/api/v1/jobs", json={"names": _names(1), "inputMethod": "manual"})

    assert response.status_code == 404
    assert response.json()["detail"] == "Profile not found"


def test_store_failure_is_reported_generically(client, job_store):
    job_store.insert = AsyncMock(side_effect=StoreError("Database error during insert", {"error": "pk"}))
    response = client.post("/api/v1/jobs", json={"names": _names(1), "inputMethod": "manual"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Database error"}


def test_upload_csv_creates_file_upload_job(client, job_store):
    csv_bytes = b"Name,School\nGrace Hopper,Yale\nAlan Turing,Princeton\n"
    response = client.post("/api/v1/jobs/upload", files={"file": ("batch.csv", csv_bytes, "text/csv")})

    assert response.status_code == 201
    data = response.json()
    assert data["inputMethod"] == "file_upload"
    assert [n["name"] for n in data["inputNames"]] == ["Grace Hopper", "Alan Turing"]


def test_upload_rejects_excel(client):
    response = client.post("/api/v1/jobs/upload", files={"file": ("batch.xlsx", b"PK\x03\x04", "application/octet-stream")})
    assert response.status_code == 400
    assert "convert to CSV" in response.json()["detail"]


@pytest.mark.asyncio
async def test_list_and_get_jobs(client, job_store, make_job):
    mine = await job_store.insert(make_job())
    await job_store.insert(make_job(user_id=OTHER_PROFILE_ID))

    listed = client.get("/api/v1/jobs").json()["jobs"]
    assert [j["id"] for j in listed] == [mine.id]

    response = client.get(f"/api/v1/jobs/{mine.id}")
    assert response.status_code == 200
    assert response.json()["status"] == "pending"
    assert response.json()["user_id"] == PROFILE_ID


@pytest.mark.asyncio
async def test_get_other_users_job_is_forbidden(client, job_store, make_job):
    theirs = await job_store.insert(make_job(user_id=OTHER_PROFILE_ID))

    response = client.get(f"/api/v1/jobs/{theirs.id}")
    assert response.status_code == 403
    assert response.json()["detail"] == "Not your job"

    assert client.get("/api/v1/jobs/missing").status_code == 404


@pytest.mark.asyncio
async def test_check_timeouts_with_cron_secret(client, job_store, make_job):
    stale = await job_store.insert(make_job(age_minutes=11))
    fresh = await job_store.insert(make_job(age_minutes=1))

    response = client.post(
        "/api/v1/jobs/check-timeouts", headers={"Authorization": f"Bearer {CRON_SECRET}"}
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "timedOutJobs": 1}
    assert (await job_store.get(stale.id)).status == JobStatus.FAILED
    assert (await job_store.get(fresh.id)).status == JobStatus.PENDING


@pytest.mark.asyncio
@pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer wrong"}, {"Authorization": CRON_SECRET}])
async def test_check_timeouts_rejects_bad_credentials(client, job_store, make_job, headers):
    stale = await job_store.insert(make_job(age_minutes=30))

    response = client.post("/api/v1/jobs/check-timeouts", headers=headers)

    assert response.status_code == 401
    assert (await job_store.get(stale.id)).status == JobStatus.PENDING


@pytest.mark.asyncio
async def test_manual_timeout_endpoint(client, job_store, make_job):
    job = await job_store.insert(make_job())
    auth = {"Authorization": f"Bearer {CRON_SECRET}"}

    assert client.post(f"/api/v1/jobs/{job.id}/timeout", headers=auth).json() == {"success": True}
    assert (await job_store.get(job.id)).error_message == "Job timed out after 10 minutes"
    assert client.post("/api/v1/jobs/missing/timeout", headers=auth).status_code == 404
    assert client.post(f"/api/v1/jobs/{job.id}/timeout").status_code == 401


def test_other_user_sees_only_their_jobs(client):
    client.app.dependency_overrides[verify_jwt] = lambda: AuthUser(id=OTHER_USER_ID)
    assert client.get("/api/v1/jobs").json() == {"jobs": []}


@pytest.mark.asyncio
async def test_manual_timeout_conflicts_in_conditional_mode(client, test_settings, job_store, make_job):
    test_settings.conditional_transitions = True
    results = [{"name": "Grace Hopper", "school": "Yale", "linkedInUrl": None, "confidence": 70}]
    job = await job_store.insert(make_job(status=JobStatus.COMPLETED, results=results))

    response = client.post(f"/api/v1/jobs/{job.id}/timeout", headers={"Authorization": f"Bearer {CRON_SECRET}"})

    assert response.status_code == 409
    assert response.json() == {"detail": "Job is no longer active"}
    assert (await job_store.get(job.id)).results == results
