import json

import pytest

from alumni_finder.jobs.models import JobStatus

from conftest import CALLBACK_SECRET

RESULTS = [{"name": "Grace Hopper", "school": "Yale", "linkedInUrl": "https://linkedin.com/in/gracehopper", "confidence": 88}]
AUTH = {"X-N8N-Secret": CALLBACK_SECRET}


@pytest.mark.asyncio
async def test_success_callback_completes_job(client, job_store, make_job):
    job = await job_store.insert(make_job())

    response = client.post("/api/v1/webhooks/n8n", json={"jobId": job.id, "results": RESULTS}, headers=AUTH)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Job updated successfully", "jobId": job.id}
    stored = await job_store.get(job.id)
    assert stored.status == JobStatus.COMPLETED
    assert stored.results == RESULTS


@pytest.mark.asyncio
@pytest.mark.parametrize("headers", [{}, {"X-N8N-Secret": "guess"}, {"X-N8N-Secret": ""}])
@pytest.mark.parametrize("path", ["/api/v1/webhooks/n8n", "/api/v1/webhooks/n8n/failure"])
async def test_callback_without_valid_secret_never_mutates(client, job_store, make_job, headers, path):
    job = await job_store.insert(make_job())

    response = client.post(path, json={"jobId": job.id, "results": RESULTS}, headers=headers)

    assert response.status_code == 401
    assert await job_store.get(job.id) == job


@pytest.mark.asyncio
async def test_unset_server_secret_rejects_everything(client, test_settings, job_store, make_job):
    test_settings.workflow_callback_secret = ""
    job = await job_store.insert(make_job())

    response = client.post("/api/v1/webhooks/n8n", json={"jobId": job.id, "results": RESULTS}, headers={"X-N8N-Secret": ""})

    assert response.status_code == 401
    assert await job_store.get(job.id) == job


@pytest.mark.asyncio
async def test_failure_endpoint_reads_execution_error(client, job_store, make_job):
    job = await job_store.insert(make_job())
    body = {"execution": {"jobId": job.id, "error": {"message": "HTTP node timed out"}}}

    response = client.post("/api/v1/webhooks/n8n/failure", json=body, headers=AUTH)

    assert response.status_code == 200
    assert response.json()["message"] == "Job marked as failed"
    stored = await job_store.get(job.id)
    assert stored.status == JobStatus.FAILED
    assert stored.error_message == "HTTP node timed out"


@pytest.mark.asyncio
async def test_failure_hint_header_with_empty_results(client, job_store, make_job):
    job = await job_store.insert(make_job())

    response = client.post(
        "/api/v1/webhooks/n8n",
        json={"jobId": job.id, "results": [], "error": "No matches"},
        headers={**AUTH, "X-Callback-Type": "failure"},
    )

    assert response.status_code == 200
    assert (await job_store.get(job.id)).error_message == "No matches"


@pytest.mark.asyncio
async def test_failure_hint_query_parameter(client, job_store, make_job):
    job = await job_store.insert(make_job())

    client.post("/api/v1/webhooks/n8n?type=failure", json={"jobId": job.id}, headers=AUTH)

    assert (await job_store.get(job.id)).error_message == "Workflow failed"


@pytest.mark.parametrize(
    "content",
    [
        b"",
        b"{broken",
        json.dumps({"results": RESULTS}).encode(),
        json.dumps({"jobId": "J1", "results": []}).encode(),
        json.dumps({"jobId": "J1", "results": [{"name": "x"}]}).encode(),
    ],
)
def test_malformed_callbacks_rejected(client, content):
    response = client.post(
        "/api/v1/webhooks/n8n",
        content=content,
        headers={**AUTH, "Content-Type": "application/json"},
    )
    assert response.status_code == 400


def test_unknown_job_id_acknowledged(client):
    response = client.post("/api/v1/webhooks/n8n", json={"jobId": "nope", "results": RESULTS}, headers=AUTH)
    assert response.status_code == 200
    assert response.json()["success"] is True


@pytest.mark.asyncio
async def test_conditional_mode_reports_conflict(client, test_settings, job_store, make_job):
    test_settings.conditional_transitions = True
    job = await job_store.insert(make_job(status=JobStatus.FAILED, error_message="Job timed out after 10 minutes"))

    response = client.post("/api/v1/webhooks/n8n", json={"jobId": job.id, "results": RESULTS}, headers=AUTH)

    assert response.status_code == 409
    assert response.json() == {"detail": "Job is no longer active"}
    assert (await job_store.get(job.id)).status == JobStatus.FAILED


def test_failure_probe(client):
    response = client.get("/api/v1/webhooks/n8n/failure")
    assert response.status_code == 200
    assert "POST" in response.json()["message"]


@pytest.mark.asyncio
async def test_callback_errors_share_detail_body(client, test_settings, job_store, make_job):
    test_settings.conditional_transitions = True
    done = await job_store.insert(make_job(status=JobStatus.COMPLETED, results=RESULTS))

    responses = [
        client.post("/api/v1/webhooks/n8n", json={"jobId": done.id, "results": RESULTS}),
        client.post("/api/v1/webhooks/n8n", json={"results": RESULTS}, headers=AUTH),
        client.post("/api/v1/webhooks/n8n", json={"jobId": done.id, "results": RESULTS}, headers=AUTH),
    ]

    assert [r.status_code for r in responses] == [401, 400, 409]
    assert all(set(r.json()) == {"detail"} for r in responses)
