"""Job management API: batch submission, polling and timeout sweeps."""

from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel, ConfigDict, Field

from alumni_finder.api.deps import get_reaper, get_submission_service
from alumni_finder.auth.supabase_auth import AuthUser, verify_cron_secret, verify_jwt
from alumni_finder.jobs.csv_parser import MAX_FILE_BYTES, parse_batch_file
from alumni_finder.errors import BatchValidationError
from alumni_finder.jobs.models import InputMethod, InputName, JobRecord
from alumni_finder.jobs.reaper import TimeoutReaper
from alumni_finder.jobs.submission import JobSubmissionService

router = APIRouter()


class CreateJobRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    names: List[InputName] = Field(default_factory=list)
    input_method: InputMethod = Field(alias="inputMethod")


def _created_response(job: JobRecord) -> dict:
    return {
        "jobId": job.id,
        "status": job.status.value,
        "inputMethod": job.input_method.value,
        "inputNames": [n.model_dump() for n in job.input_names],
        "createdAt": job.created_at.isoformat(),
    }


@router.get("/jobs")
async def list_jobs(
    user: AuthUser = Depends(verify_jwt),
    service: JobSubmissionService = Depends(get_submission_service),
):
    """All of the caller's jobs, newest first."""
    jobs = await service.list_jobs(user.id)
    return {"jobs": [job.to_row() for job in jobs]}


@router.post("/jobs", status_code=201)
async def create_job(
    request: CreateJobRequest,
    user: AuthUser = Depends(verify_jwt),
    service: JobSubmissionService = Depends(get_submission_service),
):
    """Submit a batch of (name, school) pairs. Poll GET /api/v1/jobs/{id} for status."""
    job = await service.submit(user.id, request.names, request.input_method)
    return _created_response(job)


@router.post("/jobs/upload", status_code=201)
async def upload_job_file(
    file: UploadFile = File(...),
    user: AuthUser = Depends(verify_jwt),
    service: JobSubmissionService = Depends(get_submission_service),
):
    """Submit a CSV with Name and School columns as a file_upload batch."""
    # Read one byte past the limit so oversize files are detected without
    # buffering all of them
    content = await file.read(MAX_FILE_BYTES + 1)
    if len(content) > MAX_FILE_BYTES:
        raise BatchValidationError("File size exceeds 5MB limit")
    names = parse_batch_file(file.filename or "", content)
    job = await service.submit(user.id, names, InputMethod.FILE_UPLOAD)
    return _created_response(job)


@router.post("/jobs/check-timeouts")
async def check_timeouts(
    _: None = Depends(verify_cron_secret),
    reaper: TimeoutReaper = Depends(get_reaper),
):
    """Cron entry point: fail jobs stuck past the timeout window."""
    result = await reaper.sweep()
    return {"success": True, "timedOutJobs": result.count}


@router.post("/jobs/{job_id}/timeout")
async def time_out_job(
    job_id: str,
    _: None = Depends(verify_cron_secret),
    reaper: TimeoutReaper = Depends(get_reaper),
):
    await reaper.time_out(job_id)
    return {"success": True}


@router.get("/jobs/{job_id}")
async def get_job(
    job_id: str,
    user: AuthUser = Depends(verify_jwt),
    service: JobSubmissionService = Depends(get_submission_service),
):
    """Get the current status and results of one of the caller's jobs."""
    job = await service.get_job(user.id, job_id)
    return job.to_row()
