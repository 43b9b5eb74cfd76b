"""Workflow callback reconciliation.

The search workflow reports each job's outcome out-of-band. Payloads have
drifted over time (dedicated failure endpoint, a type header, bodies that
simply omit ``results``), so every shape goes through ``parse_callback``,
which decides success vs failure from the presence of results alone.

Transitions are applied by job id without checking the current status:
replaying a callback converges to the same terminal state, and a late
success overwrites a reaper-induced failure (last writer wins). Set
``conditional=True`` to only move jobs that are still pending/processing.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from alumni_finder.errors import CallbackPayloadError, TransitionConflictError
from alumni_finder.jobs.models import (
    ACTIVE_STATUSES,
    JobResult,
    JobStatus,
    completion_fields,
    failure_fields,
)
from alumni_finder.jobs.store import JobStore
from alumni_finder.logger import get_logger

logger = get_logger(__name__)

DEFAULT_FAILURE_MESSAGE = "Workflow failed"

_datetime_adapter = TypeAdapter(datetime)


@dataclass
class SuccessCallback:
    job_id: str
    results: List[JobResult]
    completed_at: Optional[datetime] = None


@dataclass
class FailureCallback:
    job_id: str
    error: str = DEFAULT_FAILURE_MESSAGE


Callback = Union[SuccessCallback, FailureCallback]


@dataclass
class CallbackOutcome:
    job_id: str
    status: JobStatus
    rows_updated: int
    message: str


def decode_callback_body(raw: bytes) -> Dict[str, Any]:
    """Decode a raw request body into a JSON object."""
    if not raw or not raw.strip():
        raise CallbackPayloadError("Empty body")
    try:
        body = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as e:
        raise CallbackPayloadError("Invalid JSON") from e
    if not isinstance(body, dict):
        raise CallbackPayloadError("Body must be a JSON object")
    return body


def _extract_job_id(body: Dict[str, Any]) -> str:
    execution = body.get("execution")
    job_id = body.get("jobId")
    if not job_id and isinstance(execution, dict):
        job_id = execution.get("jobId")
    if not isinstance(job_id, str) or not job_id.strip():
        raise CallbackPayloadError("Missing jobId")
    return job_id.strip()


def _extract_error(body: Dict[str, Any]) -> str:
    error = body.get("error")
    if isinstance(error, dict):
        error = error.get("message")
    if not error:
        execution = body.get("execution")
        if isinstance(execution, dict) and isinstance(execution.get("error"), dict):
            error = execution["error"].get("message")
    if isinstance(error, str) and error.strip():
        return error.strip()
    return DEFAULT_FAILURE_MESSAGE


def _looks_successful(body: Dict[str, Any]) -> bool:
    return (
        "results" in body
        or body.get("completedAt") is not None
        or body.get("status") == JobStatus.COMPLETED.value
        or body.get("success") is True
    )


def parse_callback(body: Dict[str, Any], failure_hint: bool = False) -> Callback:
    """Discriminate a callback body into a success or failure variant.

    A non-empty ``results`` list means success, whatever any type tag says.
    A success-shaped body without usable results is rejected. Anything else
    is a failure report.
    """
    job_id = _extract_job_id(body)
    results = body.get("results")

    if isinstance(results, list) and results:
        if failure_hint:
            logger.warning("Job %s: failure-tagged callback carries results; treating as success", job_id)
        try:
            parsed = [JobResult.model_validate(item) for item in results]
        except ValidationError as e:
            raise CallbackPayloadError("Invalid results", {"job_id": job_id}) from e

        completed_at = None
        if body.get("completedAt") is not None:
            try:
                completed_at = _datetime_adapter.validate_python(body["completedAt"])
            except ValidationError as e:
                raise CallbackPayloadError("Invalid completedAt", {"job_id": job_id}) from e
        return SuccessCallback(job_id=job_id, results=parsed, completed_at=completed_at)

    if not failure_hint and _looks_successful(body):
        raise CallbackPayloadError("Missing required fields", {"job_id": job_id})

    return FailureCallback(job_id=job_id, error=_extract_error(body))


class WorkflowCallbackHandler:
    """Applies parsed callbacks to the job store."""

    def __init__(self, job_store: JobStore, conditional: bool = False):
        self._jobs = job_store
        self._conditional = conditional

    async def handle(self, callback: Callback) -> CallbackOutcome:
        if isinstance(callback, SuccessCallback):
            fields = completion_fields(
                [r.model_dump(by_alias=True) for r in callback.results],
                completed_at=callback.completed_at,
            )
            status = JobStatus.COMPLETED
            message = "Job updated successfully"
        else:
            fields = failure_fields(callback.error)
            status = JobStatus.FAILED
            message = "Job marked as failed"

        only = ACTIVE_STATUSES if self._conditional else None
        rows = await self._jobs.update(callback.job_id, fields, only_statuses=only)

        if rows == 0:
            if self._conditional and await self._jobs.get(callback.job_id) is not None:
                logger.warning("Job %s already terminal; %s callback ignored", callback.job_id, status.value)
                raise TransitionConflictError(callback.job_id)
            # Unknown ids are indistinguishable from no-op writes
            logger.info("Callback for job %s matched no rows", callback.job_id)
        else:
            logger.info("Job %s -> %s via workflow callback", callback.job_id, status.value)

        return CallbackOutcome(
            job_id=callback.job_id,
            status=status,
            rows_updated=rows,
            message=message,
        )
