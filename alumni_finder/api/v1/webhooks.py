"""Workflow callback endpoints.

The shared secret is checked as a dependency, before the body is read.
Both endpoints feed the same parser; the failure endpoint and the
``X-Callback-Type: failure`` header are only hints.
"""

from fastapi import APIRouter, Depends, Header, Request

from alumni_finder.api.deps import get_callback_handler
from alumni_finder.auth.supabase_auth import verify_callback_secret
from alumni_finder.jobs.callbacks import (
    WorkflowCallbackHandler,
    decode_callback_body,
    parse_callback,
)
from alumni_finder.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


async def _process(request: Request, handler: WorkflowCallbackHandler, failure_hint: bool):
    body = decode_callback_body(await request.body())
    callback = parse_callback(body, failure_hint=failure_hint)
    logger.info("Workflow callback for job %s (%s)", callback.job_id, type(callback).__name__)
    outcome = await handler.handle(callback)
    return {"success": True, "message": outcome.message, "jobId": outcome.job_id}


@router.post("/webhooks/n8n")
async def workflow_callback(
    request: Request,
    _: None = Depends(verify_callback_secret),
    handler: WorkflowCallbackHandler = Depends(get_callback_handler),
    x_callback_type: str = Header(None),
):
    """Receive a success or failure report from the search workflow."""
    failure_hint = (
        (x_callback_type or "").lower() == "failure"
        or request.query_params.get("type") == "failure"
    )
    return await _process(request, handler, failure_hint)


@router.post("/webhooks/n8n/failure")
async def workflow_failure_callback(
    request: Request,
    _: None = Depends(verify_callback_secret),
    handler: WorkflowCallbackHandler = Depends(get_callback_handler),
):
    """Dedicated failure endpoint used by the workflow's error branch."""
    return await _process(request, handler, failure_hint=True)


@router.get("/webhooks/n8n/failure")
async def workflow_failure_probe():
    return {"message": "Failure webhook endpoint is working. Use POST to report failures."}
