"""Message draft endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from alumni_finder.api.deps import get_draft_service
from alumni_finder.auth.supabase_auth import AuthUser, verify_jwt
from alumni_finder.drafts.service import MessageDraftService
from alumni_finder.errors import ProfileIncompleteError

router = APIRouter()


class DraftRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    school: str
    company: Optional[str] = None
    job_id: Optional[str] = Field(default=None, alias="jobId")

    @field_validator("name", "school")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value.strip()


@router.post("/drafts")
async def create_draft(
    request: DraftRequest,
    user: AuthUser = Depends(verify_jwt),
    service: MessageDraftService = Depends(get_draft_service),
):
    """Generate a connection request draft for one recipient.

    Model failures still return 200 with the fallback template, marked
    ``personalized: false`` and carrying the error.
    """
    try:
        result = await service.generate(
            user.id,
            request.name,
            request.school,
            company=request.company,
            job_id=request.job_id,
        )
    except ProfileIncompleteError as e:
        return JSONResponse(status_code=400, content={"needsProfile": True, "error": e.message})

    response = {
        "draft": result.draft,
        "commonalities": result.commonalities,
        "personalized": result.personalized,
    }
    if result.error:
        response["error"] = result.error
    return response
