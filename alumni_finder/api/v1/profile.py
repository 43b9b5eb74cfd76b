"""Sender profile endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from alumni_finder.api.deps import get_llm_client, get_profile_store
from alumni_finder.auth.supabase_auth import AuthUser, verify_jwt
from alumni_finder.errors import InvalidInputError, ProfileNotFoundError
from alumni_finder.llm.deepseek_client import DeepSeekClient
from alumni_finder.logger import get_logger
from alumni_finder.profiles.extraction import MIN_PROFILE_TEXT, extract_sender_profile
from alumni_finder.profiles.store import ProfileStore

router = APIRouter()
logger = get_logger(__name__)


class ParseProfileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    profile_text: Optional[str] = Field(default=None, alias="profileText")
    user_name: Optional[str] = Field(default="", alias="userName")


@router.get("/profile")
async def get_profile(
    user: AuthUser = Depends(verify_jwt),
    profiles: ProfileStore = Depends(get_profile_store),
):
    profile = await profiles.get_by_user_id(user.id)
    if profile is None:
        raise ProfileNotFoundError(user.id)
    return profile.model_dump(mode="json")


@router.post("/profile/parse")
async def parse_profile(
    request: ParseProfileRequest,
    user: AuthUser = Depends(verify_jwt),
    profiles: ProfileStore = Depends(get_profile_store),
    llm: DeepSeekClient = Depends(get_llm_client),
):
    """Extract structured profile data from a biography and store it."""
    text = (request.profile_text or "").strip()
    if len(text) < MIN_PROFILE_TEXT:
        raise InvalidInputError(
            f"Profile text too short. Please provide at least {MIN_PROFILE_TEXT} characters."
        )

    profile = await extract_sender_profile(llm, text)
    updated = await profiles.save_sender_profile(user.id, profile, text, request.user_name or "")
    if updated == 0:
        raise ProfileNotFoundError(user.id)

    logger.info("Stored sender profile for user %s", user.id)
    return {"success": True, "profile": profile.model_dump()}
