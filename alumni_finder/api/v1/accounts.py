"""Account signup. Creates the auth user and its empty profile row.

Session issuance stays with the Supabase client SDK in the browser.
"""

import asyncio

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from alumni_finder.api.deps import get_auth_admin, get_profile_store
from alumni_finder.errors import InvalidInputError
from alumni_finder.logger import get_logger
from alumni_finder.profiles.store import ProfileStore

router = APIRouter()
logger = get_logger(__name__)


class SignupRequest(BaseModel):
    email: str = ""
    password: str = ""


@router.post("/auth/signup", status_code=201)
async def signup(
    request: SignupRequest,
    admin=Depends(get_auth_admin),
    profiles: ProfileStore = Depends(get_profile_store),
):
    if not request.email or not request.password:
        raise InvalidInputError("Email and password required")

    attributes = {"email": request.email, "password": request.password, "email_confirm": False}
    loop = asyncio.get_running_loop()
    try:
        response = await loop.run_in_executor(None, admin.create_user, attributes)
    except Exception as e:
        logger.info("Signup rejected for %s: %s", request.email, e)
        raise InvalidInputError(str(e)) from e

    user = response.user
    await profiles.create(str(user.id), user.email)
    logger.info("Created account and profile for user %s", user.id)
    return {
        "message": "User created successfully",
        "user": {"id": str(user.id), "email": user.email},
    }
