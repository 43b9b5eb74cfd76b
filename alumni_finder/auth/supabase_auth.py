"""Authentication dependencies for FastAPI.

User requests carry a Supabase JWT; the workflow callback and the cron
sweep carry shared secrets of their own.
"""

import asyncio
import hmac
from typing import Optional

from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel

from alumni_finder.api.deps import get_settings
from alumni_finder.config import Settings
from alumni_finder.db.supabase_client import get_supabase_anon
from alumni_finder.logger import get_logger

logger = get_logger(__name__)


class AuthUser(BaseModel):
    id: str
    email: Optional[str] = None


def secrets_match(provided: Optional[str], expected: Optional[str]) -> bool:
    """Constant-time comparison; an unset server secret never matches."""
    if not provided or not expected:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())


async def verify_jwt(authorization: str = Header(None)) -> AuthUser:
    """Validate Supabase JWT from Authorization header.

    Returns the authenticated user.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized")

    token = authorization.replace("Bearer ", "", 1)
    loop = asyncio.get_running_loop()
    try:
        client = get_supabase_anon()
        # supabase-py auth calls are blocking HTTP
        user_response = await loop.run_in_executor(None, client.auth.get_user, token)
    except Exception as e:
        logger.info("Token validation failed: %s", e)
        raise HTTPException(status_code=401, detail="Invalid token")

    user = getattr(user_response, "user", None)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    return AuthUser(id=str(user.id), email=getattr(user, "email", None))


async def verify_callback_secret(
    x_n8n_secret: str = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject workflow callbacks without the shared callback secret."""
    if not secrets_match(x_n8n_secret, settings.workflow_callback_secret):
        logger.warning("Workflow callback rejected: secret mismatch")
        raise HTTPException(status_code=401, detail="Unauthorized")


async def verify_cron_secret(
    authorization: str = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Reject timeout sweeps without ``Authorization: Bearer <cron secret>``."""
    token = None
    if authorization and authorization.startswith("Bearer "):
        token = authorization.replace("Bearer ", "", 1)
    if not secrets_match(token, settings.cron_secret):
        logger.warning("Timeout sweep rejected: cron auth failed")
        raise HTTPException(status_code=401, detail="Unauthorized")
