"""Health check endpoint."""

from fastapi import APIRouter, Depends
import platform
import sys

from alumni_finder.api.deps import get_dispatcher, get_settings
from alumni_finder.config import Settings

router = APIRouter()


@router.get("/health")
async def health_check(
    settings: Settings = Depends(get_settings),
    dispatcher=Depends(get_dispatcher),
):
    """Service health and which collaborators are configured."""
    return {
        "status": "healthy",
        "store_backend": settings.store_backend,
        "workflow_mode": "webhook" if settings.workflow_webhook_url else "simulated",
        "callback_secret_configured": bool(settings.workflow_callback_secret),
        "cron_secret_configured": bool(settings.cron_secret),
        "llm_configured": bool(settings.deepseek_api_key),
        "pending_dispatches": dispatcher.pending if dispatcher else 0,
        "python_version": sys.version,
        "platform": platform.platform(),
    }
