"""Aggregate all v1 API routers."""

from fastapi import APIRouter
from alumni_finder.api.v1.health import router as health_router
from alumni_finder.api.v1.accounts import router as accounts_router
from alumni_finder.api.v1.jobs import router as jobs_router
from alumni_finder.api.v1.webhooks import router as webhooks_router
from alumni_finder.api.v1.drafts import router as drafts_router
from alumni_finder.api.v1.profile import router as profile_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(health_router, tags=["health"])
v1_router.include_router(accounts_router, tags=["auth"])
v1_router.include_router(jobs_router, tags=["jobs"])
v1_router.include_router(webhooks_router, tags=["webhooks"])
v1_router.include_router(drafts_router, tags=["drafts"])
v1_router.include_router(profile_router, tags=["profile"])
