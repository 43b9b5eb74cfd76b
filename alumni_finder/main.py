"""Alumni Finder API - FastAPI application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from alumni_finder.config import settings
from alumni_finder.api import deps
from alumni_finder.api.errors import register_exception_handlers
from alumni_finder.api.v1.router import v1_router
from alumni_finder.api.v1.health import router as health_root_router
from alumni_finder.db.supabase_client import get_supabase
from alumni_finder.jobs.memory_store import InMemoryJobStore
from alumni_finder.jobs.store import SupabaseJobStore
from alumni_finder.jobs.trigger import BackgroundDispatcher, build_trigger
from alumni_finder.llm.deepseek_client import DeepSeekClient
from alumni_finder.logger import configure_logging, get_logger
from alumni_finder.profiles.store import InMemoryProfileStore, SupabaseProfileStore

logger = get_logger(__name__)


def build_stores(backend: str):
    """Return (job_store, profile_store) for the configured backend."""
    if backend == "memory":
        return InMemoryJobStore(), InMemoryProfileStore()
    if backend == "supabase":
        return SupabaseJobStore(get_supabase), SupabaseProfileStore(get_supabase)
    raise ValueError(f"Unknown store backend: {backend}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic."""
    configure_logging(settings.log_level)
    logger.info("Starting Alumni Finder API on port %d", settings.api_port)
    logger.info("Store backend: %s", settings.store_backend)

    job_store, profile_store = build_stores(settings.store_backend)
    trigger = build_trigger(
        settings.workflow_webhook_url,
        settings.workflow_webhook_secret,
        job_store,
        timeout=settings.workflow_trigger_timeout_seconds,
        simulated_delay=settings.simulated_completion_delay_seconds,
    )
    dispatcher = BackgroundDispatcher(trigger)

    # Wire collaborators into the API dependencies
    deps.set_job_store(job_store)
    deps.set_profile_store(profile_store)
    deps.set_dispatcher(dispatcher)
    deps.set_llm_client(
        DeepSeekClient(
            settings.deepseek_api_key,
            base_url=settings.deepseek_base_url,
            model=settings.deepseek_model,
            timeout=settings.deepseek_timeout_seconds,
        )
    )
    if not settings.workflow_callback_secret:
        logger.warning("WORKFLOW_CALLBACK_SECRET is not set; all workflow callbacks will be rejected")
    if not settings.cron_secret:
        logger.warning("CRON_SECRET is not set; timeout sweeps will be rejected")

    yield

    # Shutdown
    logger.info("Shutting down Alumni Finder API")
    await dispatcher.stop()
    deps.set_dispatcher(None)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Alumni Finder API",
        description="Batch LinkedIn alumni lookup with workflow callbacks and outreach drafts",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Mount routers
    app.include_router(health_root_router, tags=["health"])  # GET /health at root
    app.include_router(v1_router)  # All /api/v1/* endpoints
    return app


app = create_app()
