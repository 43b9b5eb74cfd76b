"""Dependency providers for the API routers.

Stores, dispatcher and LLM client are wired in by main.py during lifespan;
tests replace the getters through ``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Depends, HTTPException

from alumni_finder.config import Settings, settings
from alumni_finder.db.supabase_client import get_supabase
from alumni_finder.drafts.service import MessageDraftService
from alumni_finder.jobs.callbacks import WorkflowCallbackHandler
from alumni_finder.jobs.reaper import TimeoutReaper
from alumni_finder.jobs.store import JobStore
from alumni_finder.jobs.submission import JobSubmissionService
from alumni_finder.jobs.trigger import BackgroundDispatcher
from alumni_finder.llm.deepseek_client import DeepSeekClient
from alumni_finder.profiles.store import ProfileStore

# These will be set by main.py during lifespan
_job_store: Optional[JobStore] = None
_profile_store: Optional[ProfileStore] = None
_dispatcher: Optional[BackgroundDispatcher] = None
_llm_client: Optional[DeepSeekClient] = None


def set_job_store(store: Optional[JobStore]) -> None:
    global _job_store
    _job_store = store


def set_profile_store(store: Optional[ProfileStore]) -> None:
    global _profile_store
    _profile_store = store


def set_dispatcher(dispatcher: Optional[BackgroundDispatcher]) -> None:
    global _dispatcher
    _dispatcher = dispatcher


def set_llm_client(client: Optional[DeepSeekClient]) -> None:
    global _llm_client
    _llm_client = client


def get_settings() -> Settings:
    return settings


def get_job_store() -> JobStore:
    if _job_store is None:
        raise HTTPException(status_code=503, detail="Job store not initialized")
    return _job_store


def get_profile_store() -> ProfileStore:
    if _profile_store is None:
        raise HTTPException(status_code=503, detail="Profile store not initialized")
    return _profile_store


def get_dispatcher() -> Optional[BackgroundDispatcher]:
    return _dispatcher


def get_llm_client() -> DeepSeekClient:
    if _llm_client is None:
        raise HTTPException(status_code=503, detail="LLM client not initialized")
    return _llm_client


def get_auth_admin():
    """Supabase auth admin API (service role)."""
    return get_supabase().auth.admin


def get_submission_service(
    job_store: JobStore = Depends(get_job_store),
    profile_store: ProfileStore = Depends(get_profile_store),
    dispatcher: Optional[BackgroundDispatcher] = Depends(get_dispatcher),
) -> JobSubmissionService:
    return JobSubmissionService(job_store, profile_store, dispatcher)


def get_callback_handler(
    job_store: JobStore = Depends(get_job_store),
    settings: Settings = Depends(get_settings),
) -> WorkflowCallbackHandler:
    return WorkflowCallbackHandler(job_store, conditional=settings.conditional_transitions)


def get_reaper(
    job_store: JobStore = Depends(get_job_store),
    settings: Settings = Depends(get_settings),
) -> TimeoutReaper:
    return TimeoutReaper(
        job_store,
        timeout_minutes=settings.job_timeout_minutes,
        conditional=settings.conditional_transitions,
    )


def get_draft_service(
    profile_store: ProfileStore = Depends(get_profile_store),
    job_store: JobStore = Depends(get_job_store),
    llm: DeepSeekClient = Depends(get_llm_client),
) -> MessageDraftService:
    return MessageDraftService(profile_store, job_store, llm)
