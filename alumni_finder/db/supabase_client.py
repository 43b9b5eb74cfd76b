"""Service-role and anon Supabase client singletons."""

from supabase import create_client, Client
from alumni_finder.config import settings

_client: Client | None = None
_anon_client: Client | None = None


def get_supabase() -> Client:
    """Get or create the Supabase client using the service role key."""
    global _client
    if _client is None:
        if not settings.supabase_url or not settings.supabase_service_role_key:
            raise RuntimeError(
                "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set"
            )
        _client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )
    return _client


def get_supabase_anon() -> Client:
    """Get or create the anon-key client used to validate user tokens."""
    global _anon_client
    if _anon_client is None:
        if not settings.supabase_url or not settings.supabase_anon_key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")
        _anon_client = create_client(settings.supabase_url, settings.supabase_anon_key)
    return _anon_client
