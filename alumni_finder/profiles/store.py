"""Profile store interface with Supabase and in-memory implementations."""

import asyncio
import uuid
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from alumni_finder.errors import StoreError
from alumni_finder.jobs.models import utcnow
from alumni_finder.logger import get_logger
from alumni_finder.profiles.models import ProfileRecord, SenderProfile

logger = get_logger(__name__)

PROFILES_TABLE = "profiles"


class ProfileStore(ABC):
    """Access to per-user profile rows, keyed by the auth user id."""

    @abstractmethod
    async def get_by_user_id(self, user_id: str) -> Optional[ProfileRecord]:
        ...

    @abstractmethod
    async def create(self, user_id: str, email: Optional[str]) -> ProfileRecord:
        """Create the empty profile that accompanies a new account."""
        ...

    @abstractmethod
    async def save_sender_profile(
        self,
        user_id: str,
        profile: SenderProfile,
        raw_text: str,
        full_name: str,
    ) -> int:
        """Overwrite the structured profile wholesale. Returns rows changed."""
        ...


class SupabaseProfileStore(ProfileStore):
    def __init__(self, client_factory: Callable):
        self._client_factory = client_factory

    async def _run(self, op: str, fn: Callable):
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, fn)
        except Exception as e:
            logger.error("Supabase profile %s failed: %s", op, e)
            raise StoreError(f"Database error during profile {op}", {"error": str(e)}) from e

    def _table(self):
        return self._client_factory().table(PROFILES_TABLE)

    async def get_by_user_id(self, user_id: str) -> Optional[ProfileRecord]:
        response = await self._run(
            "get",
            lambda: self._table().select("*").eq("user_id", user_id).limit(1).execute(),
        )
        if not response.data:
            return None
        return ProfileRecord.model_validate(response.data[0])

    async def create(self, user_id: str, email: Optional[str]) -> ProfileRecord:
        row = {"user_id": user_id, "email": email}
        response = await self._run("create", lambda: self._table().insert(row).execute())
        if not response.data:
            raise StoreError("Profile insert returned no row", {"user_id": user_id})
        return ProfileRecord.model_validate(response.data[0])

    async def save_sender_profile(self, user_id, profile, raw_text, full_name) -> int:
        fields = {
            "sender_profile": profile.model_dump(),
            "profile_raw_text": raw_text,
            "full_name": full_name,
            "updated_at": utcnow().isoformat(),
        }
        response = await self._run(
            "update",
            lambda: self._table().update(fields).eq("user_id", user_id).execute(),
        )
        return len(response.data or [])


class InMemoryProfileStore(ProfileStore):
    """Dict-backed ProfileStore for local development and tests."""

    def __init__(self):
        self._profiles: Dict[str, ProfileRecord] = {}

    def add(self, profile: ProfileRecord) -> ProfileRecord:
        self._profiles[profile.user_id] = profile
        return profile

    async def get_by_user_id(self, user_id: str) -> Optional[ProfileRecord]:
        profile = self._profiles.get(user_id)
        return profile.model_copy(deep=True) if profile else None

    async def create(self, user_id: str, email: Optional[str]) -> ProfileRecord:
        now = utcnow()
        return self.add(
            ProfileRecord(
                id=str(uuid.uuid4()),
                user_id=user_id,
                email=email,
                created_at=now,
                updated_at=now,
            )
        )

    async def save_sender_profile(self, user_id, profile, raw_text, full_name) -> int:
        existing = self._profiles.get(user_id)
        if existing is None:
            return 0
        self._profiles[user_id] = existing.model_copy(
            update={
                "sender_profile": profile,
                "profile_raw_text": raw_text,
                "full_name": full_name,
                "updated_at": utcnow(),
            }
        )
        return 1
