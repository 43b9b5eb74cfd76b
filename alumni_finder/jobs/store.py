"""Job store interface and the Supabase-backed implementation."""

import asyncio
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from alumni_finder.errors import StoreError
from alumni_finder.jobs.models import ACTIVE_STATUSES, JobRecord, JobStatus
from alumni_finder.logger import get_logger

logger = get_logger(__name__)

JOBS_TABLE = "jobs"


class JobStore(ABC):
    """Row-level access to the jobs table.

    Every mutation is a single statement filtered by id; there are no
    multi-row transactions and no locking.
    """

    @abstractmethod
    async def insert(self, job: JobRecord) -> JobRecord:
        """Persist a new job and return the stored row."""
        ...

    @abstractmethod
    async def get(self, job_id: str) -> Optional[JobRecord]:
        ...

    @abstractmethod
    async def list_for_user(self, user_id: str) -> List[JobRecord]:
        """All jobs owned by a profile, newest first."""
        ...

    @abstractmethod
    async def update(
        self,
        job_id: str,
        fields: Dict[str, Any],
        only_statuses: Optional[Sequence[JobStatus]] = None,
    ) -> int:
        """Apply ``fields`` to one job. Returns the number of rows changed.

        With ``only_statuses`` the write only lands if the row's current
        status is one of them.
        """
        ...

    @abstractmethod
    async def update_many(
        self,
        job_ids: Sequence[str],
        fields: Dict[str, Any],
        only_statuses: Optional[Sequence[JobStatus]] = None,
    ) -> List[str]:
        """Apply ``fields`` to several jobs. Returns the ids actually changed."""
        ...

    @abstractmethod
    async def find_stale(self, cutoff: datetime) -> List[JobRecord]:
        """Active jobs whose processing_started_at is strictly before ``cutoff``."""
        ...


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class SupabaseJobStore(JobStore):
    """JobStore over the Supabase (PostgREST) ``jobs`` table.

    supabase-py is synchronous, so each call runs in the default thread
    executor to keep the event loop free.
    """

    def __init__(self, client_factory: Callable):
        self._client_factory = client_factory

    async def _run(self, op: str, fn: Callable):
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, fn)
        except Exception as e:
            logger.error("Supabase %s failed: %s", op, e)
            raise StoreError(f"Database error during {op}", {"error": str(e)}) from e

    def _table(self):
        return self._client_factory().table(JOBS_TABLE)

    async def insert(self, job: JobRecord) -> JobRecord:
        def _insert():
            return self._table().insert(job.to_row()).execute()

        response = await self._run("insert", _insert)
        if not response.data:
            raise StoreError("Insert returned no row", {"job_id": job.id})
        return JobRecord.model_validate(response.data[0])

    async def get(self, job_id: str) -> Optional[JobRecord]:
        # Postgres rejects malformed uuids; treat them as missing rows
        if not _is_uuid(job_id):
            return None

        def _get():
            return self._table().select("*").eq("id", job_id).limit(1).execute()

        response = await self._run("get", _get)
        if not response.data:
            return None
        return JobRecord.model_validate(response.data[0])

    async def list_for_user(self, user_id: str) -> List[JobRecord]:
        def _list():
            return (
                self._table()
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )

        response = await self._run("list", _list)
        return [JobRecord.model_validate(row) for row in response.data or []]

    async def update(self, job_id, fields, only_statuses=None) -> int:
        if not _is_uuid(job_id):
            return 0
        return len(await self.update_many([job_id], fields, only_statuses))

    async def update_many(self, job_ids, fields, only_statuses=None) -> List[str]:
        ids = [job_id for job_id in job_ids if _is_uuid(job_id)]
        if not ids:
            return []

        def _update():
            query = self._table().update(fields)
            query = query.eq("id", ids[0]) if len(ids) == 1 else query.in_("id", ids)
            if only_statuses:
                query = query.in_("status", [JobStatus(s).value for s in only_statuses])
            return query.execute()

        response = await self._run("update", _update)
        return [row["id"] for row in response.data or []]

    async def find_stale(self, cutoff: datetime) -> List[JobRecord]:
        def _select():
            return (
                self._table()
                .select("*")
                .in_("status", [s.value for s in ACTIVE_STATUSES])
                .lt("processing_started_at", cutoff.isoformat())
                .execute()
            )

        response = await self._run("find_stale", _select)
        return [JobRecord.model_validate(row) for row in response.data or []]
