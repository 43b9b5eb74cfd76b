"""In-memory job store for local development and tests.

No external dependencies (Supabase) needed. Each method completes without
awaiting, so every write is atomic with respect to the event loop.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from alumni_finder.jobs.models import ACTIVE_STATUSES, JobRecord, JobStatus
from alumni_finder.jobs.store import JobStore


class InMemoryJobStore(JobStore):
    """Dict-backed JobStore with the same filter semantics as the Supabase one."""

    def __init__(self):
        self._jobs: Dict[str, JobRecord] = {}

    async def insert(self, job: JobRecord) -> JobRecord:
        self._jobs[job.id] = job.model_copy(deep=True)
        return job.model_copy(deep=True)

    async def get(self, job_id: str) -> Optional[JobRecord]:
        job = self._jobs.get(job_id)
        return job.model_copy(deep=True) if job else None

    async def list_for_user(self, user_id: str) -> List[JobRecord]:
        jobs = [j for j in self._jobs.values() if j.user_id == user_id]
        jobs.sort(key=lambda j: j.created_at, reverse=True)
        return [j.model_copy(deep=True) for j in jobs]

    async def update(self, job_id, fields, only_statuses=None) -> int:
        return len(await self.update_many([job_id], fields, only_statuses))

    async def update_many(
        self,
        job_ids: Sequence[str],
        fields: Dict[str, Any],
        only_statuses: Optional[Sequence[JobStatus]] = None,
    ) -> List[str]:
        allowed = {JobStatus(s) for s in only_statuses} if only_statuses else None
        changed = []
        for job_id in job_ids:
            job = self._jobs.get(job_id)
            if job is None:
                continue
            if allowed is not None and job.status not in allowed:
                continue
            self._jobs[job_id] = JobRecord.model_validate({**job.to_row(), **fields})
            changed.append(job_id)
        return changed

    async def find_stale(self, cutoff: datetime) -> List[JobRecord]:
        return [
            j.model_copy(deep=True)
            for j in self._jobs.values()
            if j.status in ACTIVE_STATUSES
            and j.processing_started_at is not None
            and j.processing_started_at < cutoff
        ]
