"""Timeout reaper: force-fails jobs the workflow never reported back on.

Invoked by an external cron; it never schedules itself. Selecting by
status and cutoff makes the sweep safe to re-run: jobs already failed are
no longer selected.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from alumni_finder.errors import JobNotFoundError, TransitionConflictError
from alumni_finder.jobs.models import (
    ACTIVE_STATUSES,
    failure_fields,
    timeout_message,
    utcnow,
)
from alumni_finder.jobs.store import JobStore
from alumni_finder.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_MINUTES = 10


@dataclass
class SweepResult:
    cutoff: datetime
    timed_out_ids: List[str]

    @property
    def count(self) -> int:
        return len(self.timed_out_ids)


class TimeoutReaper:
    def __init__(
        self,
        job_store: JobStore,
        timeout_minutes: int = DEFAULT_TIMEOUT_MINUTES,
        conditional: bool = False,
    ):
        self._jobs = job_store
        self._timeout_minutes = timeout_minutes
        self._conditional = conditional

    @property
    def timeout_minutes(self) -> int:
        return self._timeout_minutes

    def _guard(self):
        return ACTIVE_STATUSES if self._conditional else None

    def cutoff(self, now: Optional[datetime] = None) -> datetime:
        return (now or utcnow()) - timedelta(minutes=self._timeout_minutes)

    async def sweep(self, now: Optional[datetime] = None) -> SweepResult:
        """Fail every active job whose processing started before the cutoff."""
        now = now or utcnow()
        cutoff = self.cutoff(now)
        stuck = await self._jobs.find_stale(cutoff)
        if not stuck:
            return SweepResult(cutoff=cutoff, timed_out_ids=[])

        # In conditional mode a callback may finish a job between the select
        # and the write; only rows the write actually moved are reported
        ids = await self._jobs.update_many(
            [job.id for job in stuck],
            failure_fields(timeout_message(self._timeout_minutes), now=now),
            only_statuses=self._guard(),
        )
        skipped = len(stuck) - len(ids)
        if skipped:
            logger.info("%d stale jobs finished before the timeout write", skipped)
        logger.info("Marked %d jobs as timed out (cutoff %s)", len(ids), cutoff.isoformat())
        return SweepResult(cutoff=cutoff, timed_out_ids=ids)

    async def time_out(self, job_id: str, now: Optional[datetime] = None) -> None:
        """Force a single job to the timed-out failure state."""
        rows = await self._jobs.update(
            job_id,
            failure_fields(timeout_message(self._timeout_minutes), now=now),
            only_statuses=self._guard(),
        )
        if rows == 0:
            if self._conditional and await self._jobs.get(job_id) is not None:
                raise TransitionConflictError(job_id)
            raise JobNotFoundError(job_id)
        logger.info("Job %s manually timed out", job_id)
