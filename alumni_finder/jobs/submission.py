"""Job submission: validate a batch, create the job row, dispatch the workflow."""

from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from alumni_finder.errors import (
    BatchValidationError,
    JobAccessDeniedError,
    JobNotFoundError,
    ProfileNotFoundError,
)
from alumni_finder.jobs.models import (
    InputMethod,
    InputName,
    JobRecord,
    JobStatus,
    max_batch_size,
    utcnow,
)
from alumni_finder.jobs.store import JobStore
from alumni_finder.jobs.trigger import BackgroundDispatcher
from alumni_finder.logger import get_logger
from alumni_finder.profiles.models import ProfileRecord
from alumni_finder.profiles.store import ProfileStore

logger = get_logger(__name__)


def validate_batch(
    names: Optional[Iterable[Union[InputName, Mapping[str, Any]]]],
    input_method: InputMethod,
) -> List[InputName]:
    """Check batch size and that every entry has a name and a school.

    Entries are returned as submitted (not trimmed); blank checks are done
    on the trimmed values.
    """
    entries = list(names or [])
    if not entries:
        raise BatchValidationError("At least one name required")

    limit = max_batch_size(input_method)
    if len(entries) > limit:
        raise BatchValidationError(
            f"Maximum {limit} names allowed",
            {"count": len(entries), "input_method": input_method.value},
        )

    validated = []
    for index, entry in enumerate(entries, start=1):
        try:
            item = entry if isinstance(entry, InputName) else InputName.model_validate(entry)
        except ValidationError as e:
            raise BatchValidationError(
                f"Entry {index} must have a name and a school", {"index": index}
            ) from e
        if not item.name.strip() or not item.school.strip():
            raise BatchValidationError(
                f"Entry {index} has an empty name or school", {"index": index}
            )
        validated.append(item)
    return validated


class JobSubmissionService:
    """Creates jobs for a caller and serves the owner-scoped read path."""

    def __init__(
        self,
        job_store: JobStore,
        profile_store: ProfileStore,
        dispatcher: Optional[BackgroundDispatcher] = None,
    ):
        self._jobs = job_store
        self._profiles = profile_store
        self._dispatcher = dispatcher

    async def resolve_profile(self, user_id: str) -> ProfileRecord:
        profile = await self._profiles.get_by_user_id(user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)
        return profile

    async def submit(
        self,
        user_id: str,
        names: Iterable[Union[InputName, Mapping[str, Any]]],
        input_method: InputMethod,
    ) -> JobRecord:
        """Validate, persist as pending, then trigger the workflow in the background."""
        batch = validate_batch(names, input_method)
        profile = await self.resolve_profile(user_id)

        now = utcnow()
        job = JobRecord(
            user_id=profile.id,
            status=JobStatus.PENDING,
            input_method=input_method,
            input_names=batch,
            results=[],
            created_at=now,
            updated_at=now,
            # The batch is handed to the workflow right away; the reaper
            # measures staleness from here.
            processing_started_at=now,
        )
        stored = await self._jobs.insert(job)
        logger.info(
            "Created job %s for profile %s (%d names, %s)",
            stored.id, profile.id, len(batch), input_method.value,
        )

        if self._dispatcher is not None:
            self._dispatcher.dispatch(stored)
        return stored

    async def list_jobs(self, user_id: str) -> List[JobRecord]:
        profile = await self.resolve_profile(user_id)
        return await self._jobs.list_for_user(profile.id)

    async def get_job(self, user_id: str, job_id: str) -> JobRecord:
        """Fetch a job the caller owns.

        A missing job is JobNotFoundError; someone else's job (or a caller
        without a profile) is JobAccessDeniedError.
        """
        job = await self._jobs.get(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        profile = await self._profiles.get_by_user_id(user_id)
        if profile is None or job.user_id != profile.id:
            raise JobAccessDeniedError(job_id)
        return job
