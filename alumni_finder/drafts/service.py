"""Message draft generation.

Computes verified commonalities, asks the language model for a draft and
falls back to a fixed template when the model call fails. The fallback is
always flagged (``personalized=False`` plus the error) so callers can tell
the two apart.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from alumni_finder.drafts.commonalities import find_commonalities
from alumni_finder.drafts.prompt import MessageContext, build_prompt, fallback_message
from alumni_finder.errors import LLMError, ProfileIncompleteError
from alumni_finder.jobs.models import JobStatus, utcnow
from alumni_finder.jobs.store import JobStore
from alumni_finder.llm.deepseek_client import DeepSeekClient
from alumni_finder.logger import get_logger
from alumni_finder.profiles.models import ProfileRecord
from alumni_finder.profiles.store import ProfileStore

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You write short, genuine LinkedIn connection requests. You never state "
    "facts about the sender or recipient that you were not given."
)


@dataclass
class DraftResult:
    draft: str
    commonalities: List[str] = field(default_factory=list)
    personalized: bool = True
    error: Optional[str] = None


class MessageDraftService:
    def __init__(self, profile_store: ProfileStore, job_store: JobStore, llm: DeepSeekClient):
        self._profiles = profile_store
        self._jobs = job_store
        self._llm = llm

    async def generate(
        self,
        user_id: str,
        name: str,
        school: str,
        company: Optional[str] = None,
        job_id: Optional[str] = None,
    ) -> DraftResult:
        profile = await self._profiles.get_by_user_id(user_id)
        if profile is None or not profile.sender_profile.is_complete:
            raise ProfileIncompleteError(
                "Please complete your profile in Settings to generate personalized messages"
            )

        sender = profile.sender_profile
        commonalities = find_commonalities(sender, school, company)
        context = MessageContext(
            recipient_name=name,
            recipient_school=school,
            recipient_company=company,
            sender_name=profile.full_name or None,
            sender_title=sender.current_role or None,
            sender_company=sender.current_company or None,
            sender_interests=sender.interests,
            commonalities=commonalities,
        )

        try:
            draft = await self._llm.chat(
                [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(context)},
                ],
                temperature=0.7,
                max_tokens=200,
            )
            result = DraftResult(draft=draft, commonalities=commonalities)
        except LLMError as e:
            logger.warning("Draft generation failed for %s, using fallback: %s", name, e)
            result = DraftResult(
                draft=fallback_message(name, school),
                commonalities=commonalities,
                personalized=False,
                error=e.message,
            )

        if job_id:
            await self._append_to_job(profile, job_id, name, school, company, result)
        return result

    async def _append_to_job(
        self,
        profile: ProfileRecord,
        job_id: str,
        name: str,
        school: str,
        company: Optional[str],
        result: DraftResult,
    ) -> bool:
        """Best effort: record the draft on the caller's completed job."""
        try:
            job = await self._jobs.get(job_id)
            if job is None or job.user_id != profile.id:
                logger.warning("Draft not saved: job %s not found for profile %s", job_id, profile.id)
                return False
            if job.status != JobStatus.COMPLETED:
                logger.warning("Draft not saved: job %s is %s", job_id, job.status.value)
                return False

            entry = {
                "type": "message_draft",
                "name": name,
                "school": school,
                "company": company,
                "draft": result.draft,
                "commonalities": result.commonalities,
                "personalized": result.personalized,
                "generatedAt": utcnow().isoformat(),
            }
            await self._jobs.update(
                job_id,
                {"results": [*job.results, entry], "updated_at": utcnow().isoformat()},
            )
            return True
        except Exception as e:
            logger.error("Failed to save draft to job %s: %s", job_id, e)
            return False
