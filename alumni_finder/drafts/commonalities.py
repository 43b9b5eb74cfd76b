"""Verified sender/recipient commonalities.

Only exact (trimmed, case-insensitive) matches count. Education outranks
company, so it is always reported first.
"""

from typing import Iterable, List, Optional

from alumni_finder.profiles.models import SenderProfile


def _normalize(value: str) -> str:
    return value.strip().casefold()


def _contains(candidates: Iterable[str], target: str) -> bool:
    wanted = _normalize(target)
    return any(_normalize(c) == wanted for c in candidates)


def find_commonalities(
    sender: SenderProfile,
    school: str,
    company: Optional[str] = None,
) -> List[str]:
    commonalities = []

    if school and school.strip() and _contains(sender.education, school):
        commonalities.append(f"Both attended {school.strip()}")

    if company and company.strip() and _contains(sender.experience, company):
        commonalities.append(f"Both have experience at {company.strip()}")

    return commonalities
