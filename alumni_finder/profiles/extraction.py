"""Extract a structured sender profile from free-text biography."""

import json
import re

from alumni_finder.errors import ProfileExtractionError
from alumni_finder.llm.deepseek_client import DeepSeekClient
from alumni_finder.logger import get_logger
from alumni_finder.profiles.models import SenderProfile

logger = get_logger(__name__)

MIN_PROFILE_TEXT = 50

EXTRACTION_SYSTEM_PROMPT = """You are a data extraction assistant. Extract professional profile information from the given text and return ONLY valid JSON with no additional text or markdown formatting.

Return a JSON object with these exact keys:
- education: array of school/university names
- experience: array of company names (past and present)
- current_company: string (most recent company, or empty string)
- current_role: string (most recent job title, or empty string)
- interests: array of skills, interests, or focus areas (5-10 items)

Example output:
{
  "education": ["University of Hong Kong", "MIT"],
  "experience": ["Google", "Stripe", "Startup Inc"],
  "current_company": "Startup Inc",
  "current_role": "Product Manager",
  "interests": ["AI", "B2B SaaS", "product management", "developer tools", "machine learning"]
}"""

_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END = re.compile(r"\s*```$")


def parse_profile_json(content: str) -> SenderProfile:
    """Parse model output into a SenderProfile, tolerating code fences."""
    cleaned = _FENCE_END.sub("", _FENCE_START.sub("", content.strip())).strip()
    try:
        data = json.loads(cleaned)
    except ValueError as e:
        logger.error("Extraction returned non-JSON content: %.200s", cleaned)
        raise ProfileExtractionError("Failed to parse AI response as JSON") from e
    if not isinstance(data, dict):
        raise ProfileExtractionError("AI response was not a JSON object")
    return SenderProfile.model_validate(data)


async def extract_sender_profile(client: DeepSeekClient, profile_text: str) -> SenderProfile:
    content = await client.chat(
        [
            {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
            {"role": "user", "content": f"Extract profile data from this text:\n\n{profile_text}"},
        ],
        temperature=0.3,
        max_tokens=500,
    )
    return parse_profile_json(content)
