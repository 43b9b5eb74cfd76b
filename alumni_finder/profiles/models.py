"""Sender profile data model."""

from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, Field, field_validator


class SenderProfile(BaseModel):
    """Structured personalization data extracted from a user's biography."""
    education: List[str] = Field(default_factory=list)
    experience: List[str] = Field(default_factory=list)
    current_company: str = ""
    current_role: str = ""
    interests: List[str] = Field(default_factory=list)

    @field_validator("education", "experience", "interests", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [str(v).strip() for v in value if v is not None and str(v).strip()]

    @field_validator("current_company", "current_role", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        return str(value).strip() if value else ""

    @property
    def is_complete(self) -> bool:
        """Enough data to personalize a message."""
        return bool(self.education) or bool(self.current_role)


class ProfileRecord(BaseModel):
    """A row of the ``profiles`` table."""
    id: str
    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = ""
    sender_profile: SenderProfile = Field(default_factory=SenderProfile)
    profile_raw_text: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("sender_profile", mode="before")
    @classmethod
    def _empty_profile(cls, value: Any):
        return value or {}
