"""Job record data model and lifecycle transitions."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator
import uuid


MAX_FILE_BATCH = 100
MAX_MANUAL_BATCH = 10


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


ACTIVE_STATUSES = (JobStatus.PENDING, JobStatus.PROCESSING)


class InputMethod(str, Enum):
    MANUAL = "manual"
    FILE_UPLOAD = "file_upload"


def max_batch_size(method: InputMethod) -> int:
    return MAX_MANUAL_BATCH if method == InputMethod.MANUAL else MAX_FILE_BATCH


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InputName(BaseModel):
    name: str
    school: str


class JobResult(BaseModel):
    """One matched person as reported by the search workflow."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    school: str
    linkedin_url: Optional[str] = Field(default=None, alias="linkedInUrl")
    confidence: Union[int, float] = 0

    @field_validator("confidence")
    @classmethod
    def _confidence_range(cls, value):
        if value < 0 or value > 100:
            raise ValueError("confidence must be between 0 and 100")
        return value


class JobRecord(BaseModel):
    """Tracks the lifecycle of one batch search request."""
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    status: JobStatus = JobStatus.PENDING
    input_method: InputMethod = InputMethod.MANUAL
    input_names: List[InputName] = Field(default_factory=list)
    # Search results, plus any message drafts appended afterwards
    results: List[Dict[str, Any]] = Field(default_factory=list)
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    processing_started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def to_row(self) -> Dict[str, Any]:
        """Serialize to the column layout of the ``jobs`` table."""
        return self.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Transitions. Each returns the column updates for a single-row write.
# ---------------------------------------------------------------------------

def completion_fields(
    results: List[Dict[str, Any]],
    completed_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or utcnow()
    return {
        "status": JobStatus.COMPLETED.value,
        "results": results,
        "completed_at": (completed_at or now).isoformat(),
        "failed_at": None,
        "error_message": None,
        "updated_at": now.isoformat(),
    }


def failure_fields(error_message: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or utcnow()
    return {
        "status": JobStatus.FAILED.value,
        "error_message": error_message,
        "failed_at": now.isoformat(),
        "completed_at": None,
        # results are only kept on completed jobs
        "results": [],
        "updated_at": now.isoformat(),
    }


def timeout_message(minutes: int) -> str:
    return f"Job timed out after {minutes} minutes"
