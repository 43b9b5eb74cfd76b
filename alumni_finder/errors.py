"""
Exception hierarchy for the service.

Routers translate these into HTTP responses; asynchronous failures are
recorded on the job row instead of being raised.
"""

from typing import Any, Dict, Optional


class AlumniFinderError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidInputError(AlumniFinderError):
    """Raised when request input fails validation."""


class BatchValidationError(InvalidInputError):
    """Raised when a submitted batch of names is empty, too large or has blank cells."""


class ProfileNotFoundError(AlumniFinderError):
    """Raised when the caller has no profile row."""

    def __init__(self, user_id: str) -> None:
        super().__init__("Profile not found", {"user_id": user_id})


class ProfileIncompleteError(AlumniFinderError):
    """Raised when a sender profile lacks the data needed for personalization."""


class JobNotFoundError(AlumniFinderError):
    def __init__(self, job_id: str) -> None:
        super().__init__("Job not found", {"job_id": job_id})


class JobAccessDeniedError(AlumniFinderError):
    """Raised when a job exists but belongs to another profile."""

    def __init__(self, job_id: str) -> None:
        super().__init__("Not your job", {"job_id": job_id})


class CallbackPayloadError(AlumniFinderError):
    """Raised when a workflow callback body cannot be interpreted."""


class TransitionConflictError(AlumniFinderError):
    """Raised when a conditional transition finds the job already terminal."""

    def __init__(self, job_id: str) -> None:
        super().__init__("Job is no longer active", {"job_id": job_id})


class StoreError(AlumniFinderError):
    """Raised when the backing store rejects a read or write."""


class LLMError(AlumniFinderError):
    """Raised when the language-model API call fails."""


class ProfileExtractionError(AlumniFinderError):
    """Raised when the extraction response is not usable profile JSON."""
