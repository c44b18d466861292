"""
SprintPulse exception hierarchy.

Each exception carries the HTTP status the API layer answers with.
Upstream failures (store, generative client) all surface as 500.
"""

from typing import Any, Dict, Optional


class SprintPulseError(Exception):
    """Base exception for all SprintPulse errors."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationFailed(SprintPulseError):
    """A required field is missing from the request."""

    status_code = 400


class NotFoundError(SprintPulseError):
    """Referenced entity does not exist."""

    status_code = 404


class RetrospectiveExistsError(SprintPulseError):
    """A retrospective is already stored for the sprint."""

    status_code = 409

    def __init__(self, sprint_id: str) -> None:
        super().__init__(
            "Retrospective already exists for this sprint",
            details={"sprint_id": sprint_id},
        )
        self.sprint_id = sprint_id


class AIResponseError(SprintPulseError):
    """The generative client failed or returned text that does not fit the requested schema."""

    status_code = 500
