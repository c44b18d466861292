"""Translation of SprintPulse errors into HTTP responses."""

from fastapi import HTTPException, status

from sprintpulse.errors import SprintPulseError
from sprintpulse.platform.logging import get_logger

logger = get_logger(__name__)


def to_http_exception(error: Exception, failure_detail: str) -> HTTPException:
    """
    Map a raised error onto an HTTPException.

    Client errors keep their message. Everything at 500 answers with
    ``failure_detail`` so store and generative failures look the same.
    """
    if isinstance(error, SprintPulseError) and error.status_code < 500:
        return HTTPException(status_code=error.status_code, detail=error.message)

    logger.error(
        "request_failed",
        error=str(error),
        error_type=type(error).__name__,
        detail=failure_detail,
    )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=failure_detail,
    )
