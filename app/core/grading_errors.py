"""Helpers for raising HTTP exceptions that carry a grading error code.

Usage:
    from app.core.grading_errors import raise_grading_error, WEIGHTS_SUM_INVALID

    raise_grading_error(
        status_code=400,
        detail="Total weights must equal 100",
        error_code=WEIGHTS_SUM_INVALID,
    )

The response body will be:
    {"detail": "...", "error_code": "WEIGHTS_SUM_INVALID"}

Clients can branch on error_code instead of parsing the message.
"""

from fastapi import HTTPException
from fastapi.responses import JSONResponse


INVALID_ASSESSMENT_TYPE = "INVALID_ASSESSMENT_TYPE"
WEIGHTS_SUM_INVALID = "WEIGHTS_SUM_INVALID"
INVALID_WEIGHT = "INVALID_WEIGHT"
INVALID_SCORE = "INVALID_SCORE"
MISSING_IDENTIFIER = "MISSING_IDENTIFIER"


def raise_grading_error(
    status_code: int,
    detail: str,
    error_code: str,
) -> None:
    """Raise an HTTPException whose body includes an error_code field.

    FastAPI's default exception handler only serializes `detail`, so we use
    a custom HTTPException subclass that overrides the response body.
    """
    raise GradingErrorException(
        status_code=status_code,
        detail=detail,
        error_code=error_code,
    )


class GradingErrorException(HTTPException):
    """HTTPException that includes an error_code in the JSON response."""

    def __init__(self, status_code: int, detail: str, error_code: str):
        super().__init__(status_code=status_code, detail=detail)
        self.error_code = error_code


def grading_error_exception_handler(_request, exc: GradingErrorException):
    """Custom handler registered on the FastAPI app."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code},
    )
