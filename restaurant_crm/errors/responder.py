"""
Restaurant CRM Backend - Error Responder
=========================================

What:  Builds the uniform ErrorDetails payload from a failure and the
       request path, and renders it as a JSONResponse.
How:   Every field is derived from the inputs plus wall-clock time:
       status and message come either from the catalog or from the
       failure itself; the reason phrase comes from http.HTTPStatus;
       exceptionType is the failure's class name.
Who:   Called by the error hook and by AccessPolicyMiddleware (401s).
"""

from datetime import datetime
from http import HTTPStatus
from typing import Callable, Dict, Mapping, Optional

from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError
from starlette.exceptions import HTTPException as StarletteHTTPException

from restaurant_crm.errors.catalog import ErrorCode, lookup
from restaurant_crm.exceptions import CRMError
from restaurant_crm.schemas.error import ErrorDetails

VALIDATION_FAILED_MESSAGE = "Validation failed"


def reason_phrase(status: int) -> str:
    """Standard HTTP reason phrase, e.g. 404 → "Not Found"."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown Status"


def failure_message(failure: BaseException) -> str:
    """
    The failure's own message text.

    For SQLAlchemy errors this is the driver's native message (e.g.
    "UNIQUE constraint failed: customers.email"), not SQLAlchemy's wrapper,
    which also embeds the SQL statement and its column list.
    """
    if isinstance(failure, DBAPIError) and failure.orig is not None:
        return str(failure.orig)
    if isinstance(failure, StarletteHTTPException):
        return str(failure.detail)
    if isinstance(failure, CRMError):
        return failure.message
    return str(failure)


class ErrorResponder:
    """
    Stateless builder for ErrorDetails.

    `clock` defaults to datetime.now (naive local time); tests inject a
    fixed clock.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

    def build_from_catalog(
        self, code: ErrorCode, failure: BaseException, path: str
    ) -> ErrorDetails:
        """Status and message from the catalog entry for `code`."""
        entry = lookup(code)
        return ErrorDetails(
            timestamp=self._clock(),
            status=entry.status,
            error=reason_phrase(entry.status),
            message=entry.message,
            path=path,
            exception_type=type(failure).__name__,
        )

    def build_from_status(
        self, status: int, failure: BaseException, path: str
    ) -> ErrorDetails:
        """Explicit status; message taken from the failure itself."""
        return ErrorDetails(
            timestamp=self._clock(),
            status=status,
            error=reason_phrase(status),
            message=failure_message(failure),
            path=path,
            exception_type=type(failure).__name__,
        )

    def build_validation(
        self, failure: BaseException, path: str, violations: Mapping[str, str]
    ) -> ErrorDetails:
        """400 with the generic message and the field → message map."""
        return ErrorDetails(
            timestamp=self._clock(),
            status=400,
            error=reason_phrase(400),
            message=VALIDATION_FAILED_MESSAGE,
            path=path,
            exception_type=type(failure).__name__,
            validation_errors=dict(violations),
        )

    @staticmethod
    def render(
        details: ErrorDetails, headers: Optional[Dict[str, str]] = None
    ) -> JSONResponse:
        return JSONResponse(
            status_code=details.status,
            content=details.to_body(),
            headers=headers,
        )


# Stateless, shared by the error hook and the access-policy middleware
error_responder = ErrorResponder()
