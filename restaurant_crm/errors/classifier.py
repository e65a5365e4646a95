"""
Restaurant CRM Backend - Failure Classification
================================================

What:  Maps any raised exception onto one kind of a closed FailureKind set.
How:   CLASSIFICATION_RULES is tried top to bottom, most specific first;
       the first rule whose exception types match wins. Anything left is
       UNCLASSIFIED.

Rule order (significant):
    1. VALIDATION            RequestValidationError, pydantic ValidationError,
                             ValidationFailure
    2. NOT_FOUND             ResourceNotFoundError
    3. CONSTRAINT_VIOLATION  sqlalchemy IntegrityError, ConstraintViolationError
    4. INVALID_ARGUMENT      ValueError (incl. InvalidArgumentError)
    5. INVALID_STATE         InvalidStateError
    6. HTTP_ERROR            starlette HTTPException (routing 404/405, auth 401)
    7. UNCLASSIFIED          everything else

    pydantic's ValidationError subclasses ValueError, so VALIDATION has to
    stay ahead of INVALID_ARGUMENT.

Also here:
    - collect_violations(): the field → message map for validation failures
    - ConstraintClassifier: decides which catalog entry (if any) a storage
      constraint violation maps to
"""

import enum
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional, Tuple, Type

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from restaurant_crm.errors.catalog import ErrorCode
from restaurant_crm.exceptions import (
    ConstraintViolationError,
    InvalidStateError,
    ResourceNotFoundError,
    ValidationFailure,
)


class FailureKind(str, enum.Enum):
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    INVALID_STATE = "INVALID_STATE"
    HTTP_ERROR = "HTTP_ERROR"
    UNCLASSIFIED = "UNCLASSIFIED"


CLASSIFICATION_RULES: Tuple[Tuple[Tuple[Type[BaseException], ...], FailureKind], ...] = (
    ((RequestValidationError, PydanticValidationError, ValidationFailure), FailureKind.VALIDATION),
    ((ResourceNotFoundError,), FailureKind.NOT_FOUND),
    ((IntegrityError, ConstraintViolationError), FailureKind.CONSTRAINT_VIOLATION),
    ((ValueError,), FailureKind.INVALID_ARGUMENT),
    ((InvalidStateError,), FailureKind.INVALID_STATE),
    ((StarletteHTTPException,), FailureKind.HTTP_ERROR),
)

# Every exception type the rules name, for handler registration
CLASSIFIED_EXCEPTION_TYPES: Tuple[Type[BaseException], ...] = tuple(
    exc_type for exc_types, _ in CLASSIFICATION_RULES for exc_type in exc_types
)


def classify(exc: BaseException) -> FailureKind:
    """First matching rule wins; UNCLASSIFIED matches unconditionally."""
    for exc_types, kind in CLASSIFICATION_RULES:
        if isinstance(exc, exc_types):
            return kind
    return FailureKind.UNCLASSIFIED


# ══════════════════════════════════════════════════════════════════════════
# Validation violations
# ══════════════════════════════════════════════════════════════════════════

# First element of a FastAPI error location names where the value came from
_REQUEST_LOCATIONS = frozenset({"body", "query", "path", "header", "cookie"})


def _violation_key(error: Mapping[str, Any], strip_location: bool) -> str:
    """
    The violated field's name, or the failing rule's identifier (the
    pydantic error type, e.g. "missing" or "json_invalid") when the error
    is not attached to a named field.
    """
    loc = tuple(error.get("loc") or ())
    if strip_location and loc and loc[0] in _REQUEST_LOCATIONS:
        loc = loc[1:]
    names = [part for part in loc if isinstance(part, str)]
    if names:
        return names[-1]
    return str(error.get("type", "invalid"))


def collect_violations(exc: BaseException) -> Dict[str, str]:
    """
    One entry per violated field. A later violation on the same field
    replaces the earlier one.
    """
    if isinstance(exc, ValidationFailure):
        return dict(exc.violations)
    strip_location = isinstance(exc, RequestValidationError)
    violations: Dict[str, str] = {}
    for error in exc.errors():
        violations[_violation_key(error, strip_location)] = str(error.get("msg", ""))
    return violations


# ══════════════════════════════════════════════════════════════════════════
# Storage constraint violations
# ══════════════════════════════════════════════════════════════════════════


class ConstraintClassifier(ABC):
    """
    Decides which catalog entry a storage constraint violation maps to.

    Returns None when the violation has no catalog entry; the hook then
    answers with a generic 409 carrying the storage message.
    """

    @abstractmethod
    def classify(self, storage_message: str) -> Optional[ErrorCode]:
        ...


class MessageSniffingConstraintClassifier(ConstraintClassifier):
    """
    Looks for a column name in the storage engine's native error text,
    case-insensitively, "email" before "phone".

    Works with the constraint names in models/customer.py on PostgreSQL
    ('... unique constraint "uq_customers_email"') and with SQLite
    ("UNIQUE constraint failed: customers.email"). The text varies across
    engines, versions and server locales, so a message that names neither
    column falls through to the generic 409.
    """

    rules: Tuple[Tuple[str, ErrorCode], ...] = (
        ("email", ErrorCode.DUPLICATE_EMAIL),
        ("phone", ErrorCode.DUPLICATE_PHONE),
    )

    def classify(self, storage_message: str) -> Optional[ErrorCode]:
        lowered = storage_message.lower()
        for needle, code in self.rules:
            if needle in lowered:
                return code
        return None
