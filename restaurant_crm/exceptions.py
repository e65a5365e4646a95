"""
Restaurant CRM Backend - Domain Exception Hierarchy
====================================================

What:  Named failure conditions raised by business logic.
How:   Each exception carries a message and an optional context dict.
       Nothing below the routes formats a response: these propagate
       unmodified to the error hook (`restaurant_crm.errors.handlers`),
       which classifies them and builds the JSON body.
Who:   Raised by services; classified by `restaurant_crm.errors.classifier`.

Exception Hierarchy:
    CRMError (base)
    ├── ValidationFailure          → 400 Bad Request (field → message map)
    ├── ResourceNotFoundError      → 404 Not Found (catalog: CUSTOMER_NOT_FOUND)
    ├── ConstraintViolationError   → 409 Conflict (email / phone / other)
    ├── InvalidArgumentError       → 400 Bad Request (also a ValueError)
    ├── InvalidStateError          → 409 Conflict
    └── AuthenticationError        → 401 Unauthorized (access-policy gate)

    Failures that are not CRMError subclasses are classified too:
    Pydantic / FastAPI validation errors, SQLAlchemy IntegrityError and
    plain ValueError map onto the same kinds; anything else becomes a 500
    with the fixed catalog message.
"""

from typing import Any, Dict, Optional


class CRMError(Exception):
    """
    Base exception for all Restaurant CRM application errors.

    Attributes:
        message:  Human-readable error description
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationFailure(CRMError):
    """
    Raised when submitted values violate a business constraint that the
    request schema could not express.

    `violations` maps a field name (or a rule identifier when no single
    field is at fault) to its message; it becomes `validationErrors` in
    the response body.
    """

    def __init__(
        self,
        violations: Dict[str, str],
        message: str = "Validation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.violations = dict(violations)


class ResourceNotFoundError(CRMError):
    """
    Raised when a lookup by identifier finds nothing.

    SQLAlchemy returns None for missing rows; the service layer converts
    that None into this exception.
    """

    def __init__(
        self,
        resource: str = "resource",
        field: Optional[str] = None,
        value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        if field is not None:
            message = f"{resource} not found with {field}: '{value}'"
        ctx = context or {}
        ctx["resource"] = resource
        if field is not None:
            ctx[field] = value
        super().__init__(message=message, context=ctx)


class ConstraintViolationError(CRMError):
    """
    Raised when a write is rejected by a storage-level integrity rule
    outside of SQLAlchemy (e.g. a bulk import checking uniqueness itself).

    The message should carry the storage engine's own text; the error hook
    inspects it the same way it inspects an IntegrityError.
    """


class InvalidArgumentError(CRMError, ValueError):
    """
    Raised when a caller passes an argument the operation cannot accept
    (e.g. an unsupported sort key). A ValueError subclass, so plain
    ValueErrors and this class share one classification.
    """


class InvalidStateError(CRMError):
    """Raised when an operation is not allowed in the record's current state."""


class AuthenticationError(CRMError):
    """
    Missing or rejected HTTP Basic credentials.

    Built by AccessPolicyMiddleware to name the failure in its 401 body;
    the middleware answers directly, so this never reaches the error hook.
    """
