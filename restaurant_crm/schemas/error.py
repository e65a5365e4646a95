"""
Restaurant CRM Backend - Error Response Schema
===============================================

What:  The single error body returned by every failing request.
Who:   Built only by restaurant_crm.errors.responder; referenced by routes in
       their OpenAPI `responses` declarations.

Example (validation failure):
    {
        "timestamp": "2026-10-18T12:00:00.123456",
        "status": 400,
        "error": "Bad Request",
        "message": "Validation failed",
        "path": "/api/customers",
        "exceptionType": "RequestValidationError",
        "validationErrors": {"name": "Name is required"}
    }
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class ErrorDetails(BaseModel):
    """
    Point-in-time snapshot of one failure. Frozen once constructed.

    `timestamp` is local wall-clock time without a timezone.
    `validation_errors` is only set for validation failures and is left
    out of the JSON body otherwise.
    """

    timestamp: datetime = Field(description="When the failure was handled (local time)")
    status: int = Field(description="HTTP status code")
    error: str = Field(description="Standard HTTP reason phrase for the status")
    message: str = Field(description="Human-readable description")
    path: str = Field(description="Request URI that failed")
    exception_type: str = Field(description="Simple name of the failure kind")
    validation_errors: Optional[Dict[str, str]] = Field(
        default=None,
        description="Field (or rule id) → message; validation failures only",
    )

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    def to_body(self) -> dict:
        """JSON-ready dict with camelCase keys and no null validation map."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
