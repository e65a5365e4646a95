"""
Restaurant CRM Backend - Customer Request/Response Schemas
===========================================================

What:  Pydantic models defining the customer API contract.
How:   FastAPI validates request bodies against these models; every
       violated constraint becomes one entry of `validationErrors` in the
       400 response (see restaurant_crm.errors.classifier).
Who:   Used by the customer routes and CustomerService.

Wire format:
    Fields are camelCase on the wire (visitCount, michelinStatus).
    Request bodies also accept the snake_case names.

Constraints:
    name            required, non-blank, ≤ 100
    phone           required, non-blank, ≤ 30
    email           required, non-blank, valid syntax, ≤ 100
    allergies       optional, ≤ 255
    visitCount      integer ≥ 0, default 0
    notes           optional, ≤ 1000
    michelinStatus  REGULAR | SUSPICIOUS | INSPECTOR, default REGULAR
"""

from typing import Any, List, Optional

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from restaurant_crm.models.customer import MichelinStatus

EMAIL_MAX_LENGTH = 100

_REQUIRED_MESSAGES = {
    "name": "Name is required",
    "phone": "Phone number is required",
    "email": "Email is required",
}

_CAMEL_CASE = {
    "alias_generator": to_camel,
    "populate_by_name": True,
}


class CustomerPayload(BaseModel):
    """
    Writable customer fields, shared by create (POST) and replace (PUT).
    """

    name: str = Field(max_length=100, description="Guest's full name")
    phone: str = Field(max_length=30, description="Contact phone number (unique)")
    email: EmailStr = Field(description="Contact email address (unique)")
    allergies: Optional[str] = Field(
        default=None, max_length=255, description="Allergy notes for the kitchen"
    )
    visit_count: int = Field(default=0, ge=0, description="Number of recorded visits")
    notes: Optional[str] = Field(
        default=None, max_length=1000, description="Free-text notes about the guest"
    )
    michelin_status: MichelinStatus = Field(
        default=MichelinStatus.REGULAR,
        description="Michelin inspector suspicion level",
    )

    model_config = dict(_CAMEL_CASE)

    @field_validator("name", "phone", "email", mode="before")
    @classmethod
    def require_text(cls, v: Any, info: ValidationInfo) -> Any:
        """Rejects null, empty and whitespace-only values for required text."""
        if v is None or (isinstance(v, str) and not v.strip()):
            raise PydanticCustomError("not_blank", _REQUIRED_MESSAGES[info.field_name])
        return v

    @field_validator("email")
    @classmethod
    def limit_email_length(cls, v: str) -> str:
        if len(v) > EMAIL_MAX_LENGTH:
            raise PydanticCustomError(
                "string_too_long",
                "Email should have at most {max_length} characters",
                {"max_length": EMAIL_MAX_LENGTH},
            )
        return v


class CustomerCreate(CustomerPayload):
    """Body of POST /api/customers."""


class CustomerUpdate(CustomerPayload):
    """Body of PUT /api/customers/{id}: replaces every writable field."""


class CustomerResponse(BaseModel):
    """Full representation of a stored customer."""

    id: int = Field(description="System-assigned identifier")
    name: str
    phone: str
    email: str
    allergies: Optional[str] = None
    visit_count: int
    notes: Optional[str] = None
    michelin_status: MichelinStatus

    model_config = {**_CAMEL_CASE, "from_attributes": True}


class CustomerListResponse(BaseModel):
    """One page of customers plus the total matching the filter."""

    customers: List[CustomerResponse] = Field(description="Customers on this page")
    total_count: int = Field(description="Total number of customers matching the filter")
    limit: int
    offset: int

    model_config = dict(_CAMEL_CASE)
