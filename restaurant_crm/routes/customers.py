"""
Restaurant CRM Backend - Customer Route Handlers
=================================================

What:  REST surface for customer records under /api/customers.
How:   Extracts path/query/body, delegates to CustomerService, returns JSON.
       Failures are not caught here; the error hook renders them.
Who:   Called by the CRM frontend; every route requires HTTP Basic
       credentials under the standard access policy.

Route Inventory:
    GET    /api/customers                 list (limit, offset, michelinStatus, sort)
    GET    /api/customers/{id}            detail
    POST   /api/customers                 create            → 201
    PUT    /api/customers/{id}            replace
    POST   /api/customers/{id}/visits     record one visit
    DELETE /api/customers/{id}            delete            → 204
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_crm.database import get_db_session
from restaurant_crm.models.customer import MichelinStatus
from restaurant_crm.schemas.customer import (
    CustomerCreate,
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdate,
)
from restaurant_crm.schemas.error import ErrorDetails
from restaurant_crm.services.customer_service import customer_service


router = APIRouter(prefix="/api/customers", tags=["Customers"])

_UNAUTHORIZED = {401: {"description": "Missing or invalid credentials", "model": ErrorDetails}}
_NOT_FOUND = {404: {"description": "Customer not found", "model": ErrorDetails}}
_INVALID = {400: {"description": "Validation failed", "model": ErrorDetails}}
_CONFLICT = {409: {"description": "Email or phone already exists", "model": ErrorDetails}}


@router.get(
    "",
    response_model=CustomerListResponse,
    responses={**_UNAUTHORIZED, **_INVALID},
    summary="List customers",
)
async def list_customers(
    response: Response,
    limit: int = Query(default=20, ge=1, le=100, description="Items per page (max 100)"),
    offset: int = Query(default=0, ge=0, description="Items to skip"),
    michelin_status: Optional[MichelinStatus] = Query(
        default=None,
        alias="michelinStatus",
        description="Only customers with this Michelin status",
    ),
    sort: str = Query(
        default="id",
        description="Sort key: id, name, -name, visits, -visits",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> CustomerListResponse:
    """Page of customers; the total is also sent as X-Total-Count."""
    result = await customer_service.list_customers(
        db=db,
        limit=limit,
        offset=offset,
        michelin_status=michelin_status,
        sort=sort,
    )
    response.headers["X-Total-Count"] = str(result.total_count)
    return result


@router.get(
    "/{customer_id}",
    response_model=CustomerResponse,
    responses={**_UNAUTHORIZED, **_NOT_FOUND},
    summary="Get a customer by id",
)
async def get_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> CustomerResponse:
    return await customer_service.get_customer(db=db, customer_id=customer_id)


@router.post(
    "",
    status_code=201,
    response_model=CustomerResponse,
    responses={**_UNAUTHORIZED, **_INVALID, **_CONFLICT},
    summary="Register a customer",
)
async def create_customer(
    payload: CustomerCreate,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> CustomerResponse:
    created = await customer_service.create_customer(db=db, data=payload)
    response.headers["Location"] = f"{router.prefix}/{created.id}"
    return created


@router.put(
    "/{customer_id}",
    response_model=CustomerResponse,
    responses={**_UNAUTHORIZED, **_INVALID, **_NOT_FOUND, **_CONFLICT},
    summary="Replace a customer's details",
)
async def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> CustomerResponse:
    return await customer_service.update_customer(db=db, customer_id=customer_id, data=payload)


@router.post(
    "/{customer_id}/visits",
    response_model=CustomerResponse,
    responses={**_UNAUTHORIZED, **_NOT_FOUND},
    summary="Record a visit",
)
async def record_visit(
    customer_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> CustomerResponse:
    return await customer_service.record_visit(db=db, customer_id=customer_id)


@router.delete(
    "/{customer_id}",
    status_code=204,
    responses={**_UNAUTHORIZED, **_NOT_FOUND},
    summary="Delete a customer",
)
async def delete_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await customer_service.delete_customer(db=db, customer_id=customer_id)
    return Response(status_code=204)
