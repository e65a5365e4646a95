"""
Restaurant CRM Backend - Customer Service (Business Logic)
===========================================================

What:  CRUD operations on customer records.
How:   Receives the request's AsyncSession, queries through SQLAlchemy,
       returns response schemas.
Who:   Called by the customer route handlers.

Error Handling:
    The service never formats a response and never wraps storage errors.
    - missing row              → ResourceNotFoundError
    - unsupported sort key     → InvalidArgumentError
    - duplicate email / phone  → IntegrityError from flush(), unchanged
    All of them propagate to the error hook. Writes flush() explicitly so a
    constraint violation is raised inside the request handler rather than
    at commit time in the session dependency.
"""

import logging
from typing import Optional

from sqlalchemy import asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_crm.exceptions import InvalidArgumentError, ResourceNotFoundError
from restaurant_crm.models.customer import Customer, MichelinStatus
from restaurant_crm.schemas.customer import (
    CustomerCreate,
    CustomerListResponse,
    CustomerResponse,
    CustomerUpdate,
)

logger = logging.getLogger(__name__)

# sort key → (column, direction)
SORT_OPTIONS = {
    "id": (Customer.id, asc),
    "name": (Customer.name, asc),
    "-name": (Customer.name, desc),
    "visits": (Customer.visit_count, asc),
    "-visits": (Customer.visit_count, desc),
}


class CustomerService:
    """
    Stateless; every call gets its session from the caller.

    Responsibilities:
        - list_customers(): filtered, sorted, offset-paginated listing
        - get_customer(): single lookup with not-found handling
        - create_customer() / update_customer() / delete_customer()
        - record_visit(): increments the visit counter
    """

    async def _load(self, db: AsyncSession, customer_id: int) -> Customer:
        customer = await db.get(Customer, customer_id)
        if customer is None:
            raise ResourceNotFoundError(resource="Customer", field="id", value=customer_id)
        return customer

    async def list_customers(
        self,
        db: AsyncSession,
        limit: int = 20,
        offset: int = 0,
        michelin_status: Optional[MichelinStatus] = None,
        sort: str = "id",
    ) -> CustomerListResponse:
        """
        One page of customers.

        Args:
            limit: Page size
            offset: Rows to skip
            michelin_status: Only customers with this status, when given
            sort: One of SORT_OPTIONS; a leading '-' means descending

        Raises:
            InvalidArgumentError: `sort` is not a supported key (→ 400)
        """
        if sort not in SORT_OPTIONS:
            raise InvalidArgumentError(
                f"Unsupported sort '{sort}'. Must be one of: {', '.join(SORT_OPTIONS)}",
                context={"sort": sort},
            )
        column, direction = SORT_OPTIONS[sort]

        query = select(Customer)
        count_query = select(func.count(Customer.id))
        if michelin_status is not None:
            query = query.where(Customer.michelin_status == michelin_status)
            count_query = count_query.where(Customer.michelin_status == michelin_status)

        # id as tie-breaker keeps pages stable when the sort column repeats
        query = query.order_by(direction(column), asc(Customer.id)).limit(limit).offset(offset)

        result = await db.execute(query)
        customers = list(result.scalars().all())
        total_count = (await db.execute(count_query)).scalar() or 0

        return CustomerListResponse(
            customers=[CustomerResponse.model_validate(c) for c in customers],
            total_count=total_count,
            limit=limit,
            offset=offset,
        )

    async def get_customer(self, db: AsyncSession, customer_id: int) -> CustomerResponse:
        """
        Raises:
            ResourceNotFoundError: no customer with this id (→ 404)
        """
        customer = await self._load(db, customer_id)
        return CustomerResponse.model_validate(customer)

    async def create_customer(self, db: AsyncSession, data: CustomerCreate) -> CustomerResponse:
        """
        Registers a new customer.

        Raises:
            IntegrityError: email or phone already taken (→ 409)
        """
        customer = Customer(**data.model_dump())
        db.add(customer)
        await db.flush()
        logger.info("Customer %s created (status=%s)", customer.id, customer.michelin_status.value)
        return CustomerResponse.model_validate(customer)

    async def update_customer(
        self, db: AsyncSession, customer_id: int, data: CustomerUpdate
    ) -> CustomerResponse:
        """
        Replaces every writable field of an existing customer.

        Raises:
            ResourceNotFoundError: no customer with this id (→ 404)
            IntegrityError: new email or phone belongs to another customer (→ 409)
        """
        customer = await self._load(db, customer_id)
        for field, value in data.model_dump().items():
            setattr(customer, field, value)
        await db.flush()
        logger.info("Customer %s updated", customer.id)
        return CustomerResponse.model_validate(customer)

    async def record_visit(self, db: AsyncSession, customer_id: int) -> CustomerResponse:
        """
        Increments the visit counter by one.

        The increment is issued as `visit_count = visit_count + 1` so two
        concurrent visits both count.
        """
        customer = await self._load(db, customer_id)
        customer.visit_count = Customer.visit_count + 1
        await db.flush()
        await db.refresh(customer)
        logger.info("Customer %s visit recorded (total=%d)", customer.id, customer.visit_count)
        return CustomerResponse.model_validate(customer)

    async def delete_customer(self, db: AsyncSession, customer_id: int) -> None:
        """
        Raises:
            ResourceNotFoundError: no customer with this id (→ 404)
        """
        customer = await self._load(db, customer_id)
        await db.delete(customer)
        await db.flush()
        logger.info("Customer %s deleted", customer_id)


customer_service = CustomerService()
