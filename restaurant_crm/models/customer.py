"""
Restaurant CRM Backend - Customer SQLAlchemy Model
===================================================

What:  ORM model representing the `customers` table.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by CustomerService for CRUD operations.

Table Design:
    - Integer identity primary key, assigned by the database
    - email and phone carry named UNIQUE constraints; the storage layer is
      the only place uniqueness is enforced. A violation surfaces as an
      IntegrityError whose native message names the constraint, which the
      error hook inspects for "email" / "phone".
    - michelin_status is stored as the enum NAME in a VARCHAR column
      (non-native enum), so adding a status needs no ALTER TYPE.
    - No soft delete and no versioning: rows are hard-deleted on removal.
"""

import enum
from typing import Optional

from sqlalchemy import Enum, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from restaurant_crm.database import Base


class MichelinStatus(str, enum.Enum):
    """Whether a guest is suspected of being a Michelin inspector."""

    REGULAR = "REGULAR"
    """Regular customer, not a Michelin inspector."""

    SUSPICIOUS = "SUSPICIOUS"
    """May be a Michelin inspector."""

    INSPECTOR = "INSPECTOR"
    """Confirmed Michelin inspector."""


class Customer(Base):
    """
    A restaurant guest.

    Lifecycle:
        1. Created on customer registration (visit_count = 0, REGULAR)
        2. Mutated by edits and by recorded visits
        3. Deleted on explicit removal request
    """

    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    phone: Mapped[str] = mapped_column(String(30), nullable=False)

    email: Mapped[str] = mapped_column(String(100), nullable=False)

    # Free-text allergy notes, shown to the kitchen on booking
    allergies: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    visit_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    michelin_status: Mapped[MichelinStatus] = mapped_column(
        Enum(MichelinStatus, name="michelin_status", native_enum=False, length=20),
        nullable=False,
        default=MichelinStatus.REGULAR,
        server_default=text("'REGULAR'"),
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_customers_email"),
        UniqueConstraint("phone", name="uq_customers_phone"),
    )

    def __repr__(self) -> str:
        return (
            f"<Customer(id={self.id}, name='{self.name}', "
            f"michelin_status='{self.michelin_status}')>"
        )
