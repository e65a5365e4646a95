"""Create customers table

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000

What:  Creates the `customers` table with UNIQUE constraints on email and
       phone. The constraint names contain the column names; the error
       hook relies on that to tell a duplicate email from a duplicate phone.

Rollback: downgrade() drops the table (all customer data is lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(30), nullable=False),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("allergies", sa.String(255), nullable=True),
        sa.Column(
            "visit_count",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        # Non-native enum: VARCHAR holding REGULAR / SUSPICIOUS / INSPECTOR
        sa.Column(
            "michelin_status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'REGULAR'"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_customers_email"),
        sa.UniqueConstraint("phone", name="uq_customers_phone"),
    )


def downgrade() -> None:
    op.drop_table("customers")
