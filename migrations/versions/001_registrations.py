"""Create the registrations table

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

Changes:
  - Create registrations table (one row per registered player)
  - Index created_at (default roster order) and reference_number (payment matching)
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "registrations",
        sa.Column("id",                 sa.String(36),  nullable=False),
        sa.Column("created_at",         sa.DateTime(),  nullable=False, server_default=sa.func.now()),
        sa.Column("full_name",          sa.String(255), nullable=False),
        sa.Column("name_with_initials", sa.String(255), nullable=False),
        sa.Column("fide_id",            sa.String(32),  nullable=True),
        sa.Column("date_of_birth",      sa.Date(),      nullable=False),
        sa.Column("gender",             sa.String(20),  nullable=False),
        sa.Column("contact_number",     sa.String(20),  nullable=False),
        sa.Column("age_category",       sa.String(10),  nullable=False),
        sa.Column("payment_status",     sa.String(30),  nullable=False, server_default="unpaid"),
        sa.Column("reference_number",   sa.String(32),  nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_registrations"),
    )
    op.create_index("ix_registrations_created_at", "registrations", ["created_at"])
    op.create_index("ix_registrations_reference_number", "registrations", ["reference_number"])


def downgrade() -> None:
    op.drop_index("ix_registrations_reference_number", table_name="registrations")
    op.drop_index("ix_registrations_created_at", table_name="registrations")
    op.drop_table("registrations")
