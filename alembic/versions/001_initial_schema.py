"""Initial schema with coffee, flavor, coffee_flavors_flavor, coffee_rating, event

Revision ID: 001_initial_schema
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Coffee table
    op.create_table(
        "coffee",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("brand", sa.String(255), nullable=False),
        sa.Column("recommendations", sa.Integer, nullable=False, server_default=sa.text("0")),
    )

    # Flavor table (name is the natural key, unique to keep lookup-or-create race free)
    op.create_table(
        "flavor",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
    )

    # Coffee <-> flavor join table
    op.create_table(
        "coffee_flavors_flavor",
        sa.Column("coffeeId", sa.Integer, sa.ForeignKey("coffee.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("flavorId", sa.Integer, sa.ForeignKey("flavor.id", ondelete="CASCADE"), primary_key=True),
    )
    op.create_index("ix_coffee_flavors_flavor_flavorId", "coffee_flavors_flavor", ["flavorId"])

    # Coffee ratings
    op.create_table(
        "coffee_rating",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("coffee_id", sa.Integer, sa.ForeignKey("coffee.id", ondelete="CASCADE"), nullable=False),
        sa.Column("score", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_coffee_rating_coffee_id", "coffee_rating", ["coffee_id"])

    # Domain events
    op.create_table(
        "event",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("payload", postgresql.JSONB, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_event_name", "event", ["name"])
    op.create_index("ix_event_name_type", "event", ["name", "type"])


def downgrade() -> None:
    op.drop_table("event")
    op.drop_table("coffee_rating")
    op.drop_table("coffee_flavors_flavor")
    op.drop_table("flavor")
    op.drop_table("coffee")
