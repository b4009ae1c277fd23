"""Seed the default product grades (A/B for shell-on and meat).

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-05
"""

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

from alembic import op

from clamflow.utils.seed import seed_product_grades


def upgrade() -> None:
    # Only inserts into an empty table, so a re-run never duplicates rows.
    seed_product_grades(op.get_bind())


def downgrade() -> None:
    # Grades may be referenced by processed boxes; leave them in place.
    pass
