"""Rewrite legacy epoch dates as ISO-8601 text.

Date columns are TEXT, so an epoch value ("1700000000000") sorts below
every ISO value regardless of the date it encodes.  Rows with an epoch
are rewritten in place; ISO rows are left alone, so the step is safe to
re-run.

Revision ID: 0004
Revises: 0003
Create Date: 2026-10-19
"""

revision = "0004"
down_revision = "0003"
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa

from clamflow.models.types import is_epoch, to_storage_text

DATE_COLUMNS = [
    ("suppliers", "created_at"),
    ("lots", "created_at"),
    ("raw_materials", "date"),
    ("raw_materials", "created_at"),
    ("processing_batches", "date"),
    ("packages", "date"),
    ("shell_weights", "date"),
    ("shell_weights", "created_at"),
]


def upgrade() -> None:
    bind = op.get_bind()
    for table_name, column_name in DATE_COLUMNS:
        table = sa.table(table_name, sa.column("id", sa.Integer), sa.column(column_name))
        column = table.c[column_name]
        rows = bind.execute(
            sa.select(table.c.id, column).where(column.is_not(None))
        ).all()
        for row_id, value in rows:
            if is_epoch(value):
                bind.execute(
                    sa.update(table)
                    .where(table.c.id == row_id)
                    .values({column_name: to_storage_text(value)})
                )


def downgrade() -> None:
    # The epoch form carries no information the ISO text lacks.
    pass
