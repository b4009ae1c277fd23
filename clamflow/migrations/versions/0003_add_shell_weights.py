"""Add the shell-weight ledger.

Revision ID: 0003
Revises: 0002
Create Date: 2026-10-12
"""

revision = "0003"
down_revision = "0002"
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    bind = op.get_bind()
    if not sa.inspect(bind).has_table("shell_weights"):
        op.create_table(
            "shell_weights",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("weight_kg", sa.Float(), nullable=False),
            sa.Column("date", sa.String(32)),
            sa.Column("notes", sa.Text()),
            sa.Column("created_at", sa.String(32)),
        )
    existing = {ix["name"] for ix in sa.inspect(bind).get_indexes("shell_weights")}
    if "ix_shell_weights_date" not in existing:
        op.create_index("ix_shell_weights_date", "shell_weights", ["date"])


def downgrade() -> None:
    op.drop_index("ix_shell_weights_date", table_name="shell_weights")
    op.drop_table("shell_weights")
