"""Initial schema — reference data and the lot lifecycle tables.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-05
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa

# Dates are ISO-8601 text (see clamflow.models.types.Timestamp)
TIMESTAMP = sa.String(32)

# Lot numbers are the business key
UNIQUE_INDEXES = {("lots", "lot_number")}

INDEXES = [
    ("suppliers", "name"),
    ("suppliers", "license_number"),
    ("product_grades", "code"),
    ("product_grades", "product_type"),
    ("lots", "lot_number"),
    ("lots", "status"),
    ("lots", "created_at"),
    ("raw_materials", "supplier_id"),
    ("raw_materials", "lot_id"),
    ("raw_materials", "lot_number"),
    ("raw_materials", "status"),
    ("raw_materials", "date"),
    ("processing_batches", "lot_id"),
    ("processing_batches", "lot_number"),
    ("processing_batches", "status"),
    ("processing_batches", "date"),
    ("processing_boxes", "batch_id"),
    ("processing_boxes", "box_number"),
    ("processing_boxes", "grade"),
    ("packages", "lot_id"),
    ("packages", "lot_number"),
    ("packages", "box_number"),
    ("packages", "date"),
]


def _has_table(name: str) -> bool:
    return sa.inspect(op.get_bind()).has_table(name)


def _has_index(table: str, name: str) -> bool:
    return any(ix["name"] == name for ix in sa.inspect(op.get_bind()).get_indexes(table))


def upgrade() -> None:
    # Each table is skipped if present so a partial run can be repeated.

    # ── Reference data ───────────────────────────────────────

    if not _has_table("suppliers"):
        op.create_table(
            "suppliers",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("contact", sa.String(255), server_default=""),
            sa.Column("license_number", sa.String(100), server_default=""),
            sa.Column("created_at", TIMESTAMP),
        )

    if not _has_table("product_grades"):
        op.create_table(
            "product_grades",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("code", sa.String(20), nullable=False),
            sa.Column("name", sa.String(100), nullable=False),
            sa.Column("description", sa.Text(), server_default=""),
            sa.Column("product_type", sa.String(20), nullable=False),
            sa.UniqueConstraint("code", "product_type", name="uq_product_grades_code_type"),
        )

    # ── Lot lifecycle ────────────────────────────────────────

    if not _has_table("lots"):
        op.create_table(
            "lots",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("lot_number", sa.String(50), nullable=False),
            sa.Column("total_weight_kg", sa.Float(), nullable=False),
            sa.Column("notes", sa.Text()),
            sa.Column("status", sa.String(20), server_default="pending"),
            sa.Column("created_at", TIMESTAMP),
        )

    if not _has_table("raw_materials"):
        op.create_table(
            "raw_materials",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("supplier_id", sa.Integer(), sa.ForeignKey("suppliers.id"), nullable=False),
            sa.Column("weight_kg", sa.Float(), nullable=False),
            sa.Column("photo_url", sa.Text(), server_default=""),
            sa.Column("date", TIMESTAMP),
            sa.Column("lot_id", sa.Integer(), sa.ForeignKey("lots.id")),
            sa.Column("lot_number", sa.String(50)),
            sa.Column("status", sa.String(20), server_default="pending"),
            sa.Column("created_at", TIMESTAMP),
        )

    if not _has_table("processing_batches"):
        op.create_table(
            "processing_batches",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("lot_id", sa.Integer(), sa.ForeignKey("lots.id"), nullable=False),
            sa.Column("lot_number", sa.String(50), nullable=False),
            sa.Column("shell_on_weight_kg", sa.Float(), server_default="0"),
            sa.Column("meat_weight_kg", sa.Float(), server_default="0"),
            sa.Column("yield_percentage", sa.Float(), server_default="0"),
            sa.Column("date", TIMESTAMP),
            sa.Column("status", sa.String(20), server_default="completed"),
        )

    if not _has_table("processing_boxes"):
        op.create_table(
            "processing_boxes",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column(
                "batch_id", sa.Integer(),
                sa.ForeignKey("processing_batches.id"), nullable=False,
            ),
            sa.Column("position", sa.Integer(), nullable=False),
            sa.Column("product_type", sa.String(20), nullable=False),
            sa.Column("weight_kg", sa.Float(), nullable=False),
            sa.Column("box_number", sa.String(50), nullable=False),
            sa.Column("grade", sa.String(20), nullable=False),
        )

    if not _has_table("packages"):
        op.create_table(
            "packages",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column("lot_id", sa.Integer(), sa.ForeignKey("lots.id"), nullable=False),
            sa.Column(
                "box_id", sa.Integer(),
                sa.ForeignKey("processing_boxes.id"), nullable=False, unique=True,
            ),
            sa.Column("lot_number", sa.String(50), nullable=False),
            sa.Column("box_number", sa.String(50), nullable=False),
            sa.Column("product_type", sa.String(20), nullable=False),
            sa.Column("weight_kg", sa.Float(), nullable=False),
            sa.Column("grade", sa.String(20), nullable=False),
            sa.Column("qr_code", sa.Text(), nullable=False),
            sa.Column("date", TIMESTAMP),
        )

    # ── Secondary lookups ────────────────────────────────────

    for table, column in INDEXES:
        name = f"ix_{table}_{column}"
        if not _has_index(table, name):
            op.create_index(name, table, [column], unique=(table, column) in UNIQUE_INDEXES)


def downgrade() -> None:
    for table in (
        "packages", "processing_boxes", "processing_batches",
        "raw_materials", "lots", "product_grades", "suppliers",
    ):
        op.drop_table(table)
