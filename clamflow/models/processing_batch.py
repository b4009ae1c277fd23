"""ProcessingBatch — the graded output of processing one lot.

Each batch holds an ordered list of boxes, each box a weighed quantity of
shell-on or meat product with a grade code valid for its type.  The
shell-on / meat totals are the sums of the matching box weights.
"""

from datetime import datetime

from sqlalchemy import Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clamflow.database import Base
from clamflow.models.types import Timestamp, utcnow


class ProcessingBatch(Base):
    __tablename__ = "processing_batches"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # ── Traceability ─────────────────────────────────────────
    lot_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lots.id"), nullable=False, index=True
    )
    lot_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    # ── Totals ───────────────────────────────────────────────
    shell_on_weight_kg: Mapped[float] = mapped_column(Float, default=0.0)
    meat_weight_kg: Mapped[float] = mapped_column(Float, default=0.0)
    yield_percentage: Mapped[float] = mapped_column(Float, default=0.0)

    date: Mapped[datetime] = mapped_column(Timestamp, default=utcnow, index=True)
    # pending | completed
    status: Mapped[str] = mapped_column(String(20), default="completed", index=True)

    # ── Relationships ────────────────────────────────────────
    boxes = relationship(
        "ProcessingBox",
        back_populates="batch",
        order_by="ProcessingBox.position",
        cascade="all, delete-orphan",
    )


class ProcessingBox(Base):
    __tablename__ = "processing_boxes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    batch_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("processing_batches.id"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    # shell-on | meat
    product_type: Mapped[str] = mapped_column(String(20), nullable=False)
    weight_kg: Mapped[float] = mapped_column(Float, nullable=False)
    box_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    grade: Mapped[str] = mapped_column(String(20), nullable=False, index=True)

    batch = relationship("ProcessingBatch", back_populates="boxes")
