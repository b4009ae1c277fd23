"""RawMaterial — one receipt of raw shellfish from a supplier.

Created at intake as ``pending``.  Lot assembly stamps it with the lot
(``lot_id`` is the relational key, ``lot_number`` a display copy of the
lot's business key) and moves it to ``assigned``.  Never deleted in the
normal flow.

Lifecycle:  pending → assigned
"""

from datetime import datetime

from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clamflow.database import Base
from clamflow.models.types import Timestamp, utcnow


class RawMaterial(Base):
    __tablename__ = "raw_materials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # ── Origin ───────────────────────────────────────────────
    supplier_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("suppliers.id"), nullable=False, index=True
    )
    weight_kg: Mapped[float] = mapped_column(Float, nullable=False)
    photo_url: Mapped[str] = mapped_column(Text, default="")
    date: Mapped[datetime] = mapped_column(Timestamp, default=utcnow, index=True)

    # ── Lot assignment ───────────────────────────────────────
    lot_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("lots.id"), index=True
    )
    lot_number: Mapped[str | None] = mapped_column(String(50), index=True)

    # pending | assigned
    status: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    created_at: Mapped[datetime] = mapped_column(Timestamp, default=utcnow)

    # ── Relationships ────────────────────────────────────────
    supplier = relationship("Supplier", back_populates="receipts")
    lot = relationship("Lot", back_populates="receipts")
