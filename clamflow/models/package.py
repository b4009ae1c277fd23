"""Package — a sealed output unit made from one processed box.

Terminal record: created once, never updated.  ``box_id`` is unique, so a
box cannot be packaged twice.
"""

from datetime import datetime

from sqlalchemy import Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from clamflow.database import Base
from clamflow.models.types import Timestamp, utcnow


class Package(Base):
    __tablename__ = "packages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # ── Traceability links ───────────────────────────────────
    lot_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lots.id"), nullable=False, index=True
    )
    box_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("processing_boxes.id"), nullable=False, unique=True
    )
    lot_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    box_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    # ── Contents ─────────────────────────────────────────────
    # shell-on | meat
    product_type: Mapped[str] = mapped_column(String(20), nullable=False)
    weight_kg: Mapped[float] = mapped_column(Float, nullable=False)
    grade: Mapped[str] = mapped_column(String(20), nullable=False)
    qr_code: Mapped[str] = mapped_column(Text, nullable=False)

    date: Mapped[datetime] = mapped_column(Timestamp, default=utcnow, index=True)
