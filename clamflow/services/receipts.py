"""Receipt intake service.

Records raw-material deliveries against a supplier.  A new receipt is
``pending`` with no lot until lot assembly picks it up.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from clamflow.exceptions import NotFoundError, ValidationError
from clamflow.models.raw_material import RawMaterial
from clamflow.models.supplier import Supplier
from clamflow.models.types import coerce_datetime, utcnow
from clamflow.schemas.common import validate_input
from clamflow.schemas.receipt import RawMaterialOut, ReceiptCreate

logger = logging.getLogger(__name__)


async def record_receipt(
    db: AsyncSession,
    *,
    supplier_id: int,
    weight_kg: float,
    photo_url: str = "",
    date: datetime | None = None,
) -> RawMaterialOut:
    """Record a delivery.  Raises ValidationError for a non-positive
    weight or an unknown supplier."""
    body = validate_input(
        ReceiptCreate,
        supplier_id=supplier_id,
        weight_kg=weight_kg,
        photo_url=photo_url,
        date=date,
    )

    supplier = await db.get(Supplier, body.supplier_id)
    if not supplier:
        raise ValidationError(f"Supplier not found: {body.supplier_id}")

    receipt = RawMaterial(
        supplier_id=supplier.id,
        weight_kg=body.weight_kg,
        photo_url=body.photo_url,
        date=coerce_datetime(body.date) or utcnow(),
        lot_id=None,
        lot_number=None,
        status="pending",
    )
    db.add(receipt)
    await db.flush()

    logger.info(
        "Recorded receipt %d: %.2f kg from supplier %s",
        receipt.id, receipt.weight_kg, supplier.name,
    )
    out = RawMaterialOut.model_validate(receipt)
    out.supplier_name = supplier.name
    return out


async def list_pending(db: AsyncSession) -> list[RawMaterialOut]:
    """Unassigned receipts, newest first."""
    return await list_receipts(db, status="pending")


async def list_receipts(
    db: AsyncSession, status: str | None = None
) -> list[RawMaterialOut]:
    stmt = select(RawMaterial).options(selectinload(RawMaterial.supplier))
    if status:
        stmt = stmt.where(RawMaterial.status == status)
    stmt = stmt.order_by(RawMaterial.date.desc(), RawMaterial.id.desc())
    result = await db.execute(stmt)
    return [RawMaterialOut.from_orm_with_names(r) for r in result.scalars().all()]


async def get_receipt(db: AsyncSession, receipt_id: int) -> RawMaterialOut:
    result = await db.execute(
        select(RawMaterial)
        .where(RawMaterial.id == receipt_id)
        .options(selectinload(RawMaterial.supplier))
    )
    receipt = result.scalar_one_or_none()
    if not receipt:
        raise NotFoundError("Receipt", receipt_id)
    return RawMaterialOut.from_orm_with_names(receipt)
