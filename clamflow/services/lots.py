"""Lot assembly service.

Groups pending receipts into a lot:
  - Rejects a lot number that is already taken
  - Requires every receipt to exist and still be pending
  - Snapshots the total weight of the receipts
  - Stamps each receipt with the lot and moves it to ``assigned``

The lot insert and the receipt stamps share one savepoint, so either both
are stored or neither is.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from clamflow.exceptions import ConflictError, NotFoundError
from clamflow.models.lot import Lot
from clamflow.models.raw_material import RawMaterial
from clamflow.models.types import utcnow
from clamflow.schemas.common import validate_input
from clamflow.schemas.lot import AvailableLotOut, LotCreate, LotOut
from clamflow.utils.numbering import generate_code

logger = logging.getLogger(__name__)


async def load_lot(
    db: AsyncSession, lot_number: str, with_receipts: bool = True
) -> Lot:
    """Fetch a lot by its business number or raise NotFoundError."""
    stmt = select(Lot).where(Lot.lot_number == lot_number)
    if with_receipts:
        stmt = stmt.options(selectinload(Lot.receipts))
    lot = (await db.execute(stmt)).scalar_one_or_none()
    if not lot:
        raise NotFoundError("Lot", lot_number)
    return lot


async def _load_pending_receipts(
    db: AsyncSession, receipt_ids: list[int]
) -> list[RawMaterial]:
    result = await db.execute(
        select(RawMaterial).where(RawMaterial.id.in_(receipt_ids))
    )
    found = {r.id: r for r in result.scalars().all()}

    missing = [rid for rid in receipt_ids if rid not in found]
    if missing:
        raise NotFoundError("Receipt", ", ".join(str(rid) for rid in missing))

    receipts = [found[rid] for rid in receipt_ids]
    taken = [r for r in receipts if r.status != "pending" or r.lot_id is not None]
    if taken:
        refs = ", ".join(f"{r.id} (lot {r.lot_number})" for r in taken)
        raise ConflictError(
            f"Receipt(s) already assigned: {refs}",
            error_code="RECEIPT_ALREADY_ASSIGNED",
        )
    return receipts


async def assemble_lot(
    db: AsyncSession,
    *,
    lot_number: str,
    receipt_ids: list[int],
    notes: str | None = None,
) -> LotOut:
    """Create a lot from pending receipts.

    Raises:
        ValidationError: empty or repeated receipt ids, blank lot number
        ConflictError: lot number taken, or a receipt already assigned
        NotFoundError: a receipt id does not exist
    """
    body = validate_input(
        LotCreate, lot_number=lot_number, receipt_ids=receipt_ids, notes=notes
    )

    taken = (
        await db.execute(select(Lot.id).where(Lot.lot_number == body.lot_number))
    ).scalar_one_or_none()
    if taken is not None:
        raise ConflictError(
            f"Lot number already exists: {body.lot_number}",
            error_code="DUPLICATE_LOT_NUMBER",
        )

    receipts = await _load_pending_receipts(db, body.receipt_ids)
    total_weight = sum(r.weight_kg for r in receipts)

    async with db.begin_nested():
        lot = Lot(
            lot_number=body.lot_number,
            total_weight_kg=total_weight,
            notes=body.notes,
            status="pending",
            created_at=utcnow(),
        )
        db.add(lot)
        await db.flush()  # populate lot.id

        for receipt in receipts:
            receipt.lot_id = lot.id
            receipt.lot_number = lot.lot_number
            receipt.status = "assigned"
        await db.flush()

    await db.refresh(lot, attribute_names=["receipts"])

    logger.info(
        "Assembled lot %s from %d receipt(s), %.2f kg",
        lot.lot_number, len(receipts), lot.total_weight_kg,
    )
    return LotOut.model_validate(lot)


async def list_available_lots(db: AsyncSession) -> list[AvailableLotOut]:
    """Pending lots for the processing lot picker, newest first.

    Each receipt carries its supplier's name (read-side join).
    """
    result = await db.execute(
        select(Lot)
        .where(Lot.status == "pending")
        .options(selectinload(Lot.receipts).selectinload(RawMaterial.supplier))
        .order_by(Lot.created_at.desc(), Lot.id.desc())
    )
    return [AvailableLotOut.from_orm_with_names(lot) for lot in result.scalars().all()]


async def list_lots(db: AsyncSession, status: str | None = None) -> list[LotOut]:
    stmt = select(Lot).options(selectinload(Lot.receipts))
    if status:
        stmt = stmt.where(Lot.status == status)
    stmt = stmt.order_by(Lot.created_at.desc(), Lot.id.desc())
    result = await db.execute(stmt)
    return [LotOut.model_validate(lot) for lot in result.scalars().all()]


async def get_lot(db: AsyncSession, lot_number: str) -> LotOut:
    return LotOut.model_validate(await load_lot(db, lot_number))


async def next_lot_number(db: AsyncSession) -> str:
    """Suggest the next free lot number, e.g. ``L-20261019-004``."""
    return await generate_code(db, "lot")
