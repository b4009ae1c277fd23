"""Packaging service.

Seals a processed box into a package.  The package must point at a box
that was actually produced for the lot, with the same product type and
grade, and each box is packaged at most once.
"""

import io
import json
import logging
from datetime import datetime

import segno
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clamflow.exceptions import ConflictError, NotFoundError, ValidationError
from clamflow.models.package import Package
from clamflow.models.processing_batch import ProcessingBatch, ProcessingBox
from clamflow.models.types import coerce_datetime, utcnow
from clamflow.schemas.common import validate_input
from clamflow.schemas.packaging import PackageCreate, PackageOut
from clamflow.services.lots import load_lot

logger = logging.getLogger(__name__)


def build_qr_payload(
    lot_number: str,
    box_number: str,
    product_type: str,
    grade: str,
    weight_kg: float,
) -> str:
    """Compact JSON identifying the package, used when no code is supplied."""
    return json.dumps({
        "lot": lot_number,
        "box": box_number,
        "type": product_type,
        "grade": grade,
        "kg": round(weight_kg, 3),
    }, separators=(",", ":"))


async def _load_box(db: AsyncSession, lot_id: int, lot_number: str, box_number: str) -> ProcessingBox:
    result = await db.execute(
        select(ProcessingBox)
        .join(ProcessingBatch, ProcessingBox.batch_id == ProcessingBatch.id)
        .where(ProcessingBatch.lot_id == lot_id, ProcessingBox.box_number == box_number)
    )
    box = result.scalars().first()
    if not box:
        raise NotFoundError("Box", f"{box_number} in lot {lot_number}")
    return box


async def create_package(
    db: AsyncSession,
    *,
    lot_number: str,
    box_number: str,
    product_type: str,
    weight_kg: float,
    grade: str,
    qr_code: str | None = None,
    date: datetime | None = None,
) -> PackageOut:
    """Seal a processed box.

    Raises:
        ValidationError: non-positive weight, or type/grade differing from the box
        NotFoundError: unknown lot, or no such box produced for the lot
        ConflictError: the box is already packaged
    """
    body = validate_input(
        PackageCreate,
        lot_number=lot_number,
        box_number=box_number,
        product_type=product_type,
        weight_kg=weight_kg,
        grade=grade,
        qr_code=qr_code,
        date=date,
    )

    lot = await load_lot(db, body.lot_number, with_receipts=False)
    box = await _load_box(db, lot.id, lot.lot_number, body.box_number)

    if box.product_type != body.product_type or box.grade != body.grade:
        raise ValidationError(
            f"Box {box.box_number} is {box.product_type} grade {box.grade}, "
            f"not {body.product_type} grade {body.grade}"
        )

    already = (
        await db.execute(select(Package.id).where(Package.box_id == box.id))
    ).scalar_one_or_none()
    if already is not None:
        raise ConflictError(
            f"Box {box.box_number} of lot {lot.lot_number} is already packaged",
            error_code="BOX_ALREADY_PACKAGED",
        )

    package = Package(
        lot_id=lot.id,
        box_id=box.id,
        lot_number=lot.lot_number,
        box_number=box.box_number,
        product_type=box.product_type,
        weight_kg=body.weight_kg,
        grade=box.grade,
        qr_code=body.qr_code or build_qr_payload(
            lot.lot_number, box.box_number, box.product_type, box.grade, body.weight_kg
        ),
        date=coerce_datetime(body.date) or utcnow(),
    )
    db.add(package)
    await db.flush()

    logger.info(
        "Sealed package %d: lot %s box %s, %.2f kg",
        package.id, package.lot_number, package.box_number, package.weight_kg,
    )
    return PackageOut.model_validate(package)


async def list_packages(
    db: AsyncSession, lot_number: str | None = None
) -> list[PackageOut]:
    stmt = select(Package)
    if lot_number:
        stmt = stmt.where(Package.lot_number == lot_number)
    stmt = stmt.order_by(Package.date.desc(), Package.id.desc())
    result = await db.execute(stmt)
    return [PackageOut.model_validate(p) for p in result.scalars().all()]


async def get_package(db: AsyncSession, package_id: int) -> PackageOut:
    package = await db.get(Package, package_id)
    if not package:
        raise NotFoundError("Package", package_id)
    return PackageOut.model_validate(package)


def render_package_qr(package: PackageOut, kind: str = "svg", scale: int = 4) -> bytes:
    """Render the package's QR code (SVG by default) for label printing."""
    qr = segno.make(package.qr_code)
    buf = io.BytesIO()
    if kind == "svg":
        qr.save(buf, kind="svg", scale=scale, dark="#0f766e")
    else:
        qr.save(buf, kind=kind, scale=scale)
    return buf.getvalue()
