"""Packaging tests: sealing processed boxes and rendering labels."""

import json
from datetime import datetime

import pytest
import pytest_asyncio

from clamflow.exceptions import ConflictError, NotFoundError, ValidationError
from clamflow.services.lots import assemble_lot
from clamflow.services.packaging import (
    build_qr_payload,
    create_package,
    get_package,
    list_packages,
    render_package_qr,
)
from clamflow.services.processing import submit_processing_batch


@pytest_asyncio.fixture
async def batch(store, make_receipt):
    receipt = await make_receipt(40.0)
    async with store.session() as db:
        await assemble_lot(db, lot_number="L-010", receipt_ids=[receipt.id])
        return await submit_processing_batch(
            db,
            lot_number="L-010",
            boxes=[
                {"type": "shell-on", "weight": 20.0, "grade": "A", "box_number": "SO-1"},
                {"type": "meat", "weight": 6.0, "grade": "B", "box_number": "CM-1"},
            ],
        )


@pytest.mark.integration
@pytest.mark.asyncio
class TestCreatePackage:
    """Sealing a processed box into a package."""

    async def test_package_links_lot_and_box(self, store, batch):
        async with store.session() as db:
            package = await create_package(
                db, lot_number="L-010", box_number="SO-1",
                product_type="shell-on", weight_kg=19.8, grade="A",
            )

        assert package.lot_id == batch.lot_id
        assert package.box_id == batch.boxes[0].id
        assert package.lot_number == "L-010"
        assert package.weight_kg == 19.8
        assert json.loads(package.qr_code) == {
            "lot": "L-010", "box": "SO-1", "type": "shell-on", "grade": "A", "kg": 19.8,
        }

    async def test_supplied_qr_code_and_date_kept(self, store, batch):
        when = datetime(2026, 10, 3, 14, 0)
        async with store.session() as db:
            package = await create_package(
                db, lot_number="L-010", box_number="CM-1", product_type="meat",
                weight_kg=6.0, grade="b", qr_code="QR-CM-1", date=when,
            )
        assert package.qr_code == "QR-CM-1"
        assert package.date == when
        assert package.grade == "B"

    async def test_unknown_lot(self, store, batch):
        with pytest.raises(NotFoundError):
            async with store.session() as db:
                await create_package(
                    db, lot_number="L-404", box_number="SO-1",
                    product_type="shell-on", weight_kg=1.0, grade="A",
                )

    async def test_box_not_in_lot(self, store, batch):
        with pytest.raises(NotFoundError) as exc_info:
            async with store.session() as db:
                await create_package(
                    db, lot_number="L-010", box_number="SO-99",
                    product_type="shell-on", weight_kg=1.0, grade="A",
                )
        assert exc_info.value.resource == "Box"

    @pytest.mark.parametrize("product_type, grade", [("meat", "A"), ("shell-on", "B")])
    async def test_type_or_grade_must_match_box(self, store, batch, product_type, grade):
        with pytest.raises(ValidationError):
            async with store.session() as db:
                await create_package(
                    db, lot_number="L-010", box_number="SO-1",
                    product_type=product_type, weight_kg=1.0, grade=grade,
                )

    async def test_non_positive_weight_rejected(self, store, batch):
        with pytest.raises(ValidationError):
            async with store.session() as db:
                await create_package(
                    db, lot_number="L-010", box_number="SO-1",
                    product_type="shell-on", weight_kg=0, grade="A",
                )

    async def test_box_packaged_once(self, store, batch):
        kwargs = dict(
            lot_number="L-010", box_number="SO-1",
            product_type="shell-on", weight_kg=20.0, grade="A",
        )
        async with store.session() as db:
            await create_package(db, **kwargs)

        with pytest.raises(ConflictError) as exc_info:
            async with store.session() as db:
                await create_package(db, **kwargs)
        assert exc_info.value.error_code == "BOX_ALREADY_PACKAGED"

        async with store.session() as db:
            assert len(await list_packages(db, lot_number="L-010")) == 1


@pytest.mark.integration
@pytest.mark.asyncio
class TestPackageQueries:

    async def test_get_and_render(self, store, batch):
        async with store.session() as db:
            created = await create_package(
                db, lot_number="L-010", box_number="CM-1",
                product_type="meat", weight_kg=6.0, grade="B",
            )

        async with store.session() as db:
            package = await get_package(db, created.id)

        svg = render_package_qr(package)
        assert svg.lstrip().startswith(b"<?xml") or b"<svg" in svg
        png = render_package_qr(package, kind="png")
        assert png.startswith(b"\x89PNG")

    async def test_get_unknown_package(self, store):
        with pytest.raises(NotFoundError):
            async with store.session() as db:
                await get_package(db, 999)


@pytest.mark.unit
def test_qr_payload_is_compact_json():
    payload = build_qr_payload("L-1", "SO-1", "shell-on", "A", 12.3456)
    assert " " not in payload
    assert json.loads(payload)["kg"] == 12.346
