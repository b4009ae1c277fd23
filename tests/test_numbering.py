"""Sequential code generation tests."""

from datetime import date

import pytest

from clamflow.services.lots import assemble_lot
from clamflow.utils.numbering import _build_prefix, generate_code


@pytest.mark.unit
def test_prefix_stops_at_sequence():
    assert _build_prefix("L-{date}-{seq:3}", "20261019") == "L-20261019-"


@pytest.mark.integration
@pytest.mark.asyncio
class TestGenerateCode:

    async def test_first_code_of_the_day(self, store):
        async with store.session() as db:
            code = await generate_code(db, "lot", today=date(2026, 10, 19))
        assert code == "L-20261019-001"

    async def test_offset_reserves_unflushed_codes(self, store):
        async with store.session() as db:
            code = await generate_code(db, "meat_box", offset=2, today=date(2026, 10, 19))
        assert code == "CM-20261019-003"

    async def test_sequence_counts_existing_codes_for_the_day(self, store, make_receipt):
        receipt = await make_receipt(5.0)
        async with store.session() as db:
            await assemble_lot(db, lot_number="L-20261019-001", receipt_ids=[receipt.id])

        async with store.session() as db:
            today = await generate_code(db, "lot", today=date(2026, 10, 19))
            tomorrow = await generate_code(db, "lot", today=date(2026, 10, 20))
        assert today == "L-20261019-002"
        assert tomorrow == "L-20261020-001"

    async def test_sequence_continues_after_highest_existing_code(self, store, make_receipt):
        receipt = await make_receipt(5.0)
        async with store.session() as db:
            await assemble_lot(db, lot_number="L-20261019-002", receipt_ids=[receipt.id])

        async with store.session() as db:
            code = await generate_code(db, "lot", today=date(2026, 10, 19))
        assert code == "L-20261019-003"

    async def test_codes_off_format_are_ignored(self, store, make_receipt):
        first = await make_receipt(5.0)
        second = await make_receipt(5.0)
        async with store.session() as db:
            await assemble_lot(db, lot_number="L-20261019-007-REWORK", receipt_ids=[first.id])
            await assemble_lot(db, lot_number="L-20261019-001", receipt_ids=[second.id])

        async with store.session() as db:
            code = await generate_code(db, "lot", today=date(2026, 10, 19))
        assert code == "L-20261019-002"
