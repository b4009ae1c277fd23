"""Shared number generation utility.

Reads format templates from settings and generates sequential codes.

Format tokens:
  {date}       → YYYYMMDD (today)
  {seq:N}      → zero-padded sequence number, N digits, resets daily per prefix;
                 one past the highest number already used with the prefix

Default formats:
  lot:           L-{date}-{seq:3}
  shell_on_box:  SO-{date}-{seq:3}
  meat_box:      CM-{date}-{seq:3}
"""

import re
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clamflow.config import settings
from clamflow.models.lot import Lot
from clamflow.models.processing_batch import ProcessingBox

# Map entity types to the column their codes are stored in
ENTITY_COLUMN_MAP = {
    "lot": Lot.lot_number,
    "shell_on_box": ProcessingBox.box_number,
    "meat_box": ProcessingBox.box_number,
}

BOX_ENTITY_BY_TYPE = {
    "shell-on": "shell_on_box",
    "meat": "meat_box",
}


def _get_format(entity: str) -> str:
    return {
        "lot": settings.lot_number_format,
        "shell_on_box": settings.shell_on_box_format,
        "meat_box": settings.meat_box_format,
    }[entity]


def _build_prefix(fmt: str, today_str: str) -> str:
    """Build the prefix portion of the code (everything before {seq:N}).

    Returns the static prefix so we can find existing codes with this prefix.
    """
    prefix = fmt.replace("{date}", today_str)
    prefix = re.sub(r"\{seq:\d+\}.*$", "", prefix)
    return prefix


def _code_pattern(fmt: str, today_str: str) -> re.Pattern:
    """Regex matching a full code for the day, capturing the sequence."""
    parts = re.split(r"\{seq:\d+\}", fmt.replace("{date}", today_str), maxsplit=1)
    if len(parts) == 1:
        return re.compile(re.escape(parts[0]) + r"(\d+)$")
    return re.compile(re.escape(parts[0]) + r"(\d+)" + re.escape(parts[1]) + "$")


async def _highest_existing(
    db: AsyncSession, entity: str, prefix: str, pattern: re.Pattern
) -> int:
    """Highest sequence number among existing codes with the given prefix.

    Codes that share the prefix but do not follow the format are ignored.
    """
    column = ENTITY_COLUMN_MAP[entity]
    result = await db.execute(select(column).where(column.like(f"{prefix}%")))
    highest = 0
    for code in result.scalars():
        match = pattern.match(code)
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


async def generate_code(
    db: AsyncSession,
    entity: str,
    offset: int = 0,
    today: date | None = None,
) -> str:
    """Generate a sequential code for an entity type.

    Args:
        db: Database session
        entity: One of "lot", "shell_on_box", "meat_box"
        offset: Codes already handed out in this unit of work but not yet
            flushed (e.g. several boxes numbered in one batch)
        today: Override the date token (defaults to today)

    Returns:
        Generated code string, e.g. "SO-20261019-004"
    """
    fmt = _get_format(entity)
    today_str = (today or date.today()).strftime("%Y%m%d")

    prefix = _build_prefix(fmt, today_str)
    highest = await _highest_existing(db, entity, prefix, _code_pattern(fmt, today_str))
    seq_num = highest + offset + 1

    seq_match = re.search(r"\{seq:(\d+)\}", fmt)
    seq_width = int(seq_match.group(1)) if seq_match else 3

    code = fmt.replace("{date}", today_str)
    code = re.sub(r"\{seq:\d+\}", f"{seq_num:0{seq_width}d}", code)
    return code
