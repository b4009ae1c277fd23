"""Reference data written on first run.

The grade seed is executed by migration 0002 and must stay safe to
re-run: rows are only inserted into an empty table.  Table definitions
here are lightweight ``sa.table`` constructs so the seed does not drift
with later model changes.
"""

import sqlalchemy as sa
from sqlalchemy.engine import Connection

DEFAULT_PRODUCT_GRADES = [
    {
        "code": "A",
        "name": "Premium",
        "description": "Highest quality, uniform size, perfect condition",
        "product_type": "shell-on",
    },
    {
        "code": "B",
        "name": "Standard",
        "description": "Good quality, minor variations allowed",
        "product_type": "shell-on",
    },
    {
        "code": "A",
        "name": "Premium",
        "description": "Clean, white meat, no impurities",
        "product_type": "meat",
    },
    {
        "code": "B",
        "name": "Standard",
        "description": "Good quality meat, slight color variations allowed",
        "product_type": "meat",
    },
]

SAMPLE_SUPPLIERS = [
    {"name": "John's Fishing", "contact": "555-0101", "license_number": "LIC001"},
    {"name": "Bay Clams", "contact": "555-0102", "license_number": "LIC002"},
    {"name": "Ocean Harvest", "contact": "555-0103", "license_number": "LIC003"},
]

product_grades_table = sa.table(
    "product_grades",
    sa.column("code", sa.String),
    sa.column("name", sa.String),
    sa.column("description", sa.Text),
    sa.column("product_type", sa.String),
)


def seed_product_grades(connection: Connection) -> int:
    """Insert the default grades if the table is empty.

    Returns the number of rows inserted (0 when already populated).
    """
    count = connection.execute(
        sa.select(sa.func.count()).select_from(product_grades_table)
    ).scalar_one()
    if count:
        return 0
    connection.execute(sa.insert(product_grades_table), DEFAULT_PRODUCT_GRADES)
    return len(DEFAULT_PRODUCT_GRADES)
