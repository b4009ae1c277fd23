"""Aggregate model imports for Alembic and relationship resolution."""

from clamflow.models.supplier import Supplier
from clamflow.models.product_grade import ProductGrade
from clamflow.models.raw_material import RawMaterial
from clamflow.models.lot import Lot
from clamflow.models.processing_batch import ProcessingBatch, ProcessingBox
from clamflow.models.shell_weight import ShellWeight
from clamflow.models.package import Package

__all__ = [
    # Reference data
    "Supplier", "ProductGrade",
    # Lot lifecycle
    "RawMaterial", "Lot", "ProcessingBatch", "ProcessingBox", "Package",
    # Ledger
    "ShellWeight",
]
