"""ClamFlow — shellfish receipt, lot, processing and packaging traceability."""

__version__ = "0.1.0"
