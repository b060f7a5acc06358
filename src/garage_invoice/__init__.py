"""Generate PDF invoices for marketplace vehicle listings."""

__version__ = "0.1.0"
