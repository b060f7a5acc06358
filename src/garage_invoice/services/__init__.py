"""Service layer for listing invoices."""

from .identifier import extract_listing_id
from .invoice import GeneratedInvoice, generate_invoice
from .mailer import Mailer
from .pricing import format_usd, parse_price
from .scraper import fetch_listing, parse_listing_html

__all__ = [
    "GeneratedInvoice",
    "Mailer",
    "extract_listing_id",
    "fetch_listing",
    "format_usd",
    "generate_invoice",
    "parse_listing_html",
    "parse_price",
]
