from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import requests
from loguru import logger

from garage_invoice.config import Settings, get_settings
from garage_invoice.errors import ListingIdNotFoundError
from garage_invoice.models import BuyerInfo, InvoiceDocument, NormalizedListing
from .identifier import extract_listing_id
from .invoice_pdf import build_invoice_document, render_invoice
from .scraper import fetch_listing


@dataclass
class GeneratedInvoice:
    listing_id: str
    listing: NormalizedListing
    document: InvoiceDocument
    pdf: bytes

    @property
    def invoice_number(self) -> str:
        return self.document.invoice_number


def generate_invoice(
    url: str,
    buyer_info: Optional[BuyerInfo] = None,
    session: Optional[requests.Session] = None,
    settings: Optional[Settings] = None,
    now: Optional[datetime] = None,
) -> GeneratedInvoice:
    """Run the whole pipeline for one listing URL.

    Raises an ``InvoiceError`` subclass on any failure; nothing is produced
    unless every step succeeds.
    """
    cfg = settings or get_settings()
    listing_id = extract_listing_id(url)
    if not listing_id:
        raise ListingIdNotFoundError()

    listing = fetch_listing(listing_id, url, session=session, settings=cfg)
    document = build_invoice_document(listing_id, url, listing, buyer_info=buyer_info, now=now)
    pdf = render_invoice(document, settings=cfg, session=session)
    logger.info("Generated invoice {} for listing {}", document.invoice_number, listing_id)
    return GeneratedInvoice(listing_id=listing_id, listing=listing, document=document, pdf=pdf)
