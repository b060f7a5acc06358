"""Invoice PDF layout built with reportlab's platypus flowables."""

from __future__ import annotations

from datetime import datetime
from io import BytesIO
from typing import List, Optional
from xml.sax.saxutils import escape

import requests
from loguru import logger
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.utils import ImageReader
from reportlab.platypus import (
    Flowable,
    HRFlowable,
    Image,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from garage_invoice.config import Settings, get_settings
from garage_invoice.models import BuyerInfo, InvoiceDocument, NormalizedListing
from garage_invoice.services.pricing import format_usd


MARGIN = 40
CONTENT_WIDTH = A4[0] - 2 * MARGIN
MAX_DESCRIPTION_CHARS = 800
THUMBNAIL_SIZE = (180, 135)

INK = colors.HexColor("#1f2937")
MUTED = colors.HexColor("#6b7280")
RULE = colors.HexColor("#e5e7eb")

# Placeholders for empty BILL TO lines, in print order
BUYER_FIELDS = (
    ("name", "[Buyer Name]"),
    ("company", "[Company/Department]"),
    ("address1", "[Address Line 1]"),
    ("address2", "[Address Line 2]"),
    ("city_state_zip", "[City, State ZIP]"),
    ("phone", "[Phone]"),
    ("email", "[Email]"),
)

TERMS = (
    (
        "Payment Terms:",
        "Net 30 days. Payment via wire transfer preferred. Wire transfer instructions "
        "will be provided upon request.",
    ),
    (
        "Delivery Terms:",
        "Delivery/pickup arrangements to be coordinated between buyer and seller. All "
        "transportation costs are the responsibility of the buyer unless otherwise specified.",
    ),
    (
        "Warranty:",
        'Vehicle sold "AS IS, WHERE IS" with no warranties expressed or implied. Buyer '
        "acknowledges inspection of vehicle and acceptance of condition.",
    ),
    (
        "Title Transfer:",
        "Title transfer will be completed upon receipt of full payment. All applicable "
        "documentation and registration materials will be provided.",
    ),
    (
        "Disclaimers:",
        "Seller makes no representations or warranties regarding the condition, "
        "merchantability, or fitness for a particular purpose of the vehicle. Buyer assumes "
        "all risks associated with the purchase and use of the vehicle.",
    ),
)


def _style(name: str, size: float = 10, bold: bool = False, color=INK, **kw) -> ParagraphStyle:
    kw.setdefault("leading", size * 1.4)
    return ParagraphStyle(
        name,
        fontName="Helvetica-Bold" if bold else "Helvetica",
        fontSize=size,
        textColor=color,
        **kw,
    )


STYLES = {
    "title": _style("title", 28, bold=True, color=colors.black, leading=32, spaceAfter=4),
    "subtitle": _style("subtitle", 9, color=MUTED),
    "invoice_no": _style("invoice_no", 11, bold=True, color=colors.black, alignment=TA_RIGHT, spaceAfter=4),
    "header_meta": _style("header_meta", 10, color=MUTED, alignment=TA_RIGHT),
    "section": _style("section", 12, bold=True, color=colors.black, spaceAfter=8),
    "label": _style("label", 8, color=MUTED, spaceAfter=2),
    "value": _style("value", 10, spaceAfter=8),
    "value_bold": _style("value_bold", 10, bold=True, color=colors.black, spaceAfter=8),
    "cell": _style("cell", 9),
    "cell_right": _style("cell_right", 9, alignment=TA_RIGHT),
    "total_label": _style("total_label", 12, bold=True, color=colors.black),
    "total_value": _style("total_value", 14, bold=True, color=colors.black, alignment=TA_RIGHT),
    "terms": _style("terms", 8, color=MUTED, spaceBefore=6),
    "signature": _style("signature", 9, color=MUTED),
    "footer": _style("footer", 8, color=MUTED, alignment=TA_CENTER),
}


def invoice_number(listing_id: str, now: datetime) -> str:
    """``INV-YYYYMMDD-<first 8 id chars>``, e.g. ``INV-20261019-D2A03277``."""
    return f"INV-{now:%Y%m%d}-{listing_id[:8].upper()}"


def display_date(now: datetime) -> str:
    return f"{now:%B} {now.day}, {now.year}"


def clamp_description(description: Optional[str]) -> Optional[str]:
    if description and len(description) > MAX_DESCRIPTION_CHARS:
        return description[: MAX_DESCRIPTION_CHARS - 3] + "..."
    return description


def build_invoice_document(
    listing_id: str,
    source_url: str,
    listing: NormalizedListing,
    buyer_info: Optional[BuyerInfo] = None,
    now: Optional[datetime] = None,
) -> InvoiceDocument:
    now = now or datetime.now()
    return InvoiceDocument(
        listing_id=listing_id,
        source_url=source_url,
        date=display_date(now),
        invoice_number=invoice_number(listing_id, now),
        title=listing.title,
        price=format_usd(listing.price_number),
        description=listing.description,
        location=listing.location,
        seller=listing.seller,
        thumbnail_url=listing.thumbnail_url,
        buyer_info=buyer_info,
    )


def download_image(
    url: str, session: Optional[requests.Session] = None, timeout: float = 10.0
) -> Optional[bytes]:
    http = session or requests
    try:
        r = http.get(url, timeout=timeout)
        r.raise_for_status()
        return bytes(r.content)
    except requests.RequestException as exc:
        logger.warning("Thumbnail download failed for {}: {}", url, exc)
        return None


def _thumbnail(data: bytes) -> Optional[Image]:
    try:
        iw, ih = ImageReader(BytesIO(data)).getSize()
    except Exception as exc:  # reportlab raises assorted errors for unreadable images
        logger.warning("Skipping unreadable thumbnail: {}", exc)
        return None
    max_w, max_h = THUMBNAIL_SIZE
    scale = min(max_w / iw, max_h / ih)
    img = Image(BytesIO(data), width=iw * scale, height=ih * scale)
    img.hAlign = "LEFT"
    return img


def _p(text: Optional[str], style: str) -> Paragraph:
    return Paragraph(escape(text or ""), STYLES[style])


def _section(title: str) -> List[Flowable]:
    return [
        Spacer(1, 20),
        HRFlowable(width="100%", thickness=1, color=RULE, spaceAfter=12),
        _p(title, "section"),
    ]


def _header(doc: InvoiceDocument, cfg: Settings) -> List[Flowable]:
    left = [_p("INVOICE", "title"), _p(cfg.company_name, "subtitle"), _p(cfg.company_website, "subtitle")]
    right = [
        _p(f"Invoice #: {doc.invoice_number}", "invoice_no"),
        _p(f"Date: {doc.date}", "header_meta"),
        _p(f"Order #: {doc.order_number}", "header_meta"),
    ]
    table = Table([[left, right]], colWidths=[CONTENT_WIDTH / 2] * 2)
    table.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ("RIGHTPADDING", (0, 0), (-1, -1), 0),
    ]))
    return [table, HRFlowable(width="100%", thickness=2, color=colors.black, spaceBefore=12, spaceAfter=24)]


def _parties(doc: InvoiceDocument, cfg: Settings) -> List[Flowable]:
    seller = [
        _p("SELLER", "section"),
        _p(cfg.company_name, "value_bold"),
        _p(f"Phone: {cfg.company_phone}", "value"),
        _p(f"Email: {cfg.company_email}", "value"),
        _p(f"Website: {cfg.company_website}", "value"),
    ]
    if doc.seller and doc.seller.name:
        seller += [Spacer(1, 8), _p("LISTED BY", "label"), _p(doc.seller.name, "value")]

    buyer_info = doc.buyer_info or BuyerInfo()
    buyer = [_p("BILL TO", "section")]
    for field, placeholder in BUYER_FIELDS:
        buyer.append(_p(getattr(buyer_info, field) or placeholder, "value"))

    gap = 24
    table = Table([[seller, "", buyer]], colWidths=[(CONTENT_WIDTH - gap) / 2, gap, (CONTENT_WIDTH - gap) / 2])
    table.setStyle(TableStyle([
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ("RIGHTPADDING", (0, 0), (-1, -1), 0),
    ]))
    return [table]


def _vehicle(doc: InvoiceDocument, thumbnail: Optional[Image]) -> List[Flowable]:
    story = _section("VEHICLE IDENTIFICATION")
    story += [_p("VEHICLE TITLE", "label"), _p(doc.title, "value_bold")]
    if doc.location:
        story += [_p("LOCATION", "label"), _p(doc.location, "value")]
    if thumbnail is not None:
        story += _section("VEHICLE IMAGE") + [thumbnail]
    description = clamp_description(doc.description)
    if description:
        story += _section("VEHICLE DESCRIPTION & FEATURES") + [_p(description, "value")]
    return story


def _payment(doc: InvoiceDocument) -> List[Flowable]:
    rows = [
        ("Description", "Amount"),
        ("Vehicle Purchase Price", doc.price),
        ("Sales Tax (if applicable)", "—"),
        ("Delivery/Transportation", "—"),
        ("Documentation Fees", "—"),
    ]
    data = [[_p(label, "cell"), _p(amount, "cell_right")] for label, amount in rows]
    table = Table(data, colWidths=[CONTENT_WIDTH * 0.7, CONTENT_WIDTH * 0.3])
    table.setStyle(TableStyle([
        ("LINEBELOW", (0, 0), (-1, 0), 2, colors.black),
        ("LINEBELOW", (0, 1), (-1, -1), 1, RULE),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ("RIGHTPADDING", (0, 0), (-1, -1), 0),
    ]))
    total = Table(
        [[_p("TOTAL DUE", "total_label"), _p(doc.price, "total_value")]],
        colWidths=[CONTENT_WIDTH * 0.5, CONTENT_WIDTH * 0.5],
    )
    total.setStyle(TableStyle([
        ("LINEABOVE", (0, 0), (-1, 0), 2, colors.black),
        ("TOPPADDING", (0, 0), (-1, -1), 12),
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ("RIGHTPADDING", (0, 0), (-1, -1), 0),
    ]))
    story = _section("PAYMENT BREAKDOWN")
    story += [table, Spacer(1, 12), total]
    return story


def _delivery() -> List[Flowable]:
    story = _section("DELIVERY / PICKUP INFORMATION")
    for label, value in (
        ("DELIVERY ADDRESS", "[To be specified by buyer]"),
        ("EXPECTED DELIVERY/PICKUP DATE", "[To be arranged]"),
        ("TRANSPORTATION METHOD", "[To be arranged]"),
    ):
        story += [_p(label, "label"), _p(value, "value")]
    return story


def _terms() -> List[Flowable]:
    story = _section("TERMS AND CONDITIONS")
    for heading, text in TERMS:
        story.append(Paragraph(f"<b>{escape(heading)}</b> {escape(text)}", STYLES["terms"]))
    return story


def _signatures(cfg: Settings) -> List[Flowable]:
    gap = 40
    col = (CONTENT_WIDTH - gap) / 2
    data = [
        ["", "", ""],
        [_p("Seller Signature", "signature"), "", _p("Buyer Signature", "signature")],
        [_p(cfg.company_name, "signature"), "", _p("_" * 25, "signature")],
        [_p("Date: _______________", "signature"), "", _p("Date: _______________", "signature")],
    ]
    table = Table(data, colWidths=[col, gap, col], rowHeights=[40, None, None, None])
    table.setStyle(TableStyle([
        ("LINEABOVE", (0, 1), (0, 1), 1, colors.black),
        ("LINEABOVE", (2, 1), (2, 1), 1, colors.black),
        ("TOPPADDING", (0, 3), (-1, 3), 16),
        ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ("RIGHTPADDING", (0, 0), (-1, -1), 0),
    ]))
    return [Spacer(1, 24), table]


def _footer(doc: InvoiceDocument, cfg: Settings) -> List[Flowable]:
    return [
        Spacer(1, 24),
        HRFlowable(width="100%", thickness=1, color=RULE, spaceAfter=12),
        _p(
            f"This invoice was generated on {doc.date}. For questions or support, contact "
            f"{cfg.company_phone} or {cfg.support_email}",
            "footer",
        ),
        Spacer(1, 4),
        _p(f"Listing ID: {doc.listing_id} | Source: {doc.source_url}", "footer"),
    ]


def render_invoice(
    doc: InvoiceDocument,
    settings: Optional[Settings] = None,
    session: Optional[requests.Session] = None,
) -> bytes:
    """Lay out ``doc`` on A4 and return the PDF bytes."""
    cfg = settings or get_settings()
    thumbnail = None
    if doc.thumbnail_url and cfg.fetch_images:
        data = download_image(doc.thumbnail_url, session=session, timeout=cfg.fetch_timeout_secs)
        if data:
            thumbnail = _thumbnail(data)

    story: List[Flowable] = []
    story += _header(doc, cfg)
    story += _parties(doc, cfg)
    story += _vehicle(doc, thumbnail)
    story += _payment(doc)
    story += _delivery()
    story += _terms()
    story += _signatures(cfg)
    story += _footer(doc, cfg)

    buf = BytesIO()
    pdf = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
        title=f"Invoice {doc.invoice_number}",
        author=cfg.company_name,
    )
    pdf.build(story)
    logger.info("Rendered invoice {} ({} bytes)", doc.invoice_number, buf.tell())
    return buf.getvalue()
