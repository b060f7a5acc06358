"""Listing page scraping.

Listing pages are server-rendered Next.js pages: the listing data lives in
the JSON hydration blob inside ``<script id="__NEXT_DATA__">``. Only
``parse_listing_html`` knows about that layout.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

import requests
from loguru import logger
from pydantic import ValidationError
from scrapy import Selector
from scrapy.http import HtmlResponse

from garage_invoice.config import Settings, get_settings
from garage_invoice.errors import (
    ListingFetchError,
    ListingPreviewNotFoundError,
    ListingShapeError,
    StructuredDataDecodeError,
    StructuredDataNotFoundError,
)
from garage_invoice.models import ListingRecord, NormalizedListing
from garage_invoice.services.pricing import parse_price


NEXT_DATA_SELECTOR = "script#__NEXT_DATA__"
LISTING_PREVIEW_PATH = ("props", "pageProps", "listingPreview")


def _dig(data: Any, path: tuple[str, ...]) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _describe_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def map_listing_preview(preview: Dict[str, Any]) -> Dict[str, Any]:
    """Map raw ``listingPreview`` keys onto ``ListingRecord`` fields.

    The preview payload carries no location or seller details.
    """
    image_url = preview.get("imageUrl")
    return {
        "title": preview.get("listingTitle") or "",
        "price": preview.get("sellingPrice") or 0,
        "description": preview.get("listingDescription") or None,
        "location": None,
        "images": [image_url] if image_url else None,
        "seller": None,
    }


def parse_listing_html(html: str) -> ListingRecord:
    """Extract and validate the listing embedded in a listing page."""
    nodes = Selector(text=html).css(NEXT_DATA_SELECTOR)
    if not nodes:
        raise StructuredDataNotFoundError()
    raw = "".join(nodes[0].css("::text").getall())
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise StructuredDataDecodeError(f"Invalid __NEXT_DATA__ JSON: {exc}") from exc

    preview = _dig(data, LISTING_PREVIEW_PATH)
    if not preview:
        raise ListingPreviewNotFoundError()
    if not isinstance(preview, dict):
        raise ListingShapeError(
            f"Unexpected listing data format: listingPreview is {type(preview).__name__}, not an object"
        )

    try:
        return ListingRecord(**map_listing_preview(preview))
    except ValidationError as exc:
        raise ListingShapeError(f"Unexpected listing data format: {_describe_errors(exc)}") from exc


def normalize_listing(record: ListingRecord) -> NormalizedListing:
    return NormalizedListing(**record.model_dump(), price_number=parse_price(record.price))


def fetch_listing_html(
    source_url: str,
    session: Optional[requests.Session] = None,
    settings: Optional[Settings] = None,
) -> str:
    cfg = settings or get_settings()
    http = session or requests
    headers = {"User-Agent": cfg.user_agent, "Cache-Control": "no-cache"}
    try:
        res = http.get(source_url, headers=headers, timeout=cfg.fetch_timeout_secs)
    except requests.RequestException as exc:
        raise ListingFetchError(f"Failed to fetch listing page: {exc}") from exc
    if not res.ok:
        raise ListingFetchError(
            f"Failed to fetch listing page: {res.status_code} {res.reason or ''}".rstrip(),
            upstream_status=res.status_code,
        )
    content_type = res.headers.get("Content-Type")
    # decode via scrapy so a <meta charset> is honored when the header omits one
    page = HtmlResponse(
        url=source_url,
        body=res.content,
        headers={"Content-Type": content_type} if content_type else None,
    )
    return page.text


def fetch_listing(
    listing_id: str,
    source_url: str,
    session: Optional[requests.Session] = None,
    settings: Optional[Settings] = None,
) -> NormalizedListing:
    """Fetch ``source_url`` once and return its listing with a numeric price."""
    logger.info("Fetching listing {} from {}", listing_id, source_url)
    html = fetch_listing_html(source_url, session=session, settings=settings)
    record = parse_listing_html(html)
    listing = normalize_listing(record)
    logger.debug("Parsed listing {}: {!r} at {}", listing_id, listing.title, listing.price_number)
    return listing
