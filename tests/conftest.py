from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

import pytest
import requests

from garage_invoice.config import Settings


LISTING_ID = "d2a03277-b4c6-4883-a00c-33ecfc91c25c"
LISTING_URL = f"https://www.shopgarage.com/listing/1998-pierce-ladder-truck-{LISTING_ID}"


def listing_page(preview: Optional[Dict[str, Any]], extra_props: Optional[Dict[str, Any]] = None) -> str:
    page_props: Dict[str, Any] = dict(extra_props or {})
    if preview is not None:
        page_props["listingPreview"] = preview
    data = {"props": {"pageProps": page_props}, "page": "/listing/[slug]"}
    return f"""
<html>
  <head><title>Listing</title></head>
  <body>
    <div id="__next"><h1>Listing</h1></div>
    <script id="__NEXT_DATA__" type="application/json">{json.dumps(data)}</script>
  </body>
</html>
"""


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        text: str = "",
        reason: str = "OK",
        content: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.status_code = status_code
        self.text = text
        self.reason = reason
        self.content = content or text.encode("utf-8")
        self.headers: Dict[str, str] = dict(headers or {})

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} {self.reason}", response=self)  # type: ignore[arg-type]


class FakeSession:
    """Stands in for ``requests.Session``; serves canned responses by URL."""

    def __init__(self, pages: Optional[Dict[str, Any]] = None) -> None:
        self.pages = pages or {}
        self.calls: List[str] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(url)
        page = self.pages.get(url)
        if isinstance(page, Exception):
            raise page
        if isinstance(page, FakeResponse):
            return page
        if page is None:
            return FakeResponse(404, reason="Not Found")
        return FakeResponse(200, text=page)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        fetch_timeout_secs=5.0,
        user_agent="garage-invoice-tests",
        fetch_images=False,
        resend_api_key=None,
        resend_from_email="invoices@example.com",
    )


@pytest.fixture
def truck_preview() -> Dict[str, Any]:
    return {
        "listingTitle": "1998 Ladder Truck",
        "sellingPrice": 45000,
        "listingDescription": "105' aerial, 1500 GPM pump, low hours.",
        "imageUrl": "https://cdn.shopgarage.com/img/truck.jpg",
    }
