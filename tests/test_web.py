from __future__ import annotations

from typing import Any, Dict, Iterator

import pytest
import resend
from fastapi.testclient import TestClient

from garage_invoice.config import Settings, get_settings
from garage_invoice.errors import STATUS_BY_CATEGORY, ErrorCategory
from garage_invoice.web.main import app, http_session

from conftest import LISTING_URL, FakeResponse, FakeSession, listing_page


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(session: FakeSession, settings: Settings) -> Iterator[TestClient]:
    app.dependency_overrides[http_session] = lambda: session
    app.dependency_overrides[get_settings] = lambda: settings
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_status_table_covers_every_category() -> None:
    assert set(STATUS_BY_CATEGORY) == set(ErrorCategory)
    assert all(400 <= status < 600 for status in STATUS_BY_CATEGORY.values())


def test_index_page(client: TestClient) -> None:
    res = client.get("/")
    assert res.status_code == 200
    assert "Generate an Invoice" in res.text
    # no API key configured in tests
    assert "Email Invoice" not in res.text


def test_healthz(client: TestClient) -> None:
    assert client.get("/healthz").json() == {"status": "ok"}


def test_invoice_pdf(client: TestClient, session: FakeSession, truck_preview: Dict[str, Any]) -> None:
    session.pages[LISTING_URL] = listing_page(truck_preview)

    res = client.post("/api/invoice", json={"url": LISTING_URL, "buyerInfo": {"name": "Jane Doe", "cityStateZip": "Newark, NJ"}})

    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert res.headers["content-disposition"] == "inline; filename=invoice.pdf"
    assert res.headers["cache-control"] == "no-store"
    assert res.content.startswith(b"%PDF")


def test_invalid_url_is_rejected_without_fetching(client: TestClient, session: FakeSession) -> None:
    res = client.post("/api/invoice", json={"url": "not a url"})
    assert res.status_code == 400
    assert "url" in res.json()["error"]
    assert session.calls == []


@pytest.mark.parametrize("body", [{}, {"url": 5}, {"url": LISTING_URL, "buyerInfo": {"name": 7}}])
def test_malformed_body(client: TestClient, body: Dict[str, Any]) -> None:
    res = client.post("/api/invoice", json=body)
    assert res.status_code == 400
    assert set(res.json()) == {"error"}


def test_invalid_json_body(client: TestClient) -> None:
    res = client.post("/api/invoice", content=b"{not json", headers={"Content-Type": "application/json"})
    assert res.status_code == 400


def test_url_without_listing_id(client: TestClient, session: FakeSession) -> None:
    res = client.post("/api/invoice", json={"url": "https://www.shopgarage.com/listing/ladder-truck"})
    assert res.status_code == 400
    assert res.json() == {"error": "Could not find UUID in URL."}
    assert session.calls == []


def test_upstream_status_error(client: TestClient, session: FakeSession) -> None:
    session.pages[LISTING_URL] = FakeResponse(404, reason="Not Found")
    res = client.post("/api/invoice", json={"url": LISTING_URL})
    assert res.status_code == 502
    assert "404" in res.json()["error"]


def test_missing_structured_data(client: TestClient, session: FakeSession) -> None:
    session.pages[LISTING_URL] = "<html><body>Maintenance</body></html>"
    res = client.post("/api/invoice", json={"url": LISTING_URL})
    assert res.status_code == 500
    assert res.json() == {"error": "Could not find __NEXT_DATA__ in page"}


def test_unparseable_price(client: TestClient, session: FakeSession) -> None:
    session.pages[LISTING_URL] = listing_page({"listingTitle": "Engine 7", "sellingPrice": "Call us"})
    res = client.post("/api/invoice", json={"url": LISTING_URL})
    assert res.status_code == 500
    assert "Invalid price format" in res.json()["error"]


def test_unexpected_error_is_500(monkeypatch: pytest.MonkeyPatch, client: TestClient) -> None:
    import garage_invoice.web.main as web

    def boom(*args: Any, **kwargs: Any) -> None:
        raise RuntimeError("renderer exploded")

    monkeypatch.setattr(web, "generate_invoice", boom)
    res = client.post("/api/invoice", json={"url": LISTING_URL})
    assert res.status_code == 500
    assert res.json() == {"error": "renderer exploded"}


def test_send_email_requires_api_key(client: TestClient) -> None:
    res = client.post(
        "/api/send-email",
        data={"email": "buyer@example.com"},
        files={"pdf": ("invoice.pdf", b"%PDF-1.4", "application/pdf")},
    )
    assert res.status_code == 500
    assert res.json() == {"error": "Resend API key is not configured"}


def test_send_email_requires_recipient_and_pdf(client: TestClient, settings: Settings) -> None:
    settings.resend_api_key = "re_test_key"
    res = client.post("/api/send-email", data={"email": "buyer@example.com"})
    assert res.status_code == 400
    assert res.json() == {"error": "Email and PDF file are required"}

    res = client.post("/api/send-email", files={"pdf": ("invoice.pdf", b"%PDF-1.4", "application/pdf")})
    assert res.status_code == 400


def test_send_email(monkeypatch: pytest.MonkeyPatch, client: TestClient, settings: Settings) -> None:
    settings.resend_api_key = "re_test_key"
    sent: Dict[str, Any] = {}

    def fake_send(params: Dict[str, Any]) -> Dict[str, Any]:
        sent.update(params)
        return {"id": "email_123"}

    monkeypatch.setattr(resend.Emails, "send", fake_send)
    res = client.post(
        "/api/send-email",
        data={"email": "buyer@example.com", "subject": "Your invoice", "message": "Thanks!"},
        files={"pdf": ("invoice.pdf", b"%PDF-1.4", "application/pdf")},
    )

    assert res.status_code == 200
    assert res.json() == {"success": True, "message": "Email sent successfully", "data": {"id": "email_123"}}
    assert sent["to"] == ["buyer@example.com"]
    assert sent["subject"] == "Your invoice"
    assert bytes(sent["attachments"][0]["content"]) == b"%PDF-1.4"
