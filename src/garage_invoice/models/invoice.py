from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .listing import Seller


class BuyerInfo(BaseModel):
    """Free-text "bill to" details; every field is optional."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    company: Optional[str] = None
    address1: Optional[str] = None
    address2: Optional[str] = None
    city_state_zip: Optional[str] = Field(default=None, alias="cityStateZip")
    phone: Optional[str] = None
    email: Optional[str] = None


class InvoiceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    buyer_info: Optional[BuyerInfo] = Field(default=None, alias="buyerInfo")

    @field_validator("url")
    @classmethod
    def _absolute_url(cls, v: str) -> str:
        try:
            parts = urlsplit(v)
        except ValueError as exc:
            raise ValueError(f"Invalid url: {exc}") from exc
        if not parts.scheme or not parts.netloc:
            raise ValueError("Invalid url")
        return v


class InvoiceDocument(BaseModel):
    """Everything the PDF layout needs, already formatted for display."""

    listing_id: str
    source_url: str
    date: str
    invoice_number: str
    title: str
    price: str
    description: Optional[str] = None
    location: Optional[str] = None
    seller: Optional[Seller] = None
    thumbnail_url: Optional[str] = None
    buyer_info: Optional[BuyerInfo] = None

    @property
    def order_number(self) -> str:
        return self.listing_id[:8].upper()
