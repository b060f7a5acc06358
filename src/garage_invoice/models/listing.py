"""Data models for scraped listings."""

from __future__ import annotations

import math
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Seller(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None


class ListingRecord(BaseModel):
    """A listing as read from the page's embedded data."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    price: Union[int, float, str]
    description: Optional[str] = None
    location: Optional[str] = None
    images: Optional[List[str]] = None
    seller: Optional[Seller] = None


class NormalizedListing(ListingRecord):
    """``ListingRecord`` plus the numeric price derived from ``price``."""

    price_number: float

    @field_validator("price_number")
    @classmethod
    def _finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("price must be a finite number")
        return v

    @property
    def thumbnail_url(self) -> Optional[str]:
        return self.images[0] if self.images else None
