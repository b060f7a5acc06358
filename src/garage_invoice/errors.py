"""Error taxonomy for the invoice pipeline.

Every failure raised by the pipeline carries an explicit ``ErrorCategory``.
The web layer turns the category into an HTTP status through
``STATUS_BY_CATEGORY`` instead of inspecting message text.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    EXTRACTION = "extraction"
    UPSTREAM_FETCH = "upstream_fetch"
    UPSTREAM_SHAPE = "upstream_shape"
    NORMALIZATION = "normalization"
    DELIVERY_INPUT = "delivery_input"
    DELIVERY_PROVIDER = "delivery_provider"
    CONFIGURATION = "configuration"


STATUS_BY_CATEGORY: Dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.EXTRACTION: 400,
    ErrorCategory.DELIVERY_INPUT: 400,
    ErrorCategory.UPSTREAM_FETCH: 502,
    ErrorCategory.UPSTREAM_SHAPE: 500,
    ErrorCategory.NORMALIZATION: 500,
    ErrorCategory.DELIVERY_PROVIDER: 500,
    ErrorCategory.CONFIGURATION: 500,
}


class InvoiceError(Exception):
    category: ErrorCategory = ErrorCategory.VALIDATION

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_BY_CATEGORY[self.category]


class ListingIdNotFoundError(InvoiceError):
    category = ErrorCategory.EXTRACTION

    def __init__(self, message: str = "Could not find UUID in URL.") -> None:
        super().__init__(message)


class ListingFetchError(InvoiceError):
    """The listing page could not be retrieved."""

    category = ErrorCategory.UPSTREAM_FETCH

    def __init__(self, message: str, upstream_status: Optional[int] = None) -> None:
        super().__init__(message)
        self.upstream_status = upstream_status


class ListingScrapeError(InvoiceError):
    """The listing page was retrieved but its embedded data is unusable."""

    category = ErrorCategory.UPSTREAM_SHAPE


class StructuredDataNotFoundError(ListingScrapeError):
    def __init__(self, message: str = "Could not find __NEXT_DATA__ in page") -> None:
        super().__init__(message)


class StructuredDataDecodeError(ListingScrapeError):
    pass


class ListingPreviewNotFoundError(ListingScrapeError):
    def __init__(self, message: str = "Could not find listingPreview in page data") -> None:
        super().__init__(message)


class ListingShapeError(ListingScrapeError):
    pass


class InvalidPriceError(InvoiceError):
    category = ErrorCategory.NORMALIZATION


class DeliveryInputError(InvoiceError):
    category = ErrorCategory.DELIVERY_INPUT


class DeliveryError(InvoiceError):
    category = ErrorCategory.DELIVERY_PROVIDER


class ConfigurationError(InvoiceError):
    category = ErrorCategory.CONFIGURATION
