from .listing import ListingRecord, NormalizedListing, Seller
from .invoice import BuyerInfo, InvoiceDocument, InvoiceRequest

__all__ = [
    "BuyerInfo",
    "InvoiceDocument",
    "InvoiceRequest",
    "ListingRecord",
    "NormalizedListing",
    "Seller",
]
