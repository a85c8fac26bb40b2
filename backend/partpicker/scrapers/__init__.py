"""Retailer scraping: the generic adapter, per-retailer data and the registry."""

from partpicker.scrapers.base import (
    BaseRetailerAdapter,
    DetailSelectors,
    Listing,
    ListingSelectors,
    ScrapedPrice,
)

__all__ = [
    "BaseRetailerAdapter",
    "DetailSelectors",
    "Listing",
    "ListingSelectors",
    "ScrapedPrice",
]
