"""Shared selectors for OpenCart-based storefronts.

Techland, UltraTech, Potaka IT, PC House and Skyland all run OpenCart
themes with the same product card markup.
"""

from partpicker.scrapers.base import DetailSelectors, ListingSelectors


OPENCART_LISTING_SELECTORS = ListingSelectors(
    item=".product-layout",
    name=".name a",
    link=".name a",
    price=".price",
    price_new=".price-new",
    price_old=".price-old",
    image=".image img",
    availability=".stock",
)

OPENCART_DETAIL_SELECTORS = DetailSelectors(
    price=".price",
    price_new=".price-new",
    price_old=".price-old",
    availability=(".stock", ".product-stock", ".availability"),
)


def opencart_search_template(base_url: str) -> str:
    """Search URL template for an OpenCart store rooted at ``base_url``."""
    return f"{base_url}/index.php?route=product/search&search={{query}}"
