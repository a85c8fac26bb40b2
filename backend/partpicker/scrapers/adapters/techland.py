"""Techland BD (techlandbd.com) adapter."""

from partpicker.scrapers.adapters.opencart import (
    OPENCART_DETAIL_SELECTORS,
    OPENCART_LISTING_SELECTORS,
    opencart_search_template,
)
from partpicker.scrapers.base import BaseRetailerAdapter


class TechlandAdapter(BaseRetailerAdapter):
    retailer_slug = "techland"
    retailer_name = "Techland"
    base_url = "https://www.techlandbd.com"

    CATEGORY_URLS = {
        "cpu": f"{base_url}/pc-components/processor",
        "cpu-cooler": f"{base_url}/pc-components/cpu-cooler",
        "motherboard": f"{base_url}/pc-components/motherboard",
        "memory": f"{base_url}/pc-components/ram-memory",
        "storage": f"{base_url}/pc-components/storage-device",
        "video-card": f"{base_url}/pc-components/graphics-card",
        "case": f"{base_url}/pc-components/casing",
        "power-supply": f"{base_url}/pc-components/power-supply",
        "monitor": f"{base_url}/shop-by-brands/monitor",
    }
    SEARCH_URL_TEMPLATE = opencart_search_template(base_url)

    LISTING_SELECTORS = OPENCART_LISTING_SELECTORS
    DETAIL_SELECTORS = OPENCART_DETAIL_SELECTORS
    FETCH_DETAIL_AVAILABILITY = True
