"""Potaka IT (potakait.com) adapter."""

from partpicker.scrapers.adapters.opencart import (
    OPENCART_DETAIL_SELECTORS,
    OPENCART_LISTING_SELECTORS,
    opencart_search_template,
)
from partpicker.scrapers.base import BaseRetailerAdapter


class PotakaITAdapter(BaseRetailerAdapter):
    retailer_slug = "potakait"
    retailer_name = "Potaka IT"
    base_url = "https://www.potakait.com"

    CATEGORY_URLS = {
        "cpu": f"{base_url}/processor",
        "cpu-cooler": f"{base_url}/cpu-cooler",
        "motherboard": f"{base_url}/motherboard",
        "memory": f"{base_url}/ram",
        "storage": f"{base_url}/storage-device",
        "video-card": f"{base_url}/graphics-card",
        "case": f"{base_url}/casing",
        "power-supply": f"{base_url}/power-supply",
        "monitor": f"{base_url}/monitor",
    }
    SEARCH_URL_TEMPLATE = opencart_search_template(base_url)

    LISTING_SELECTORS = OPENCART_LISTING_SELECTORS
    DETAIL_SELECTORS = OPENCART_DETAIL_SELECTORS
