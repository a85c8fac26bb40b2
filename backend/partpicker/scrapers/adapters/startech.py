"""Star Tech (startech.com.bd) adapter."""

from partpicker.scrapers.base import BaseRetailerAdapter, DetailSelectors, ListingSelectors


class StartechAdapter(BaseRetailerAdapter):
    """Star Tech uses its own theme; product cards are ``.p-item``."""

    retailer_slug = "startech"
    retailer_name = "Startech"
    base_url = "https://www.startech.com.bd"

    CATEGORY_URLS = {
        "cpu": f"{base_url}/component/processor",
        "cpu-cooler": f"{base_url}/component/cooler",
        "motherboard": f"{base_url}/component/motherboard",
        "memory": f"{base_url}/component/ram",
        "storage": f"{base_url}/component/hard-disk-drive",
        "video-card": f"{base_url}/component/graphics-card",
        "case": f"{base_url}/component/casing",
        "power-supply": f"{base_url}/component/power-supply",
        "monitor": f"{base_url}/monitor",
    }
    SEARCH_URL_TEMPLATE = f"{base_url}/product/search?search={{query}}"

    LISTING_SELECTORS = ListingSelectors(
        item=".p-item",
        name=".p-item-name",
        link=".p-item-name a",
        price=".p-item-price",
        price_new=".special-price",
        price_old=".regular-price",
        image=".p-item-img img",
        availability=".p-item-stock",
    )
    DETAIL_SELECTORS = DetailSelectors(
        price=".product-price",
        price_new=".price-new",
        price_old=".price-old",
        availability=(".product-status", ".product-stock"),
    )
    # Category pages omit stock for most cards
    FETCH_DETAIL_AVAILABILITY = True
