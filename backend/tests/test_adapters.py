"""Tests for the generic retailer adapter and the per-retailer data."""

import asyncio
from decimal import Decimal

import httpx
import pytest

from conftest import make_client, opencart_card, page, startech_card
from partpicker.scrapers.adapters import (
    PCHouseAdapter,
    PotakaITAdapter,
    SkylandAdapter,
    StartechAdapter,
    TechlandAdapter,
    UltraTechAdapter,
)
from partpicker.scrapers.base import Listing
from partpicker.scrapers.factory import AdapterFactory
from partpicker.scrapers.register_adapters import ALL_ADAPTERS, register_all_adapters
from partpicker.scrapers.utils.normalizer import COMPONENT_TYPES
from partpicker.services.cache_service import page_cache_key


STARTECH_CPU_URL = "https://www.startech.com.bd/component/processor"
TECHLAND_CPU_URL = "https://www.techlandbd.com/pc-components/processor"


def _startech(client, **kwargs) -> StartechAdapter:
    kwargs.setdefault("fetch_detail", False)
    return StartechAdapter(http_client=client, **kwargs)


class TestBuildUrl:
    def test_search_takes_precedence(self):
        adapter = StartechAdapter()
        url = adapter.build_url("cpu", "ryzen 5")
        assert url == "https://www.startech.com.bd/product/search?search=ryzen+5"

    def test_category_url(self):
        assert TechlandAdapter().build_url("cpu") == TECHLAND_CPU_URL
        assert SkylandAdapter().build_url("monitor") == "https://www.skyland.com.bd/monitor"

    def test_opencart_search_url(self):
        url = PotakaITAdapter().build_url("cpu", "rtx 4060")
        assert url == "https://www.potakait.com/index.php?route=product/search&search=rtx+4060"

    def test_unknown_category(self):
        assert UltraTechAdapter().build_url("keyboard") is None

    @pytest.mark.parametrize("adapter_class", ALL_ADAPTERS)
    def test_every_retailer_covers_every_category(self, adapter_class):
        assert set(adapter_class.CATEGORY_URLS) == set(COMPONENT_TYPES)


class TestFetchComponents:
    async def test_parses_listing_page(self):
        html = page([
            startech_card(
                "AMD Ryzen 5 5600X 3.7GHz 6-Core 12-Thread Processor",
                "https://www.startech.com.bd/amd-ryzen-5-5600x",
                special="৳ 12,500",
                regular="৳ 13,000",
                stock="In Stock",
            ),
            startech_card("Intel Core i5 12400 Processor", "/intel-core-i5-12400", price="৳ 15,000"),
        ])
        async with make_client({STARTECH_CPU_URL: (200, html)}) as client:
            listings = await _startech(client).fetch_components("cpu")

        assert len(listings) == 2
        first = listings[0]
        assert first.name == "AMD Ryzen 5 5600X 3.7GHz 6-Core 12-Thread Processor"
        assert first.price == "৳ 12,500 ৳ 13,000"
        assert first.availability == "In Stock"
        assert first.source == "Startech"
        assert first.image == "https://www.startech.com.bd/image/cache/catalog/cpu.webp"
        assert first.specs == {"Clock Speed": "3.7GHz", "Cores": "6", "Threads": "12"}

        second = listings[1]
        assert second.url == "https://www.startech.com.bd/intel-core-i5-12400"
        assert second.availability == "Unknown"

    async def test_limit_caps_items(self):
        html = page(startech_card(f"AMD Ryzen CPU {i}", f"/p{i}") for i in range(5))
        async with make_client({STARTECH_CPU_URL: (200, html)}) as client:
            listings = await _startech(client).fetch_components("cpu", limit=3)
        assert [item.name for item in listings] == ["AMD Ryzen CPU 0", "AMD Ryzen CPU 1", "AMD Ryzen CPU 2"]

    async def test_non_2xx_yields_empty(self):
        async with make_client({STARTECH_CPU_URL: (503, "busy")}) as client:
            assert await _startech(client).fetch_components("cpu") == []

    async def test_network_error_yields_empty(self):
        async with make_client({STARTECH_CPU_URL: httpx.ConnectError("refused")}) as client:
            assert await _startech(client).fetch_components("cpu") == []

    async def test_timeout_yields_empty(self):
        async def slow(request):
            await asyncio.sleep(1)
            return httpx.Response(200, text=page([startech_card("AMD Ryzen", "/x")]))

        async with httpx.AsyncClient(transport=httpx.MockTransport(slow)) as client:
            listings = await _startech(client, timeout=0.05).fetch_components("cpu")
        assert listings == []

    async def test_unknown_category_makes_no_request(self):
        async with make_client({}) as client:
            assert await _startech(client).fetch_components("keyboard") == []
            assert client.calls == []

    async def test_search_mode_filters_off_category_hits(self):
        url = StartechAdapter().build_url("cpu", "ryzen")
        html = page([
            startech_card("AMD Ryzen 7 7700 Processor", "/ryzen-7700"),
            startech_card("Ryzen Edition Mouse Pad", "/mouse-pad-ryzen"),
            startech_card("Gaming Chair", "/chair"),
        ])
        async with make_client({url: (200, html)}) as client:
            listings = await _startech(client).fetch_components("cpu", search="ryzen")

        # "Ryzen Edition Mouse Pad" contains a cpu keyword and is kept
        assert [item.url for item in listings] == [
            "https://www.startech.com.bd/ryzen-7700",
            "https://www.startech.com.bd/mouse-pad-ryzen",
        ]

    async def test_malformed_card_is_skipped(self):
        html = page([
            "<div class='p-item'></div>",
            startech_card("AMD Ryzen 5 5600G", "/5600g"),
        ])
        async with make_client({STARTECH_CPU_URL: (200, html)}) as client:
            listings = await _startech(client).fetch_components("cpu")
        assert [item.name for item in listings] == ["AMD Ryzen 5 5600G"]

    async def test_opencart_markup(self):
        html = page([
            opencart_card(
                "Gigabyte B550M DS3H Motherboard",
                "https://www.pchouse.com.bd/gigabyte-b550m-ds3h",
                new="৳ 11,200",
                old="৳ 11,800",
                stock="Out Of Stock",
            )
        ])
        url = "https://www.pchouse.com.bd/motherboard"
        async with make_client({url: (200, html)}) as client:
            listings = await PCHouseAdapter(http_client=client).fetch_components("motherboard")

        assert listings == [
            Listing(
                name="Gigabyte B550M DS3H Motherboard",
                price="৳ 11,200 ৳ 11,800",
                image="https://cdn.example.com/item.jpg",
                availability="Out of Stock",
                source="PC House",
                url="https://www.pchouse.com.bd/gigabyte-b550m-ds3h",
            )
        ]


class TestDetailAvailability:
    async def test_detail_page_overrides_listing_availability(self):
        html = page([
            startech_card("AMD Ryzen 5 5600X", "https://www.startech.com.bd/5600x"),
            startech_card("AMD Ryzen 5 5600G", "https://www.startech.com.bd/5600g"),
        ])
        routes = {
            STARTECH_CPU_URL: (200, html),
            "https://www.startech.com.bd/5600x": (200, "<div class='product-status'>In Stock</div>"),
            "https://www.startech.com.bd/5600g": (200, "<div class='product-stock'>Out of Stock</div>"),
        }
        async with make_client(routes) as client:
            listings = await _startech(client, fetch_detail=True).fetch_components("cpu")

        assert [item.availability for item in listings] == ["In Stock", "Out of Stock"]

    async def test_failed_detail_keeps_listing_availability(self):
        html = page([
            startech_card("AMD Ryzen 5 5600X", "https://www.startech.com.bd/5600x", stock="Pre Order"),
            startech_card("AMD Ryzen 5 5600G", "https://www.startech.com.bd/5600g"),
        ])
        routes = {
            STARTECH_CPU_URL: (200, html),
            "https://www.startech.com.bd/5600x": httpx.ReadTimeout("slow"),
            "https://www.startech.com.bd/5600g": (200, "<div class='product-status'>Stock Out</div>"),
        }
        async with make_client(routes) as client:
            listings = await _startech(client, fetch_detail=True).fetch_components("cpu")

        assert [item.availability for item in listings] == ["In Stock", "Out of Stock"]

    async def test_detail_disabled_makes_one_request(self):
        html = page([startech_card("AMD Ryzen 5 5600X", "https://www.startech.com.bd/5600x")])
        async with make_client({STARTECH_CPU_URL: (200, html)}) as client:
            await _startech(client, fetch_detail=False).fetch_components("cpu")
            assert client.calls == [STARTECH_CPU_URL]


class TestSearchProducts:
    async def test_no_category_filter_and_no_specs(self):
        url = TechlandAdapter().build_url(None, "5600x")
        html = page([
            opencart_card("AMD Ryzen 5 5600X 3.7GHz Processor", "https://www.techlandbd.com/5600x"),
            opencart_card("5600X Sticker", "https://www.techlandbd.com/sticker"),
        ])
        async with make_client({url: (200, html)}) as client:
            listings = await TechlandAdapter(http_client=client, fetch_detail=False).search_products("5600x")

        assert [item.name for item in listings] == ["AMD Ryzen 5 5600X 3.7GHz Processor", "5600X Sticker"]
        assert all(item.specs == {} for item in listings)


class TestFetchProductPage:
    async def test_reads_price_and_stock(self):
        url = "https://www.ultratech.com.bd/ryzen-5600x"
        html = """
        <ul class="list-unstyled">
          <li class="price"><span class="price-new">৳ 12,400</span> <span class="price-old">৳ 13,000</span></li>
        </ul>
        <div class="stock">Availability: In Stock</div>
        """
        async with make_client({url: (200, html)}) as client:
            scraped = await UltraTechAdapter(http_client=client).fetch_product_page(url)

        assert scraped.price == Decimal("12400")
        assert scraped.original_price == Decimal("13000")
        assert scraped.price_text == "৳ 12,400 ৳ 13,000"
        assert scraped.availability == "In Stock"

    async def test_missing_price_returns_none(self):
        url = "https://www.ultratech.com.bd/gone"
        async with make_client({url: (200, "<html><body>Removed</body></html>")}) as client:
            assert await UltraTechAdapter(http_client=client).fetch_product_page(url) is None


class DictPageCache:
    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.writes = []

    async def get_page(self, url):
        return self.pages.get(url)

    async def set_page(self, url, html, ttl=None):
        self.pages[url] = html
        self.writes.append((url, ttl))
        return True


class TestPageCache:
    async def test_cached_page_skips_request(self):
        cache = DictPageCache({STARTECH_CPU_URL: page([startech_card("AMD Ryzen 5 5600X", "/p1")])})
        async with make_client({}) as client:
            listings = await _startech(client, cache=cache).fetch_components("cpu")
            assert client.calls == []
        assert [item.name for item in listings] == ["AMD Ryzen 5 5600X"]

    async def test_fetched_page_is_stored(self):
        cache = DictPageCache()
        html = page([startech_card("AMD Ryzen 5 5600X", "/p1")])
        async with make_client({STARTECH_CPU_URL: (200, html)}) as client:
            await _startech(client, cache=cache).fetch_components("cpu")
        assert [url for url, _ in cache.writes] == [STARTECH_CPU_URL]

    async def test_failed_fetch_is_not_stored(self):
        cache = DictPageCache()
        async with make_client({STARTECH_CPU_URL: (503, "busy")}) as client:
            await _startech(client, cache=cache).fetch_components("cpu")
        assert cache.writes == []

    async def test_product_page_bypasses_cache(self):
        url = "https://www.ultratech.com.bd/ryzen-5600x"
        cache = DictPageCache({url: "<li class='price'>৳ 1</li>"})
        async with make_client({url: (200, "<li class='price'>৳ 12,400</li>")}) as client:
            scraped = await UltraTechAdapter(http_client=client, cache=cache).fetch_product_page(url)
        assert scraped.price == Decimal("12400")
        assert cache.writes == []

    def test_key_is_stable_hash(self):
        key = page_cache_key(STARTECH_CPU_URL)
        assert key.startswith("page:")
        assert key == page_cache_key(STARTECH_CPU_URL)
        assert key != page_cache_key(TECHLAND_CPU_URL)


class TestAdapterFactory:
    def test_register_all(self):
        factory = register_all_adapters(AdapterFactory())
        assert factory.get_registered_retailers() == [
            "startech", "techland", "ultratech", "potakait", "pchouse", "skyland",
        ]

    def test_create_adapter_injects_client(self):
        client = httpx.AsyncClient()
        factory = register_all_adapters(AdapterFactory(http_client=client))
        adapter = factory.create_adapter("techland")
        assert isinstance(adapter, TechlandAdapter)
        assert adapter.http_client is client
        assert factory.create_adapter("nope") is None

    def test_find_by_name(self):
        factory = register_all_adapters(AdapterFactory())
        assert factory.find_by_name("Potaka IT") is PotakaITAdapter
        assert factory.find_by_name("potaka it") is PotakaITAdapter
        assert factory.find_by_name("Unknown Shop") is None
        assert factory.has_adapter("potakait")
        assert not factory.has_adapter("potaka it")

    def test_rejects_non_adapter(self):
        with pytest.raises(ValueError):
            AdapterFactory().register_adapter("bad", dict)
