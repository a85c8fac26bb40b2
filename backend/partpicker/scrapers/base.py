"""Base retailer adapter.

Every storefront is described by a RetailerAdapter subclass that only
declares data: its category URL table, search URL and CSS selectors. The
fetch -> parse -> (optional detail fetch) -> normalize routine lives here,
once, for all retailers.
"""

import asyncio
import dataclasses
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from decimal import Decimal
from typing import AsyncIterator, Dict, List, Optional, Tuple
from urllib.parse import quote_plus

import httpx
import structlog
from bs4 import BeautifulSoup

from partpicker.config import settings
from partpicker.scrapers.utils.normalizer import (
    AvailabilityNormalizer,
    ComponentTypeMatcher,
    PriceNormalizer,
    SpecExtractor,
    absolute_url,
)
from partpicker.scrapers.utils.user_agents import build_browser_headers
from partpicker.services.cache_service import PageCache


@dataclass
class Listing:
    """One scraped product offer from one retailer."""

    name: str
    price: str
    image: str
    availability: str
    source: str
    url: str
    specs: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = {
            "name": self.name,
            "price": self.price,
            "image": self.image,
            "availability": self.availability,
            "source": self.source,
            "url": self.url,
        }
        if self.specs:
            data["specs"] = dict(self.specs)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Listing":
        return cls(
            name=data.get("name", ""),
            price=data.get("price", ""),
            image=data.get("image", ""),
            availability=data.get("availability", AvailabilityNormalizer.UNKNOWN),
            source=data.get("source", ""),
            url=data.get("url", ""),
            specs=dict(data.get("specs") or {}),
        )

    @property
    def numeric_price(self) -> Decimal:
        return PriceNormalizer.extract_numeric_price(self.price)


@dataclass
class ScrapedPrice:
    """Price data read from a product detail page."""

    price: Decimal
    price_text: str
    availability: str
    original_price: Optional[Decimal] = None


@dataclass(frozen=True)
class ListingSelectors:
    """CSS selectors for one product card on a category/search page."""

    item: str
    name: str
    link: str
    price: str
    price_new: str
    price_old: str
    image: str
    availability: str


@dataclass(frozen=True)
class DetailSelectors:
    """CSS selectors for a product detail page; availability is tried in order."""

    price: str
    price_new: str
    price_old: str
    availability: Tuple[str, ...]


class BaseRetailerAdapter:
    """Generic fetch/parse routine driven by per-retailer data.

    Subclasses override the class attributes only. Collaborators (HTTP
    client, page cache) are injected by the factory or by tests.
    """

    retailer_slug: str = ""  # Must be overridden in subclass (e.g., "startech")
    retailer_name: str = ""  # Display name used as Listing.source (e.g., "Startech")
    base_url: str = ""

    CATEGORY_URLS: Dict[str, str] = {}
    SEARCH_URL_TEMPLATE: str = ""  # formatted with the URL-encoded query
    LISTING_SELECTORS: Optional[ListingSelectors] = None
    DETAIL_SELECTORS: Optional[DetailSelectors] = None
    FETCH_DETAIL_AVAILABILITY: bool = False

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        cache: Optional[PageCache] = None,
        timeout: Optional[float] = None,
        detail_timeout: Optional[float] = None,
        fetch_detail: Optional[bool] = None,
        detail_concurrency: Optional[int] = None,
    ):
        self.http_client = http_client
        self.cache = cache
        self.timeout = timeout if timeout is not None else settings.SCRAPER_TIMEOUT_SECONDS
        self.detail_timeout = (
            detail_timeout if detail_timeout is not None else settings.DETAIL_TIMEOUT_SECONDS
        )
        if fetch_detail is None:
            fetch_detail = settings.DETAIL_FETCH_ENABLED and self.FETCH_DETAIL_AVAILABILITY
        self.fetch_detail = fetch_detail and self.DETAIL_SELECTORS is not None
        self.detail_concurrency = max(1, detail_concurrency or settings.DETAIL_FETCH_CONCURRENCY)
        self.logger = structlog.get_logger(adapter=self.retailer_slug)

    # ------------------------------------------------------------------
    # URL building
    # ------------------------------------------------------------------

    def build_url(self, category: Optional[str], search: Optional[str] = None) -> Optional[str]:
        """Search URL for a free-text query, else the category page, else None."""
        if search and search.strip():
            return self.SEARCH_URL_TEMPLATE.format(query=quote_plus(search.strip()))
        if category:
            return self.CATEGORY_URLS.get(category)
        return None

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def fetch_components(
        self,
        category: str,
        search: Optional[str] = None,
        limit: int = 20,
    ) -> List[Listing]:
        """Fetch up to ``limit`` listings of a component category.

        In search mode the retailer's search page is used and hits whose
        names do not look like ``category`` are dropped.

        Never raises: network errors, timeouts and non-2xx responses
        yield an empty list.
        """
        url = self.build_url(category, search)
        if not url:
            self.logger.debug("unsupported_category", category=category)
            return []

        try:
            async with self._client() as client:
                html = await self._fetch_html(client, url, self.timeout)
                if html is None:
                    return []

                listings = self.parse_listing_page(
                    html,
                    category=category,
                    filter_by_type=bool(search and search.strip()),
                    limit=limit,
                )
                if self.fetch_detail and listings:
                    listings = await self._enrich_availability(client, listings)
        except Exception as e:
            self.logger.error("fetch_components_failed", category=category, url=url, error=str(e))
            return []

        self.logger.info("fetched_components", category=category, search=search, count=len(listings))
        return listings

    async def search_products(self, query: str, limit: int = 20) -> List[Listing]:
        """Free-text search with no category filtering. Never raises."""
        url = self.build_url(None, query)
        if not url:
            return []

        try:
            async with self._client() as client:
                html = await self._fetch_html(client, url, self.timeout)
                if html is None:
                    return []
                listings = self.parse_listing_page(html, category=None, filter_by_type=False, limit=limit)
        except Exception as e:
            self.logger.error("search_products_failed", query=query, error=str(e))
            return []

        self.logger.info("searched_products", query=query, count=len(listings))
        return listings

    async def fetch_detail_availability(
        self, listing: Listing, client: Optional[httpx.AsyncClient] = None
    ) -> Listing:
        """Re-read availability from the listing's own product page.

        Returns the listing unchanged when the page cannot be fetched or
        carries no recognizable stock text.
        """
        if not listing.url or self.DETAIL_SELECTORS is None:
            return listing

        async with self._client(client) as active:
            html = await self._fetch_html(active, listing.url, self.detail_timeout)
        if html is None:
            return listing

        soup = BeautifulSoup(html, "html.parser")
        for selector in self.DETAIL_SELECTORS.availability:
            raw = self._select_text(soup, selector)
            if raw:
                availability = AvailabilityNormalizer.normalize(raw)
                if availability != listing.availability:
                    self.logger.debug(
                        "detail_availability_changed",
                        url=listing.url,
                        before=listing.availability,
                        after=availability,
                    )
                return dataclasses.replace(listing, availability=availability)
        return listing

    async def fetch_product_page(self, url: str) -> Optional[ScrapedPrice]:
        """Read current price and stock from a product page, bypassing the cache."""
        if self.DETAIL_SELECTORS is None:
            return None

        async with self._client() as client:
            html = await self._fetch_html(client, url, self.timeout, use_cache=False)
        if html is None:
            return None

        soup = BeautifulSoup(html, "html.parser")
        selectors = self.DETAIL_SELECTORS
        price_text = PriceNormalizer.merge_price_text(
            self._select_text(soup, selectors.price),
            self._select_text(soup, selectors.price_new),
            self._select_text(soup, selectors.price_old),
        )
        price = PriceNormalizer.extract_numeric_price(price_text)
        if price <= 0:
            self.logger.warning("product_page_without_price", url=url)
            return None

        availability = AvailabilityNormalizer.UNKNOWN
        for selector in selectors.availability:
            raw = self._select_text(soup, selector)
            if raw:
                availability = AvailabilityNormalizer.normalize(raw)
                break

        return ScrapedPrice(
            price=price,
            price_text=price_text,
            availability=availability,
            original_price=PriceNormalizer.extract_original_price(price_text),
        )

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse_listing_page(
        self,
        html: str,
        category: Optional[str],
        filter_by_type: bool = False,
        limit: int = 20,
    ) -> List[Listing]:
        """Parse product cards from a category or search page.

        A card that fails to parse is skipped; its siblings are kept.
        """
        selectors = self.LISTING_SELECTORS
        if selectors is None:
            return []

        soup = BeautifulSoup(html, "html.parser")
        cards = soup.select(selectors.item)[: max(0, limit)]

        listings: List[Listing] = []
        for card in cards:
            try:
                listing = self._parse_card(card, category)
            except Exception as e:
                self.logger.warning("failed_to_parse_card", error=str(e))
                continue

            if listing is None:
                continue
            if filter_by_type and category and not ComponentTypeMatcher.matches(listing.name, category):
                continue
            listings.append(listing)

        return listings

    def _parse_card(self, card, category: Optional[str]) -> Optional[Listing]:
        selectors = self.LISTING_SELECTORS
        name = self._select_text(card, selectors.name)
        price = PriceNormalizer.merge_price_text(
            self._select_text(card, selectors.price),
            self._select_text(card, selectors.price_new),
            self._select_text(card, selectors.price_old),
        )
        link = card.select_one(selectors.link)
        url = absolute_url(self.base_url, link.get("href") if link else None)

        if not (name or price or url):
            return None

        image_elem = card.select_one(selectors.image)
        image = ""
        if image_elem:
            image = absolute_url(
                self.base_url,
                image_elem.get("src") or image_elem.get("data-src") or image_elem.get("data-original"),
            )

        return Listing(
            name=name,
            price=price,
            image=image,
            availability=AvailabilityNormalizer.normalize(self._select_text(card, selectors.availability)),
            source=self.retailer_name,
            url=url,
            specs=SpecExtractor.extract(name, category) if category else {},
        )

    @staticmethod
    def _select_text(node, selector: str) -> str:
        if not selector:
            return ""
        found = node.select_one(selector)
        if not found:
            return ""
        return PriceNormalizer.collapse_whitespace(found.get_text(" ", strip=True))

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _client(self, client: Optional[httpx.AsyncClient] = None) -> AsyncIterator[httpx.AsyncClient]:
        """Yield the given/injected client, or a short-lived one for this call."""
        if client is not None:
            yield client
        elif self.http_client is not None:
            yield self.http_client
        else:
            async with httpx.AsyncClient(follow_redirects=True) as owned:
                yield owned

    async def _fetch_html(
        self,
        client: httpx.AsyncClient,
        url: str,
        timeout: float,
        use_cache: bool = True,
    ) -> Optional[str]:
        """Single-attempt GET. Returns None on timeout, network error or non-2xx."""
        if use_cache and self.cache is not None:
            cached = await self.cache.get_page(url)
            if cached:
                return cached

        try:
            response = await asyncio.wait_for(
                client.get(url, headers=build_browser_headers(), timeout=timeout),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            self.logger.warning("fetch_timeout", url=url, timeout=timeout)
            return None
        except httpx.HTTPError as e:
            self.logger.warning("fetch_failed", url=url, error=str(e))
            return None

        if not response.is_success:
            self.logger.warning("fetch_bad_status", url=url, status=response.status_code)
            return None

        html = response.text
        if use_cache and self.cache is not None and html:
            await self.cache.set_page(url, html, ttl=settings.PAGE_CACHE_TTL_SECONDS)
        return html

    async def _enrich_availability(self, client: httpx.AsyncClient, listings: List[Listing]) -> List[Listing]:
        """Concurrent, failure-isolated detail-page availability lookups."""
        semaphore = asyncio.Semaphore(self.detail_concurrency)

        async def _one(listing: Listing) -> Listing:
            async with semaphore:
                return await self.fetch_detail_availability(listing, client)

        results = await asyncio.gather(*(_one(listing) for listing in listings), return_exceptions=True)

        enriched: List[Listing] = []
        for listing, result in zip(listings, results):
            if isinstance(result, BaseException):
                self.logger.warning("detail_fetch_failed", url=listing.url, error=str(result))
                enriched.append(listing)
            else:
                enriched.append(result)
        return enriched
