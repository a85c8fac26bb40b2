"""Price refresh: re-read every stored price from its product page."""

import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Optional
from urllib.parse import urlsplit

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from partpicker.config import settings
from partpicker.scrapers.base import BaseRetailerAdapter
from partpicker.scrapers.factory import AdapterFactory
from partpicker.scrapers.utils.rate_limiter import DomainRateLimiter
from partpicker.services.listing_repository import ListingRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class _StoredOffer:
    product_id: uuid.UUID
    retailer_id: uuid.UUID
    product_name: str
    retailer_name: str
    url: str


class PriceRefreshService:
    """Walks stored prices type by type and updates them in place.

    Requests are paced per retailer domain. A product that fails to
    refresh is logged, rolled back and counted; the sweep continues and
    every other price is committed on its own.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        adapter_factory: AdapterFactory,
        rate_limiter: Optional[DomainRateLimiter] = None,
        repository_class: Callable[[AsyncSession], ListingRepository] = ListingRepository,
    ):
        self.session_factory = session_factory
        self.adapter_factory = adapter_factory
        self.repository_class = repository_class
        self.rate_limiter = rate_limiter or DomainRateLimiter(default_rpm=settings.PRICE_REFRESH_RPM)
        self.logger = logger.bind(service="price_refresh")
        self._adapters: Dict[str, Optional[BaseRetailerAdapter]] = {}

    def _adapter_for(self, retailer_name: str) -> Optional[BaseRetailerAdapter]:
        if retailer_name not in self._adapters:
            adapter_class = self.adapter_factory.find_by_name(retailer_name)
            self._adapters[retailer_name] = (
                self.adapter_factory.create_adapter(adapter_class.retailer_slug) if adapter_class else None
            )
        return self._adapters[retailer_name]

    async def refresh_all(self) -> Dict[str, int]:
        """Refresh every stored price.

        Returns:
            Stats dict: types, checked, updated, unchanged, failed
        """
        stats = {"types": 0, "checked": 0, "updated": 0, "unchanged": 0, "failed": 0}

        async with self.session_factory() as db:
            types = await self.repository_class(db).list_types()

        self.logger.info("price_refresh_started", types=types)

        for product_type in types:
            try:
                await self._refresh_type(product_type, stats)
                stats["types"] += 1
            except Exception as e:
                self.logger.error("price_refresh_type_failed", type=product_type, error=str(e), exc_info=True)

        self.logger.info("price_refresh_completed", **stats)
        return stats

    async def _refresh_type(self, product_type: str, stats: Dict[str, int]) -> None:
        async with self.session_factory() as db:
            repository = self.repository_class(db)
            # Plain values: a rollback expires every loaded row
            offers = [
                _StoredOffer(
                    product_id=row.product_id,
                    retailer_id=row.retailer_id,
                    product_name=row.product.name,
                    retailer_name=row.retailer.name,
                    url=row.url,
                )
                for row in await repository.get_prices_by_type(product_type)
            ]

            for offer in offers:
                stats["checked"] += 1
                adapter = self._adapter_for(offer.retailer_name)
                if adapter is None:
                    self.logger.warning("no_adapter_for_retailer", retailer=offer.retailer_name)
                    stats["failed"] += 1
                    continue

                try:
                    await self.rate_limiter.acquire(urlsplit(offer.url).netloc)
                    scraped = await adapter.fetch_product_page(offer.url)
                    if scraped is None:
                        stats["failed"] += 1
                        continue

                    _, changed = await repository.upsert_product_price(
                        product_id=offer.product_id,
                        retailer_id=offer.retailer_id,
                        price=scraped.price,
                        original_price=scraped.original_price,
                        price_text=scraped.price_text,
                        availability=scraped.availability,
                        url=offer.url,
                    )
                    await db.commit()
                except Exception as e:
                    await db.rollback()
                    self.logger.warning(
                        "price_refresh_item_failed",
                        product=offer.product_name,
                        retailer=offer.retailer_name,
                        error=str(e),
                    )
                    stats["failed"] += 1
                    continue

                stats["updated" if changed else "unchanged"] += 1
