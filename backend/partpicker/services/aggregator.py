"""Multi-retailer aggregation of component listings."""

import asyncio
from typing import Awaitable, Iterable, List, Optional, Sequence, TypeVar

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from partpicker.config import settings
from partpicker.scrapers.base import BaseRetailerAdapter, Listing
from partpicker.services.listing_repository import ListingRepository
from partpicker.services.persistence_worker import BackgroundPersister
from partpicker.services.relevance import sort_by_relevance

logger = structlog.get_logger(__name__)

T = TypeVar("T")


async def gather_settled(
    coros: Iterable[Awaitable[List[T]]],
    labels: Optional[Sequence[str]] = None,
) -> List[List[T]]:
    """Run every coroutine to completion and keep the successful results.

    A failing coroutine is logged and contributes nothing; the others are
    unaffected. Result order follows input order.
    """
    coros = list(coros)
    results = await asyncio.gather(*coros, return_exceptions=True)

    settled: List[List[T]] = []
    for idx, result in enumerate(results):
        if isinstance(result, BaseException):
            logger.warning(
                "fanout_task_failed",
                source=labels[idx] if labels else idx,
                error=str(result) or type(result).__name__,
            )
            continue
        settled.append(result)
    return settled


def merge_unique(*groups: Iterable[Listing]) -> List[Listing]:
    """Concatenate listing groups, dropping repeated URLs (first one wins)."""
    seen = set()
    merged: List[Listing] = []
    for group in groups:
        for listing in group:
            if listing.url:
                if listing.url in seen:
                    continue
                seen.add(listing.url)
            merged.append(listing)
    return merged


class ComponentAggregator:
    """Combines stored listings with live results from every retailer."""

    def __init__(
        self,
        adapters: List[BaseRetailerAdapter],
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        persister: Optional[BackgroundPersister] = None,
        search_threshold: Optional[int] = None,
        browse_threshold: Optional[int] = None,
    ):
        self.adapters = adapters
        self.session_factory = session_factory
        self.persister = persister
        self.search_threshold = (
            search_threshold if search_threshold is not None else settings.SEARCH_STORE_THRESHOLD
        )
        self.browse_threshold = (
            browse_threshold if browse_threshold is not None else settings.BROWSE_STORE_THRESHOLD
        )
        self.logger = logger.bind(service="component_aggregator")

    async def search_products(self, query: str, limit: int = 20) -> List[Listing]:
        """Free-text search across all retailers, sorted by relevance."""
        groups = await gather_settled(
            (adapter.search_products(query, limit) for adapter in self.adapters),
            labels=[adapter.retailer_slug for adapter in self.adapters],
        )
        merged = [listing for group in groups for listing in group]

        self.logger.info("products_searched", query=query, count=len(merged))
        return sort_by_relevance(merged, query)

    async def get_components(
        self,
        category: str,
        search: Optional[str] = None,
        limit: int = 20,
    ) -> List[Listing]:
        """Listings of a category, served from the store when it holds enough.

        Below the threshold every retailer is queried concurrently; scraped
        listings are merged after the stored ones and handed to the
        background persister.
        """
        searching = bool(search and search.strip())
        threshold = self.search_threshold if searching else self.browse_threshold

        stored = await self._load_stored(category, search)
        if len(stored) >= threshold:
            self.logger.info("components_from_store", category=category, search=search, count=len(stored))
            return sort_by_relevance(stored, search) if searching else stored

        groups = await gather_settled(
            (adapter.fetch_components(category, search, limit) for adapter in self.adapters),
            labels=[adapter.retailer_slug for adapter in self.adapters],
        )
        scraped = [listing for group in groups for listing in group]

        if scraped and self.persister is not None:
            self.persister.submit(category, scraped)

        merged = merge_unique(stored, scraped)
        self.logger.info(
            "components_scraped",
            category=category,
            search=search,
            stored=len(stored),
            scraped=len(scraped),
            returned=len(merged),
        )
        return sort_by_relevance(merged, search) if searching else merged

    async def _load_stored(self, category: str, search: Optional[str]) -> List[Listing]:
        if self.session_factory is None:
            return []
        try:
            async with self.session_factory() as db:
                return await ListingRepository(db).find_by_category(category, search)
        except Exception as e:
            self.logger.error("store_lookup_failed", category=category, error=str(e))
            return []
