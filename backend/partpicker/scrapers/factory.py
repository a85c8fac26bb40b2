"""Factory for creating and managing retailer adapter instances."""

from typing import Dict, List, Optional, Type

import httpx
import structlog

from partpicker.scrapers.base import BaseRetailerAdapter
from partpicker.services.cache_service import PageCache, get_cache_service


logger = structlog.get_logger(__name__)


class AdapterFactory:
    """Factory for creating and configuring adapter instances.

    Provides dependency injection for the shared HTTP client and page
    cache. Registration order is the order retailers are queried in.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        cache: Optional[PageCache] = None,
    ):
        self.http_client = http_client
        self.cache = cache
        self._adapter_registry: Dict[str, Type[BaseRetailerAdapter]] = {}

    def register_adapter(self, retailer_slug: str, adapter_class: Type[BaseRetailerAdapter]) -> None:
        """Register an adapter class for a retailer.

        Args:
            retailer_slug: Retailer slug identifier (e.g., "startech")
            adapter_class: Adapter class (must inherit from BaseRetailerAdapter)
        """
        if not isinstance(adapter_class, type) or not issubclass(adapter_class, BaseRetailerAdapter):
            raise ValueError(f"Adapter class must inherit from BaseRetailerAdapter: {adapter_class}")

        self._adapter_registry[retailer_slug] = adapter_class
        logger.debug("adapter_registered", retailer_slug=retailer_slug)

    def create_adapter(self, retailer_slug: str) -> Optional[BaseRetailerAdapter]:
        """Create and configure an adapter instance.

        Returns:
            Configured adapter instance, or None if not registered
        """
        adapter_class = self._adapter_registry.get(retailer_slug)
        if not adapter_class:
            logger.warning("adapter_not_found", retailer_slug=retailer_slug)
            return None

        return adapter_class(http_client=self.http_client, cache=self.cache)

    def create_all(self) -> List[BaseRetailerAdapter]:
        """One configured adapter per registered retailer, in registration order."""
        return [self.create_adapter(slug) for slug in self._adapter_registry]

    def get_registered_retailers(self) -> List[str]:
        return list(self._adapter_registry.keys())

    def has_adapter(self, retailer_slug: str) -> bool:
        return retailer_slug in self._adapter_registry

    def find_by_name(self, retailer_name: str) -> Optional[Type[BaseRetailerAdapter]]:
        """Look up an adapter class by its display name (case-insensitive)."""
        wanted = (retailer_name or "").strip().lower()
        for adapter_class in self._adapter_registry.values():
            if adapter_class.retailer_name.lower() == wanted:
                return adapter_class
        return None


_factory: Optional[AdapterFactory] = None


def get_adapter_factory() -> AdapterFactory:
    """Get the global adapter factory instance.

    Returns:
        AdapterFactory instance
    """
    global _factory
    if _factory is None:
        _factory = AdapterFactory(cache=get_cache_service())
    return _factory
