"""Register all retailer adapters with the factory.

This module should be imported during application startup to register
all available adapters with the adapter factory.
"""

from typing import Optional

import structlog

from partpicker.scrapers.factory import AdapterFactory, get_adapter_factory
from partpicker.scrapers.adapters import (
    PCHouseAdapter,
    PotakaITAdapter,
    SkylandAdapter,
    StartechAdapter,
    TechlandAdapter,
    UltraTechAdapter,
)

logger = structlog.get_logger(__name__)


ALL_ADAPTERS = [
    StartechAdapter,
    TechlandAdapter,
    UltraTechAdapter,
    PotakaITAdapter,
    PCHouseAdapter,
    SkylandAdapter,
]


def register_all_adapters(factory: Optional[AdapterFactory] = None) -> AdapterFactory:
    """Register every retailer adapter with ``factory`` (default: the global one)."""
    factory = factory or get_adapter_factory()

    for adapter_class in ALL_ADAPTERS:
        try:
            factory.register_adapter(adapter_class.retailer_slug, adapter_class)
        except Exception as e:
            logger.error(
                "adapter_registration_failed",
                retailer_slug=adapter_class.retailer_slug,
                error=str(e),
                exc_info=True,
            )

    logger.info(
        "adapters_registered",
        count=len(factory.get_registered_retailers()),
        retailers=factory.get_registered_retailers(),
    )
    return factory
