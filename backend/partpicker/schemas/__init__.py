"""Pydantic schemas for API request/response validation."""

from partpicker.schemas.builds import (
    BuildCreatedResponse,
    BuildResponse,
    BuildTotalsRequest,
    BuildTotalsResponse,
)
from partpicker.schemas.cron import PriceRefreshResponse
from partpicker.schemas.health import HealthCheckResponse
from partpicker.schemas.history import (
    PriceHistoryResponse,
    PricePoint,
    RetailerOffer,
    StoredProduct,
)
from partpicker.schemas.listing import (
    ComponentsResponse,
    ListingResponse,
    ProductsResponse,
)

__all__ = [
    "BuildCreatedResponse",
    "BuildResponse",
    "BuildTotalsRequest",
    "BuildTotalsResponse",
    "ComponentsResponse",
    "HealthCheckResponse",
    "ListingResponse",
    "PriceHistoryResponse",
    "PricePoint",
    "PriceRefreshResponse",
    "ProductsResponse",
    "RetailerOffer",
    "StoredProduct",
]
