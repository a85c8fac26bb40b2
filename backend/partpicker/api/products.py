"""Free-text product search across every retailer."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from partpicker.config import settings
from partpicker.core.exceptions import BadRequestError
from partpicker.dependencies import get_aggregator
from partpicker.schemas import ListingResponse, ProductsResponse
from partpicker.services.aggregator import ComponentAggregator

router = APIRouter()


@router.get("/products", response_model=ProductsResponse, response_model_exclude_none=True)
async def search_products(
    query: Optional[str] = Query(None, description="Search text"),
    limit: int = Query(settings.DEFAULT_RETAILER_LIMIT, ge=1, le=100, description="Results per retailer"),
    aggregator: ComponentAggregator = Depends(get_aggregator),
):
    """Search every retailer and return hits ordered by relevance."""
    if not query or not query.strip():
        raise BadRequestError("Query parameter is required")

    listings = await aggregator.search_products(query.strip(), limit)
    return ProductsResponse(products=[ListingResponse.from_listing(item) for item in listings])
