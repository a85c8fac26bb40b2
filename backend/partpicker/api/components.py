"""Component browsing by category."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from partpicker.config import settings
from partpicker.core.exceptions import BadRequestError
from partpicker.dependencies import get_aggregator
from partpicker.schemas import ComponentsResponse, ListingResponse
from partpicker.services.aggregator import ComponentAggregator

router = APIRouter()


@router.get("/components", response_model=ComponentsResponse, response_model_exclude_none=True)
async def get_components(
    type: Optional[str] = Query(None, description="Component category, e.g. cpu"),
    search: Optional[str] = Query(None, description="Optional name filter"),
    limit: int = Query(settings.DEFAULT_RETAILER_LIMIT, ge=1, le=100, description="Results per retailer"),
    aggregator: ComponentAggregator = Depends(get_aggregator),
):
    """Listings of a component category from the store or live retailers.

    An unknown category yields an empty list rather than an error.
    """
    if not type or not type.strip():
        raise BadRequestError("Type parameter is required")

    listings = await aggregator.get_components(type.strip(), search, limit)
    return ComponentsResponse(components=[ListingResponse.from_listing(item) for item in listings])
