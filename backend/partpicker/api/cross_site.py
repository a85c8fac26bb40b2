"""Cross-site lookup of one product at the other retailers."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from partpicker.core.exceptions import BadRequestError
from partpicker.dependencies import get_cross_site_matcher
from partpicker.services.cross_site import CrossSiteMatcher

router = APIRouter()


@router.get("/cross-site-search")
async def cross_site_search(
    query: Optional[str] = Query(None, description="Product name as shown by its retailer"),
    exclude_source: Optional[str] = Query(None, alias="excludeSource"),
    limit: int = Query(10, ge=1, le=50, description="Candidates considered per retailer"),
    matcher: CrossSiteMatcher = Depends(get_cross_site_matcher),
):
    """Best match per retailer; retailers with no match map to null."""
    if not query or not query.strip():
        raise BadRequestError("Query parameter is required")

    matches = await matcher.find_matches(query.strip(), exclude_source, limit)
    return {
        "crossSiteProducts": {
            retailer: listing.to_dict() if listing else None
            for retailer, listing in matches.items()
        }
    }
