"""Read-only views over the listing store."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from partpicker.core.exceptions import BadRequestError, NotFoundError
from partpicker.dependencies import get_db
from partpicker.schemas import (
    ListingResponse,
    PriceHistoryResponse,
    PricePoint,
    ProductsResponse,
    RetailerOffer,
    StoredProduct,
)
from partpicker.scrapers.utils.normalizer import PriceNormalizer
from partpicker.services.listing_repository import ListingRepository
from partpicker.services.relevance import sort_by_relevance

router = APIRouter()


@router.get("/stored-products", response_model=ProductsResponse, response_model_exclude_none=True)
async def search_stored_products(
    query: Optional[str] = Query(None, description="Search text"),
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    """Stored listings of any category whose name contains the query, by relevance."""
    if not query or not query.strip():
        raise BadRequestError("Query parameter is required")

    listings = await ListingRepository(db).search_products(query.strip(), limit)
    return ProductsResponse(
        products=[ListingResponse.from_listing(item) for item in sort_by_relevance(listings, query.strip())]
    )


@router.get("/price-history", response_model=PriceHistoryResponse)
async def get_price_history(
    url: Optional[str] = Query(None, description="Product page URL at any retailer"),
    db: AsyncSession = Depends(get_db),
):
    """Every stored offer of the product behind ``url`` with its earlier prices."""
    if not url or not url.strip():
        raise BadRequestError("URL parameter is required")

    repository = ListingRepository(db)
    offer = await repository.get_offer_by_url(url.strip())
    if offer is None:
        raise NotFoundError("Product", url.strip())

    product = offer.product
    offers = []
    for price in await repository.get_prices_for_product(product.id):
        history = await repository.get_price_history(product.id, price.retailer_id)
        offers.append(
            RetailerOffer(
                retailer=price.retailer.name,
                price=PriceNormalizer.display_price(
                    price.price_text or PriceNormalizer.format_price(price.price, price.original_price)
                ),
                original_price=float(price.original_price) if price.original_price is not None else None,
                availability=price.availability,
                url=price.url,
                history=[PricePoint(price=float(point.price), recorded_at=point.recorded_at) for point in history],
            )
        )

    return PriceHistoryResponse(
        product=StoredProduct(
            name=product.name,
            type=product.type,
            image=product.image_url or "",
            specs=dict(product.specs or {}),
        ),
        offers=offers,
    )
