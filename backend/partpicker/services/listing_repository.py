"""Listing repository: stored products, retailer prices and price history.

Scraped listings are written here in the background and read back on
subsequent browse/search requests so the storefronts are not hit on
every page view.
"""

import uuid
from decimal import Decimal
from typing import List, Optional, Tuple
from urllib.parse import urlsplit

import structlog
from sqlalchemy import select
from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from partpicker.models.price_history import PriceHistory
from partpicker.models.product import Product
from partpicker.models.product_price import ProductPrice
from partpicker.models.retailer import Retailer
from partpicker.scrapers.base import Listing
from partpicker.scrapers.utils.normalizer import AvailabilityNormalizer, PriceNormalizer

logger = structlog.get_logger(__name__)


class ListingRepository:
    """Data access for listings.

    The repository flushes but never commits; the caller owns the
    transaction (``save_listings`` is the exception and commits per listing).
    """

    def __init__(self, db: AsyncSession):
        """Initialize listing repository.

        Args:
            db: Async database session
        """
        self.db = db
        self.logger = logger.bind(service="listing_repository")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def get_or_create_retailer(self, name: str, website: str = "") -> Retailer:
        result = await self.db.execute(select(Retailer).where(Retailer.name == name))
        retailer = result.scalar_one_or_none()
        if retailer:
            return retailer

        retailer = Retailer(name=name, website=website)
        self.db.add(retailer)
        await self.db.flush()
        self.logger.info("retailer_created", retailer=name)
        return retailer

    async def upsert_product(
        self,
        name: str,
        type: str,
        image_url: Optional[str] = None,
        specs: Optional[dict] = None,
    ) -> Product:
        """Insert or update a product identified by (name, type).

        Existing image and specs are only replaced by non-empty values.
        """
        result = await self.db.execute(
            select(Product).where(Product.name == name, Product.type == type)
        )
        product = result.scalar_one_or_none()

        if product:
            if image_url:
                product.image_url = image_url
            if specs:
                product.specs = {**(product.specs or {}), **specs}
        else:
            product = Product(name=name, type=type, image_url=image_url or None, specs=dict(specs or {}))
            self.db.add(product)

        await self.db.flush()
        return product

    async def upsert_product_price(
        self,
        product_id: uuid.UUID,
        retailer_id: uuid.UUID,
        price: Decimal,
        url: str,
        price_text: str = "",
        original_price: Optional[Decimal] = None,
        availability: str = AvailabilityNormalizer.UNKNOWN,
    ) -> Tuple[ProductPrice, bool]:
        """Insert or update the offer of a retailer for a product.

        When an existing price changes, the previous price is written to
        ``price_history``.

        Returns:
            (price row, whether the price changed)
        """
        result = await self.db.execute(
            select(ProductPrice).where(
                ProductPrice.product_id == product_id,
                ProductPrice.retailer_id == retailer_id,
            )
        )
        row = result.scalar_one_or_none()

        changed = False
        if row is None:
            row = ProductPrice(
                product_id=product_id,
                retailer_id=retailer_id,
                price=price,
                original_price=original_price,
                price_text=price_text,
                availability=availability,
                url=url,
            )
            self.db.add(row)
        else:
            if Decimal(row.price) != Decimal(price):
                self.db.add(PriceHistory(product_id=product_id, retailer_id=retailer_id, price=row.price))
                self.logger.info(
                    "price_changed",
                    product_id=str(product_id),
                    old_price=str(row.price),
                    new_price=str(price),
                )
                changed = True
            row.price = price
            row.original_price = original_price
            row.price_text = price_text
            row.availability = availability
            row.url = url or row.url

        await self.db.flush()
        return row, changed

    async def save_listings(self, category: str, listings: List[Listing]) -> int:
        """Persist scraped listings of one category, committing each one.

        Listings without a name or URL are skipped. A listing the database
        rejects (constraint or data error) is rolled back and skipped; the
        rest of the batch is still stored. Connection errors propagate so
        the caller can retry the batch.

        Returns:
            Number of listings written
        """
        saved = 0
        skipped = 0
        retailer_ids = {}

        for listing in listings:
            if not listing.name or not listing.url:
                continue

            try:
                retailer_id = retailer_ids.get(listing.source)
                if retailer_id is None:
                    retailer = await self.get_or_create_retailer(listing.source, _website_of(listing.url))
                    retailer_id = retailer_ids[listing.source] = retailer.id

                product = await self.upsert_product(
                    name=listing.name,
                    type=category,
                    image_url=listing.image,
                    specs=listing.specs,
                )
                await self.upsert_product_price(
                    product_id=product.id,
                    retailer_id=retailer_id,
                    price=PriceNormalizer.extract_numeric_price(listing.price),
                    original_price=PriceNormalizer.extract_original_price(listing.price),
                    price_text=listing.price,
                    availability=listing.availability,
                    url=listing.url,
                )
                await self.db.commit()
            except (IntegrityError, DataError) as e:
                await self.db.rollback()
                # A retailer created in the rolled back transaction is gone
                retailer_ids.clear()
                skipped += 1
                self.logger.warning("listing_rejected", category=category, url=listing.url, error=str(e))
                continue
            saved += 1

        self.logger.info("listings_saved", category=category, count=saved, skipped=skipped)
        return saved

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_by_category(
        self,
        category: str,
        search: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Listing]:
        """Stored listings of a category, newest first, optionally name-filtered."""
        query = (
            select(ProductPrice, Product, Retailer)
            .join(Product, ProductPrice.product_id == Product.id)
            .join(Retailer, ProductPrice.retailer_id == Retailer.id)
            .where(Product.type == category)
            .order_by(ProductPrice.updated_at.desc(), Product.name)
        )
        if search and search.strip():
            query = query.where(Product.name.ilike(f"%{search.strip()}%"))
        if limit:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return [_to_listing(price, product, retailer) for price, product, retailer in result.all()]

    async def search_products(self, query: str, limit: int = 50) -> List[Listing]:
        """Stored listings of any category whose name contains ``query``."""
        if not query or not query.strip():
            return []

        stmt = (
            select(ProductPrice, Product, Retailer)
            .join(Product, ProductPrice.product_id == Product.id)
            .join(Retailer, ProductPrice.retailer_id == Retailer.id)
            .where(Product.name.ilike(f"%{query.strip()}%"))
            .order_by(Product.name)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return [_to_listing(price, product, retailer) for price, product, retailer in result.all()]

    async def get_offer_by_url(self, url: str) -> Optional[ProductPrice]:
        """Stored offer behind a listing URL, with its product loaded."""
        result = await self.db.execute(
            select(ProductPrice)
            .where(ProductPrice.url == url)
            .options(joinedload(ProductPrice.product))
            .order_by(ProductPrice.updated_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def get_prices_for_product(self, product_id: uuid.UUID) -> List[ProductPrice]:
        """Every retailer's offer of one product, by retailer name."""
        result = await self.db.execute(
            select(ProductPrice)
            .join(Retailer, ProductPrice.retailer_id == Retailer.id)
            .where(ProductPrice.product_id == product_id)
            .options(joinedload(ProductPrice.retailer))
            .order_by(Retailer.name)
        )
        return list(result.scalars().unique().all())

    async def get_price_history(self, product_id: uuid.UUID, retailer_id: Optional[uuid.UUID] = None) -> List[PriceHistory]:
        query = select(PriceHistory).where(PriceHistory.product_id == product_id)
        if retailer_id is not None:
            query = query.where(PriceHistory.retailer_id == retailer_id)
        query = query.order_by(PriceHistory.recorded_at)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_types(self) -> List[str]:
        result = await self.db.execute(select(Product.type).distinct().order_by(Product.type))
        return list(result.scalars().all())

    async def get_prices_by_type(self, type: str) -> List[ProductPrice]:
        """Price rows of a category with product and retailer loaded."""
        result = await self.db.execute(
            select(ProductPrice)
            .join(Product, ProductPrice.product_id == Product.id)
            .join(Retailer, ProductPrice.retailer_id == Retailer.id)
            .where(Product.type == type)
            .options(joinedload(ProductPrice.product), joinedload(ProductPrice.retailer))
            .order_by(Product.name, Retailer.name)
        )
        return list(result.scalars().unique().all())


def _to_listing(price: ProductPrice, product: Product, retailer: Retailer) -> Listing:
    price_text = price.price_text or PriceNormalizer.format_price(price.price, price.original_price)
    return Listing(
        name=product.name,
        price=price_text,
        image=product.image_url or "",
        availability=price.availability or AvailabilityNormalizer.UNKNOWN,
        source=retailer.name,
        url=price.url,
        specs=dict(product.specs or {}),
    )


def _website_of(url: str) -> str:
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return ""
    return f"{parts.scheme}://{parts.netloc}"
