"""Tests for the listing repository."""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from partpicker.models.price_history import PriceHistory
from partpicker.scrapers.base import Listing
from partpicker.services.listing_repository import ListingRepository


def _listing(name: str, source: str = "Startech", price: str = "৳ 12,500", url: str = None, specs=None) -> Listing:
    return Listing(
        name=name,
        price=price,
        image="https://img.example/x.jpg",
        availability="In Stock",
        source=source,
        url=url or f"https://{source.lower()}.example/{name.lower().replace(' ', '-')}",
        specs=specs or {},
    )


class TestListingRepository:
    async def test_save_and_find_by_category(self, test_db: AsyncSession):
        repo = ListingRepository(test_db)
        saved = await repo.save_listings(
            "cpu",
            [
                _listing("AMD Ryzen 5 5600X", price="৳ 12,500 ৳ 13,000", specs={"Cores": "6"}),
                _listing("AMD Ryzen 5 5600X", source="Techland", price="৳ 12,800"),
                _listing("", source="Techland"),
            ],
        )

        assert saved == 2
        listings = await repo.find_by_category("cpu")
        assert len(listings) == 2
        assert {item.source for item in listings} == {"Startech", "Techland"}

        startech = next(item for item in listings if item.source == "Startech")
        assert startech.price == "৳ 12,500 ৳ 13,000"
        assert startech.specs == {"Cores": "6"}
        assert startech.image == "https://img.example/x.jpg"

    async def test_same_name_is_one_product(self, test_db: AsyncSession):
        repo = ListingRepository(test_db)
        await repo.save_listings(
            "cpu",
            [_listing("AMD Ryzen 5 5600X"), _listing("AMD Ryzen 5 5600X", source="Techland")],
        )
        first = await repo.upsert_product("AMD Ryzen 5 5600X", "cpu")
        again = await repo.upsert_product("AMD Ryzen 5 5600X", "cpu")
        assert first.id == again.id

    async def test_find_with_search_filter(self, test_db: AsyncSession):
        repo = ListingRepository(test_db)
        await repo.save_listings("cpu", [_listing("AMD Ryzen 5 5600X"), _listing("Intel Core i5 12400")])

        listings = await repo.find_by_category("cpu", search="ryzen")
        assert [item.name for item in listings] == ["AMD Ryzen 5 5600X"]
        assert await repo.find_by_category("memory") == []

    async def test_price_change_records_history(self, test_db: AsyncSession):
        repo = ListingRepository(test_db)
        retailer = await repo.get_or_create_retailer("Startech", "https://www.startech.com.bd")
        product = await repo.upsert_product("AMD Ryzen 5 5600X", "cpu")

        _, changed = await repo.upsert_product_price(product.id, retailer.id, Decimal("13000"), "https://s/1")
        assert changed is False
        _, changed = await repo.upsert_product_price(product.id, retailer.id, Decimal("13000"), "https://s/1")
        assert changed is False
        _, changed = await repo.upsert_product_price(product.id, retailer.id, Decimal("12500"), "https://s/1")
        assert changed is True
        await test_db.commit()

        history = await repo.get_price_history(product.id, retailer.id)
        assert [Decimal(h.price) for h in history] == [Decimal("13000")]

    async def test_get_or_create_retailer_is_idempotent(self, test_db: AsyncSession):
        repo = ListingRepository(test_db)
        first = await repo.get_or_create_retailer("Skyland", "https://www.skyland.com.bd")
        second = await repo.get_or_create_retailer("Skyland")
        assert first.id == second.id

    async def test_list_types_and_prices_by_type(self, test_db: AsyncSession):
        repo = ListingRepository(test_db)
        await repo.save_listings("cpu", [_listing("AMD Ryzen 5 5600X")])
        await repo.save_listings("memory", [_listing("Corsair 16GB DDR4", source="Techland")])

        assert await repo.list_types() == ["cpu", "memory"]

        rows = await repo.get_prices_by_type("memory")
        assert len(rows) == 1
        assert rows[0].product.name == "Corsair 16GB DDR4"
        assert rows[0].retailer.name == "Techland"
        assert rows[0].retailer.website == "https://techland.example"

    async def test_search_products_across_types(self, test_db: AsyncSession):
        repo = ListingRepository(test_db)
        await repo.save_listings("cpu", [_listing("AMD Ryzen 5 5600X")])
        await repo.save_listings("video-card", [_listing("ASUS Radeon RX 6600")])

        assert [item.name for item in await repo.search_products("radeon")] == ["ASUS Radeon RX 6600"]
        assert await repo.search_products("  ") == []

    async def test_rejected_listing_does_not_discard_batch(self, test_db: AsyncSession):
        class RejectingRepository(ListingRepository):
            async def upsert_product_price(self, **kwargs):
                if kwargs["url"].endswith("/broken"):
                    self.db.add(PriceHistory(product_id=kwargs["product_id"], retailer_id=kwargs["retailer_id"], price=None))
                    await self.db.flush()
                return await super().upsert_product_price(**kwargs)

        repo = RejectingRepository(test_db)
        saved = await repo.save_listings(
            "cpu",
            [
                _listing("AMD Ryzen 5 5600X"),
                _listing("Intel Core i5 12400F", source="Techland", url="https://techland.example/broken"),
                _listing("AMD Ryzen 7 5700X", source="Techland"),
            ],
        )

        assert saved == 2
        listings = await repo.find_by_category("cpu")
        assert sorted((item.source, item.name) for item in listings) == [
            ("Startech", "AMD Ryzen 5 5600X"),
            ("Techland", "AMD Ryzen 7 5700X"),
        ]
