"""Tests for per-retailer build totals."""

from decimal import Decimal

from partpicker.scrapers.base import Listing
from partpicker.services.build_totals import calculate_totals

RETAILERS = ["Startech", "Techland", "UltraTech"]


def _listing(price: str, source: str) -> Listing:
    return Listing(name="part", price=price, image="", availability="In Stock", source=source, url=f"https://{source}/p")


class TestCalculateTotals:
    def test_base_total_uses_discounted_price(self):
        build = {
            "cpu": _listing("৳ 12,500 ৳ 13,000", "Startech"),
            "motherboard": _listing("৳ 11,000", "Techland"),
        }
        totals = calculate_totals(build, retailer_names=RETAILERS)

        assert totals.base == Decimal("23500")
        assert totals.retailers == {
            "Startech": Decimal("12500"),
            "Techland": Decimal("11000"),
            "UltraTech": Decimal("0"),
        }

    def test_cross_site_prices_fill_other_retailers(self):
        build = {
            "cpu": _listing("৳ 12,500", "Startech"),
            "motherboard": _listing("৳ 11,000", "Techland"),
        }
        cross_site = {
            "cpu": {
                "Startech": _listing("৳ 99,999", "Startech"),  # the selection's own retailer is ignored
                "Techland": _listing("৳ 12,800", "Techland"),
                "UltraTech": None,
            },
            "motherboard": {
                "Startech": _listing("৳ 11,500", "Startech"),
                "UltraTech": _listing("Call for price", "UltraTech"),
            },
        }
        totals = calculate_totals(build, cross_site, retailer_names=RETAILERS)

        assert totals.base == Decimal("23500")
        assert totals.retailers["Startech"] == Decimal("24000")
        assert totals.retailers["Techland"] == Decimal("23800")
        assert totals.retailers["UltraTech"] == Decimal("0")

    def test_multi_select_and_zero_prices(self):
        build = {
            "memory": [_listing("৳ 4,000", "Startech"), _listing("৳ 4,200", "Techland")],
            "storage": _listing("Out of stock", "UltraTech"),
            "monitor": None,
        }
        totals = calculate_totals(build, retailer_names=RETAILERS)

        assert totals.base == Decimal("8200")
        assert totals.retailers["Startech"] == Decimal("4000")
        assert totals.retailers["UltraTech"] == Decimal("0")

    def test_defaults_to_every_registered_retailer(self):
        totals = calculate_totals({})
        assert list(totals.retailers) == ["Startech", "Techland", "UltraTech", "Potaka IT", "PC House", "Skyland"]
        assert totals.to_dict()["base"] == 0.0
