"""Per-retailer price totals of a PC build.

The base total is what the build costs as selected. Each retailer total is
what the same build would cost buying everything at that retailer: its own
selected parts plus its cross-site match for every part selected elsewhere.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Union

from partpicker.scrapers.base import Listing
from partpicker.scrapers.register_adapters import ALL_ADAPTERS

Selection = Union[Listing, List[Listing], None]


@dataclass
class BuildTotals:
    base: Decimal = Decimal("0")
    retailers: Dict[str, Decimal] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "base": float(self.base),
            "retailers": {name: float(total) for name, total in self.retailers.items()},
        }


def _as_list(selection: Selection) -> List[Listing]:
    if selection is None:
        return []
    if isinstance(selection, Listing):
        return [selection]
    return [item for item in selection if item is not None]


def calculate_totals(
    build: Mapping[str, Selection],
    cross_site: Optional[Mapping[str, Mapping[str, Optional[Listing]]]] = None,
    retailer_names: Optional[Iterable[str]] = None,
) -> BuildTotals:
    """Sum a build per retailer.

    Args:
        build: category -> selected listing (or list for multi-select categories)
        cross_site: category -> retailer name -> best match at that retailer
        retailer_names: retailers to report; defaults to every registered one

    Listings whose price text yields 0 are skipped.
    """
    cross_site = cross_site or {}
    names = list(retailer_names) if retailer_names is not None else [a.retailer_name for a in ALL_ADAPTERS]
    totals = BuildTotals(retailers={name: Decimal("0") for name in names})

    for category, selection in build.items():
        selected = _as_list(selection)
        if not selected:
            continue

        for listing in selected:
            price = listing.numeric_price
            if price <= 0:
                continue
            totals.base += price
            if listing.source in totals.retailers:
                totals.retailers[listing.source] += price

        sources = {listing.source for listing in selected}
        for retailer, match in (cross_site.get(category) or {}).items():
            if match is None or retailer in sources or retailer not in totals.retailers:
                continue
            price = match.numeric_price
            if price > 0:
                totals.retailers[retailer] += price

    return totals
