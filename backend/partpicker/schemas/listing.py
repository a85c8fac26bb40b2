"""Listing response schemas."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from partpicker.scrapers.base import Listing


class ListingResponse(BaseModel):
    """One retailer offer as returned by the API.

    ``specs`` is omitted from the JSON when a listing has none.
    """

    model_config = ConfigDict(from_attributes=True)

    name: str
    price: str
    image: str
    availability: str
    source: str
    url: str
    specs: Optional[Dict[str, str]] = None

    @classmethod
    def from_listing(cls, listing: Listing) -> "ListingResponse":
        return cls(**listing.to_dict())

    def to_listing(self) -> Listing:
        return Listing.from_dict(self.model_dump(exclude_none=True))


class ProductsResponse(BaseModel):
    products: List[ListingResponse]


class ComponentsResponse(BaseModel):
    components: List[ListingResponse]

