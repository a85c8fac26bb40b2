"""Stored offer and price history schemas."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PricePoint(BaseModel):
    price: float
    recorded_at: datetime = Field(alias="recordedAt")

    model_config = ConfigDict(populate_by_name=True)


class RetailerOffer(BaseModel):
    """Current offer of one retailer with its earlier prices, oldest first."""

    retailer: str
    price: str
    original_price: Optional[float] = Field(default=None, alias="originalPrice")
    availability: str
    url: str
    history: List[PricePoint] = []

    model_config = ConfigDict(populate_by_name=True)


class StoredProduct(BaseModel):
    name: str
    type: str
    image: str
    specs: Dict[str, str] = {}


class PriceHistoryResponse(BaseModel):
    product: StoredProduct
    offers: List[RetailerOffer]
