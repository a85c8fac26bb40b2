"""SQLAlchemy models for PartPicker.

All models are imported here so table metadata is complete before create_all.
"""

from partpicker.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from partpicker.models.retailer import Retailer
from partpicker.models.product import Product
from partpicker.models.product_price import ProductPrice
from partpicker.models.price_history import PriceHistory

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "Retailer",
    "Product",
    "ProductPrice",
    "PriceHistory",
]
