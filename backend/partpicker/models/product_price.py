"""Current offer of a product at one retailer."""

import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partpicker.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from partpicker.models.product import Product
    from partpicker.models.retailer import Retailer


class ProductPrice(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Latest scraped price for a (product, retailer) pair."""

    __tablename__ = "product_prices"

    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    retailer_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("retailers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, comment="Discounted/current price in BDT")
    original_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    price_text: Mapped[str] = mapped_column(String(100), nullable=False, default="", comment="Price as shown by the retailer")
    availability: Mapped[str] = mapped_column(String(20), nullable=False, default="Unknown")
    url: Mapped[str] = mapped_column(String(2000), nullable=False)

    __table_args__ = (
        UniqueConstraint("product_id", "retailer_id", name="uq_product_price_retailer"),
    )

    product: Mapped["Product"] = relationship(back_populates="prices")
    retailer: Mapped["Retailer"] = relationship(back_populates="prices")

    def __repr__(self) -> str:
        return f"<ProductPrice(product_id={self.product_id}, retailer_id={self.retailer_id}, price={self.price})>"
