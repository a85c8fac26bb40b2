"""Product model: one component identity shared by every retailer offer."""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partpicker.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from partpicker.models.price_history import PriceHistory
    from partpicker.models.product_price import ProductPrice


class Product(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Component identified by (name, type).

    Prices live in ``product_prices``, one row per retailer offering it.
    """

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False, index=True, comment="Component category slug")
    image_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    specs: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        UniqueConstraint("name", "type", name="uq_product_name_type"),
    )

    prices: Mapped[list["ProductPrice"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
    )
    price_history: Mapped[list["PriceHistory"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="PriceHistory.recorded_at",
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name[:50]}', type={self.type})>"
