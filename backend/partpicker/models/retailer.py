"""Retailer model representing a Bangladeshi PC-parts storefront."""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from partpicker.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from partpicker.models.product_price import ProductPrice


class Retailer(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Storefront such as Startech or Techland.

    ``name`` is the display name carried as ``source`` on every listing.
    """

    __tablename__ = "retailers"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    website: Mapped[str] = mapped_column(String(500), nullable=False)
    logo_url: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    prices: Mapped[list["ProductPrice"]] = relationship(back_populates="retailer")

    def __repr__(self) -> str:
        return f"<Retailer(name='{self.name}')>"
