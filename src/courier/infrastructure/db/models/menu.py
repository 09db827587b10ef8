from __future__ import annotations

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, true
from sqlalchemy.orm import Mapped, mapped_column

from courier.infrastructure.db.models.party import Base


class MenuItemModel(Base):
    """Catalogue row a restaurant prices orders against; prices are integer cents."""

    __tablename__ = "menu_items"
    __table_args__ = (CheckConstraint("price_cents >= 0", name="ck_menu_items_price_non_negative"),)

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    restaurant_id: Mapped[str] = mapped_column(
        ForeignKey("restaurants.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    price_cents: Mapped[int] = mapped_column(Integer)
    currency: Mapped[str] = mapped_column(String(3))
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, server_default=true())
