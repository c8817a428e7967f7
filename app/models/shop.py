import enum

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text

from app.models.base import Base, utcnow


class ShopItemType(str, enum.Enum):
    BOOK = "book"
    VOLUME = "volume"
    SAGA = "saga"
    ARC = "arc"
    ISSUE = "issue"


class ShopItem(Base):
    """Flattened catalog node; parent_id links the purchase hierarchy."""

    __tablename__ = "shop_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    parent_id = Column(Integer, ForeignKey("shop_items.id", ondelete="CASCADE"), nullable=True, index=True)
    title = Column(String, nullable=False)
    type = Column(String, nullable=False)  # ShopItemType
    order_index = Column(Integer, default=0)
    price = Column(Float, default=0)
    content = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    cover_image = Column(String, nullable=True)
    status = Column(String, default="draft")

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)
