from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.models.base import Base, utcnow


class EasterEgg(Base):
    __tablename__ = "easter_eggs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(Integer, nullable=False, index=True)
    item_type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    trigger_type = Column(String, default="click")  # click | hover | sequence
    reward = Column(String, nullable=True)
    reward_data = Column(JSON, nullable=True)  # {"points": int, "exclusive_art": str}
    position = Column(JSON, nullable=True)  # {"x": float, "y": float}
    is_active = Column(Boolean, default=True)
    available_from = Column(DateTime(timezone=True), nullable=True)
    available_until = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)


class UserEasterEggDiscovery(Base):
    __tablename__ = "user_easter_egg_discoveries"
    __table_args__ = (UniqueConstraint("user_id", "easter_egg_id", name="uq_discovery_user_egg"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    easter_egg_id = Column(Integer, ForeignKey("easter_eggs.id", ondelete="CASCADE"), nullable=False)
    discovered_at = Column(DateTime(timezone=True), default=utcnow)
    discovery_method = Column(String, default="click")
    hints_used = Column(Integer, default=0)

    easter_egg = relationship("EasterEgg")
