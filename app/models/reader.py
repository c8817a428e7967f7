import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.models.base import Base, utcnow


class ItemType(str, enum.Enum):
    BOOK = "book"
    VOLUME = "volume"
    SAGA = "saga"
    ARC = "arc"
    ISSUE = "issue"


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("user_id", "item_id", "item_type", name="uq_review_user_item"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = Column(Integer, nullable=False, index=True)
    item_type = Column(String, nullable=False)  # ItemType
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    is_verified_purchase = Column(Boolean, default=False)
    is_spoiler = Column(Boolean, default=False)
    helpful_count = Column(Integer, default=0)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    user = relationship("User")


class UserProgress(Base):
    __tablename__ = "user_progress"
    __table_args__ = (UniqueConstraint("user_id", "item_id", "item_type", name="uq_progress_user_item"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    item_id = Column(Integer, nullable=False)
    item_type = Column(String, nullable=False)
    percent_complete = Column(Float, default=0)
    last_position = Column(String, nullable=True)
    started_at = Column(DateTime(timezone=True), default=utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    last_accessed = Column(DateTime(timezone=True), default=utcnow)
    total_reading_time = Column(Integer, default=0)  # Seconds
    session_count = Column(Integer, default=1)


class StoryRoute(Base):
    """Branching path readers can choose within a catalog item."""

    __tablename__ = "story_routes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(Integer, nullable=False, index=True)
    item_type = Column(String, nullable=False)
    route_key = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    order_index = Column(Integer, default=0)
    is_default_route = Column(Boolean, default=False)
    requires_previous_completion = Column(Boolean, default=False)
    unlock_hint = Column(String, nullable=True)
    unlock_conditions = Column(JSON, nullable=True)
    difficulty_level = Column(String, nullable=True)
    estimated_duration = Column(Integer, nullable=True)  # Minutes
    completion_rewards = Column(JSON, nullable=True)
    narrative_impact = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
