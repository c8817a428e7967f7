from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from app.models.base import Base, utcnow


class Post(Base):
    """Behind-the-scenes blog entry."""

    __tablename__ = "posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    content = Column(Text, nullable=False)
    excerpt = Column(Text, nullable=True)
    category = Column(String, nullable=True, index=True)
    status = Column(String, default="draft")  # draft | published
    tags = Column(JSON, default=list)
    cover_image = Column(String, nullable=True)
    author_id = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)
