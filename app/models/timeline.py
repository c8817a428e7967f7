from sqlalchemy import Column, DateTime, Integer, String, Text

from app.models.base import Base, utcnow


class TimelineEvent(Base):
    __tablename__ = "timeline_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    date = Column(String, nullable=False, index=True)  # In-universe date, sortable text
    category = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    details = Column(Text, nullable=True)
    book_reference = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)
