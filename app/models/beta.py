import enum

from sqlalchemy import JSON, Boolean, Column, DateTime, Integer, String, Text

from app.models.base import Base, utcnow


class BetaStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"


class BetaApplication(Base):
    __tablename__ = "beta_applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    motivation = Column(Text, nullable=True)
    experience = Column(Text, nullable=True)
    details = Column(JSON, nullable=True)  # Free-form answers from the application form
    agreed_to_terms = Column(Boolean, default=False)
    status = Column(String, default=BetaStatus.PENDING.value)

    submitted_at = Column(DateTime(timezone=True), default=utcnow)
