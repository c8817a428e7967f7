import enum

from sqlalchemy import Column, DateTime, String

from app.models.base import Base, utcnow


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """Local profile for an identity-provider account; carries the role."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)  # Identity provider subject
    email = Column(String, nullable=True)
    role = Column(String, default=UserRole.USER.value, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
