from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    def to_dict(self) -> dict:
        """Column values only; relationships are shaped by the caller."""
        return {column.name: getattr(self, column.name) for column in self.__table__.columns}
