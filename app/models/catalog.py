import enum

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from app.models.base import Base, utcnow


class PublishStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Book(Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    author = Column(String, nullable=True)
    price = Column(Float, default=0)
    cover_image_url = Column(String, nullable=True)
    status = Column(String, default=PublishStatus.DRAFT.value)
    total_word_count = Column(Integer, default=0)
    is_complete = Column(Boolean, default=False)
    physical_available = Column(Boolean, default=False)
    digital_bundle = Column(Boolean, default=False)
    publication_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    volumes = relationship(
        "Volume",
        back_populates="book",
        order_by="Volume.order_index",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Volume(Base):
    __tablename__ = "volumes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=True)
    order_index = Column(Integer, default=0)
    status = Column(String, default=PublishStatus.DRAFT.value)
    physical_available = Column(Boolean, default=False)
    digital_bundle = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    book = relationship("Book", back_populates="volumes")
    sagas = relationship(
        "Saga",
        back_populates="volume",
        order_by="Saga.order_index",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Saga(Base):
    __tablename__ = "sagas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    volume_id = Column(Integer, ForeignKey("volumes.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=True)
    order_index = Column(Integer, default=0)
    status = Column(String, default=PublishStatus.DRAFT.value)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    volume = relationship("Volume", back_populates="sagas")
    arcs = relationship(
        "Arc",
        back_populates="saga",
        order_by="Arc.order_index",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Arc(Base):
    __tablename__ = "arcs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    saga_id = Column(Integer, ForeignKey("sagas.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=True)
    order_index = Column(Integer, default=0)
    status = Column(String, default=PublishStatus.DRAFT.value)
    is_complete = Column(Boolean, default=False)
    bundle_discount = Column(Float, default=0.0)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    saga = relationship("Saga", back_populates="arcs")
    issues = relationship(
        "Issue",
        back_populates="arc",
        order_by="Issue.order_index",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Issue(Base):
    __tablename__ = "issues"

    id = Column(Integer, primary_key=True, autoincrement=True)
    arc_id = Column(Integer, ForeignKey("arcs.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=True)
    word_count = Column(Integer, default=40000)
    release_date = Column(Date, nullable=True)
    cover_image = Column(String, nullable=True)
    tags = Column(JSON, default=list)  # list[str]
    order_index = Column(Integer, default=0)
    status = Column(String, default=PublishStatus.DRAFT.value)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    arc = relationship("Arc", back_populates="issues")
