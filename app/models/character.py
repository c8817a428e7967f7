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


class Character(Base):
    __tablename__ = "characters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, index=True)
    aliases = Column(JSON, default=list)
    description = Column(Text, nullable=True)
    appearance = Column(JSON, nullable=True)
    height = Column(String, nullable=True)
    weight = Column(String, nullable=True)
    eye_color = Column(String, nullable=True)
    hair_color = Column(String, nullable=True)
    age_range = Column(String, nullable=True)
    personality = Column(JSON, nullable=True)
    skills = Column(JSON, default=list)
    abilities = Column(JSON, default=list)
    weaknesses = Column(JSON, default=list)
    motivations = Column(Text, nullable=True)
    fears = Column(Text, nullable=True)
    avatar_url = Column(String, nullable=True)
    status = Column(String, default="active")
    importance_level = Column(Integer, default=5)
    is_main_character = Column(Boolean, default=False)
    is_protagonist = Column(Boolean, default=False)
    is_antagonist = Column(Boolean, default=False)
    first_appearance = Column(String, nullable=True)
    creator = Column(String, nullable=True)
    voice_actor = Column(String, nullable=True)
    tags = Column(JSON, default=list)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    relationships = relationship(
        "CharacterRelationship",
        foreign_keys="CharacterRelationship.character_id",
        back_populates="character",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    related_relationships = relationship(
        "CharacterRelationship",
        foreign_keys="CharacterRelationship.related_character_id",
        back_populates="related_character",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class CharacterRelationship(Base):
    """Directed edge of the character graph; mutual links are stored as two rows."""

    __tablename__ = "character_relationships"

    id = Column(Integer, primary_key=True, autoincrement=True)
    character_id = Column(Integer, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True)
    related_character_id = Column(
        Integer, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True
    )
    relationship_type = Column(String, nullable=False)
    relationship_subtype = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    strength = Column(Integer, default=5)
    is_mutual = Column(Boolean, default=False)
    status = Column(String, default="active")
    started_at = Column(String, nullable=True)  # In-universe date, free text
    ended_at = Column(String, nullable=True)
    context = Column(Text, nullable=True)
    created_by = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)

    character = relationship("Character", foreign_keys=[character_id], back_populates="relationships")
    related_character = relationship(
        "Character", foreign_keys=[related_character_id], back_populates="related_relationships"
    )


class CharacterTag(Base):
    __tablename__ = "character_tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True, index=True)
    color = Column(String, nullable=True)
    icon = Column(String, nullable=True)
    is_system_tag = Column(Boolean, default=False)
    usage_count = Column(Integer, default=0)
    created_by = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)


class CharacterTagAssignment(Base):
    __tablename__ = "character_tag_assignments"
    __table_args__ = (UniqueConstraint("character_id", "tag_id", name="uq_character_tag"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    character_id = Column(Integer, ForeignKey("characters.id", ondelete="CASCADE"), nullable=False, index=True)
    tag_id = Column(Integer, ForeignKey("character_tags.id", ondelete="CASCADE"), nullable=False)
    confidence = Column(Float, default=1.0)
    assigned_by = Column(String, default="manual")  # manual | import | ai
    notes = Column(Text, nullable=True)
    created_by = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    tag = relationship("CharacterTag")
