from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.catalog import CatalogUpdate


class CharacterFields(BaseModel):
    aliases: Optional[List[str]] = None
    description: Optional[str] = None
    appearance: Optional[Any] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    eye_color: Optional[str] = None
    hair_color: Optional[str] = None
    age_range: Optional[str] = None
    personality: Optional[Any] = None
    skills: Optional[List[str]] = None
    abilities: Optional[List[str]] = None
    weaknesses: Optional[List[str]] = None
    motivations: Optional[str] = None
    fears: Optional[str] = None
    avatar_url: Optional[str] = None
    status: Optional[str] = None
    importance_level: Optional[int] = Field(default=None, ge=1, le=10)
    is_main_character: Optional[bool] = None
    is_protagonist: Optional[bool] = None
    is_antagonist: Optional[bool] = None
    first_appearance: Optional[str] = None
    creator: Optional[str] = None
    voice_actor: Optional[str] = None
    tags: Optional[List[str]] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None


class CharacterCreate(CharacterFields):
    name: str = Field(min_length=1)


class CharacterUpdate(CharacterFields, CatalogUpdate):
    non_nullable = ("name",)

    name: Optional[str] = Field(default=None, min_length=1)


class RelationshipCreate(BaseModel):
    character_id: int
    related_character_id: int
    relationship_type: str = Field(min_length=1)
    relationship_subtype: Optional[str] = None
    description: Optional[str] = None
    strength: int = Field(default=5, ge=1, le=10)
    is_mutual: bool = False
    status: str = "active"
    started_at: Optional[str] = None
    ended_at: Optional[str] = None
    context: Optional[str] = None
    created_by: Optional[str] = None


class BulkImportRequest(BaseModel):
    content: str
    format: Literal["csv", "json"]
    field_mapping: Optional[Dict[str, str]] = None
    confirm: bool = False


class TemplateRequest(BaseModel):
    type: Optional[str] = None
    customizations: Optional[Dict[str, Any]] = None


class TagCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    is_system_tag: bool = False
    created_by: Optional[str] = None


class TagAssignmentRequest(BaseModel):
    character_id: int
    tag_ids: List[int]
    confidence: float = Field(default=1.0, ge=0, le=1)
    assigned_by: str = "manual"
    notes: Optional[str] = None
    created_by: Optional[str] = None
