from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from app.schemas.catalog import CatalogUpdate


class PostCreate(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    category: Optional[str] = None
    status: str = "draft"
    tags: List[str] = []
    cover_image: Optional[str] = None


class PostUpdate(CatalogUpdate):
    non_nullable = ("title", "content")

    title: Optional[str] = Field(default=None, min_length=1)
    content: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    tags: Optional[List[str]] = None
    cover_image: Optional[str] = None


class TimelineEventCreate(BaseModel):
    title: str = Field(min_length=1)
    date: str = Field(min_length=1)
    category: Optional[str] = None
    description: Optional[str] = None
    details: Optional[str] = None
    book_reference: Optional[str] = None


class TimelineEventUpdate(CatalogUpdate):
    non_nullable = ("title", "date")

    id: int
    title: Optional[str] = Field(default=None, min_length=1)
    date: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    details: Optional[str] = None
    book_reference: Optional[str] = None


class BetaApplicationCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    motivation: Optional[str] = None
    experience: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    agreed_to_terms: bool = False
