from datetime import date
from typing import Any, ClassVar, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationInfo, field_validator


class CatalogUpdate(BaseModel):
    # Accepted from clients but never written; the service stamps its own values.
    created_at: Optional[Any] = None
    updated_at: Optional[Any] = None

    # Columns the table declares NOT NULL; omitting them is fine, sending null is not.
    non_nullable: ClassVar[Tuple[str, ...]] = ()

    @field_validator("*")
    @classmethod
    def reject_null_for_required_columns(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None and info.field_name in cls.non_nullable:
            raise ValueError("may not be null")
        return value


class BookCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    author: Optional[str] = None
    price: float = 0
    cover_image_url: Optional[str] = None
    status: str = "draft"
    total_word_count: int = 0
    is_complete: bool = False
    physical_available: bool = False
    digital_bundle: bool = False
    publication_date: Optional[date] = None


class BookUpdate(CatalogUpdate):
    non_nullable = ("title",)

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    author: Optional[str] = None
    price: Optional[float] = None
    cover_image_url: Optional[str] = None
    status: Optional[str] = None
    total_word_count: Optional[int] = None
    is_complete: Optional[bool] = None
    physical_available: Optional[bool] = None
    digital_bundle: Optional[bool] = None
    publication_date: Optional[date] = None


class VolumeCreate(BaseModel):
    book_id: int
    title: str = Field(min_length=1)
    order_index: int
    description: Optional[str] = None
    price: Optional[float] = None
    status: str = "draft"
    physical_available: bool = False
    digital_bundle: bool = False


class VolumeUpdate(CatalogUpdate):
    non_nullable = ("book_id", "title")

    book_id: Optional[int] = None
    title: Optional[str] = Field(default=None, min_length=1)
    order_index: Optional[int] = None
    description: Optional[str] = None
    price: Optional[float] = None
    status: Optional[str] = None
    physical_available: Optional[bool] = None
    digital_bundle: Optional[bool] = None


class SagaCreate(BaseModel):
    volume_id: int
    title: str = Field(min_length=1)
    order_index: int
    description: Optional[str] = None
    price: Optional[float] = None
    status: str = "draft"


class SagaUpdate(CatalogUpdate):
    non_nullable = ("volume_id", "title")

    volume_id: Optional[int] = None
    title: Optional[str] = Field(default=None, min_length=1)
    order_index: Optional[int] = None
    description: Optional[str] = None
    price: Optional[float] = None
    status: Optional[str] = None


class ArcCreate(BaseModel):
    saga_id: int
    title: str = Field(min_length=1)
    order_index: int
    description: Optional[str] = None
    price: Optional[float] = None
    status: str = "draft"
    is_complete: bool = False
    bundle_discount: float = Field(default=0.0, ge=0, le=1)


class ArcUpdate(CatalogUpdate):
    non_nullable = ("saga_id", "title")

    saga_id: Optional[int] = None
    title: Optional[str] = Field(default=None, min_length=1)
    order_index: Optional[int] = None
    description: Optional[str] = None
    price: Optional[float] = None
    status: Optional[str] = None
    is_complete: Optional[bool] = None
    bundle_discount: Optional[float] = Field(default=None, ge=0, le=1)


class IssueCreate(BaseModel):
    arc_id: int
    title: str = Field(min_length=1)
    order_index: int
    description: Optional[str] = None
    price: Optional[float] = None
    word_count: int = 40000
    status: str = "draft"
    release_date: Optional[date] = None
    cover_image: Optional[str] = None
    tags: List[str] = []


class IssueUpdate(CatalogUpdate):
    non_nullable = ("arc_id", "title")

    arc_id: Optional[int] = None
    title: Optional[str] = Field(default=None, min_length=1)
    order_index: Optional[int] = None
    description: Optional[str] = None
    price: Optional[float] = None
    word_count: Optional[int] = None
    status: Optional[str] = None
    release_date: Optional[date] = None
    cover_image: Optional[str] = None
    tags: Optional[List[str]] = None
