from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from app.schemas.catalog import CatalogUpdate

ShopItemTypeName = Literal["book", "volume", "saga", "arc", "issue"]


class ShopItemCreate(BaseModel):
    title: str = Field(min_length=1)
    type: ShopItemTypeName
    parent_id: Optional[int] = None
    order_index: int = 0
    price: float = 0
    content: Optional[str] = None
    description: Optional[str] = None
    cover_image: Optional[str] = None
    status: str = "draft"


class ShopItemUpdate(CatalogUpdate):
    non_nullable = ("title", "type")

    title: Optional[str] = Field(default=None, min_length=1)
    type: Optional[ShopItemTypeName] = None
    parent_id: Optional[int] = None
    order_index: Optional[int] = None
    price: Optional[float] = None
    content: Optional[str] = None
    description: Optional[str] = None
    cover_image: Optional[str] = None
    status: Optional[str] = None


class QuoteRequest(BaseModel):
    # Repeating an id buys more than one copy.
    item_ids: List[int] = Field(min_length=1)
