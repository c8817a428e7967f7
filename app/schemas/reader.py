from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    item_id: int
    item_type: str
    rating: float = Field(allow_inf_nan=False)
    comment: Optional[str] = None
    is_verified_purchase: bool = False
    is_spoiler: bool = False


class ProgressUpdate(BaseModel):
    item_id: int
    item_type: str
    percent_complete: Optional[float] = None
    last_position: Optional[str] = None
    total_reading_time: Optional[int] = None
    started_at: Optional[datetime] = None


class ChooseRouteRequest(BaseModel):
    route_id: int
    item_id: int
    item_type: str


class EggUnlockRequest(BaseModel):
    egg_id: int
    item_id: int
    item_type: str
    discovery_method: str = "click"
    hints_used: int = 0


class ReviewUpdate(BaseModel):
    rating: Optional[float] = Field(default=None, allow_inf_nan=False)
    comment: Optional[str] = None
    is_spoiler: Optional[bool] = None
