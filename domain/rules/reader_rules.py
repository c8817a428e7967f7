from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

MIN_RATING = 1
MAX_RATING = 5


@dataclass
class ProgressChange:
    values: Dict[str, Any]
    created: bool


class ReaderRules:
    @staticmethod
    def clamp_rating(rating: float) -> int:
        return max(MIN_RATING, min(MAX_RATING, int(round(rating))))

    @staticmethod
    def is_valid_percent(percent: Optional[float]) -> bool:
        return percent is None or 0 <= percent <= 100

    @staticmethod
    def progress_change(existing: Optional[Dict[str, Any]], update: Dict[str, Any], now: datetime) -> ProgressChange:
        """
        First touch creates the record (session 1, started now); later ones
        bump the session count and only overwrite the fields supplied.
        ``completed_at`` is stamped once, the first time percent reaches 100.
        """
        percent = update.get("percent_complete")

        if existing is None:
            return ProgressChange(
                values={
                    "percent_complete": percent or 0,
                    "last_position": update.get("last_position"),
                    "started_at": update.get("started_at") or now,
                    "completed_at": now if percent is not None and percent >= 100 else None,
                    "last_accessed": now,
                    "total_reading_time": update.get("total_reading_time") or 0,
                    "session_count": 1,
                },
                created=True,
            )

        values: Dict[str, Any] = {
            "last_accessed": now,
            "session_count": (existing.get("session_count") or 0) + 1,
        }
        if percent is not None:
            values["percent_complete"] = percent
            if percent >= 100 and not existing.get("completed_at"):
                values["completed_at"] = now
        for key in ("last_position", "total_reading_time"):
            if key in update:
                values[key] = update[key]
        return ProgressChange(values=values, created=False)

    @staticmethod
    def route_unlocked(route: Dict[str, Any], percent_complete: Optional[float]) -> bool:
        if not route.get("requires_previous_completion") or route.get("is_default_route"):
            return True
        return percent_complete is not None and percent_complete >= 100

    @staticmethod
    def route_position(route_key: str) -> str:
        return f"route:{route_key}"
