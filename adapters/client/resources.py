import itertools
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from adapters.client.api_client import ApiClient
from adapters.client.resource_cache import DEFAULT_PAGE_SIZE, DataResource, build_query_key

# Placeholder ids for optimistic rows; negative so they never collide with server ids
_temp_ids = itertools.count(-1, -1)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ReviewsResource(DataResource):
    path = "/api/books/reviews"

    def __init__(
        self,
        client: ApiClient,
        filters: Optional[Dict[str, Any]] = None,
        pagination: Optional[Dict[str, int]] = None,
        sorting: Optional[Dict[str, str]] = None,
        **options,
    ):
        self.client = client
        self.params = {**(filters or {}), **(pagination or {})}
        options.setdefault("page_size", (pagination or {}).get("limit", DEFAULT_PAGE_SIZE))
        super().__init__(build_query_key("reviews", filters, pagination, sorting), self._fetch, **options)

    async def _fetch(self, key: str) -> List[Dict[str, Any]]:
        return await self.client.get(self.path, params=self.params)

    @property
    def reviews(self) -> List[Dict[str, Any]]:
        return self.data

    async def create_review(self, review: Dict[str, Any]) -> Dict[str, Any]:
        now = _now()
        placeholder = {"id": next(_temp_ids), **review, "created_at": now, "updated_at": now, "helpful_count": 0}
        return await self.optimistic_update(
            lambda: self.client.post(self.path, review),
            optimistic_data=lambda current: [placeholder] + current,
        )

    async def update_review(self, review_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
        def apply(current):
            return [
                {**review, **changes, "updated_at": _now()} if review["id"] == review_id else review
                for review in current
            ]

        return await self.optimistic_update(
            lambda: self.client.put(f"{self.path}/{review_id}", changes), optimistic_data=apply
        )

    async def delete_review(self, review_id: int) -> Dict[str, Any]:
        return await self.optimistic_update(
            lambda: self.client.delete(f"{self.path}/{review_id}"),
            optimistic_data=lambda current: [review for review in current if review["id"] != review_id],
        )


class ProgressResource(DataResource):
    path = "/api/books/progress"

    def __init__(
        self,
        client: ApiClient,
        filters: Optional[Dict[str, Any]] = None,
        pagination: Optional[Dict[str, int]] = None,
        **options,
    ):
        self.client = client
        self.params = {**(filters or {}), **(pagination or {})}
        options.setdefault("page_size", (pagination or {}).get("limit", DEFAULT_PAGE_SIZE))
        super().__init__(build_query_key("user_progress", filters, pagination), self._fetch, **options)

    async def _fetch(self, key: str) -> List[Dict[str, Any]]:
        return await self.client.get(self.path, params=self.params)

    @property
    def progress(self) -> List[Dict[str, Any]]:
        return self.data

    def find(self, item_id: int, item_type: str) -> Optional[Dict[str, Any]]:
        for entry in self.data:
            if entry.get("item_id") == item_id and entry.get("item_type") == item_type:
                return entry
        return None

    async def update_progress(self, item_id: int, item_type: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        now = _now()

        def apply(current):
            for index, entry in enumerate(current):
                if entry.get("item_id") == item_id and entry.get("item_type") == item_type:
                    updated = list(current)
                    updated[index] = {**entry, **changes, "last_accessed": now}
                    return updated
            fresh = {
                "id": next(_temp_ids),
                "item_id": item_id,
                "item_type": item_type,
                "percent_complete": 0,
                "last_position": None,
                "started_at": now,
                "completed_at": None,
                "last_accessed": now,
                "total_reading_time": 0,
                "session_count": 1,
                **changes,
            }
            return [fresh] + current

        body = {**changes, "item_id": item_id, "item_type": item_type}
        return await self.optimistic_update(lambda: self.client.patch(self.path, body), optimistic_data=apply)

    async def mark_completed(self, item_id: int, item_type: str) -> Dict[str, Any]:
        return await self.update_progress(item_id, item_type, {"percent_complete": 100})

    async def start_reading(self, item_id: int, item_type: str) -> Dict[str, Any]:
        return await self.update_progress(item_id, item_type, {"percent_complete": 1, "started_at": _now()})

    async def update_position(
        self, item_id: int, item_type: str, position: str, percent_complete: Optional[float] = None
    ) -> Dict[str, Any]:
        changes: Dict[str, Any] = {"last_position": position}
        if percent_complete is not None:
            changes["percent_complete"] = percent_complete
        return await self.update_progress(item_id, item_type, changes)

    async def log_reading_time(self, item_id: int, item_type: str, minutes: int) -> Dict[str, Any]:
        existing = self.find(item_id, item_type) or {}
        total = (existing.get("total_reading_time") or 0) + minutes
        return await self.update_progress(item_id, item_type, {"total_reading_time": total})


class EasterEggsResource(DataResource):
    path = "/api/easter_eggs"

    def __init__(
        self,
        client: ApiClient,
        item_id: int,
        item_type: str,
        admin_mode: bool = False,
        inline_mode: bool = False,
        **options,
    ):
        self.client = client
        self.params = {
            "item_id": item_id,
            "item_type": item_type,
            "admin_mode": str(admin_mode).lower(),
            "inline_mode": str(inline_mode).lower(),
        }
        super().__init__(build_query_key("easter_eggs", self.params), self._fetch, **options)

    async def _fetch(self, key: str) -> List[Dict[str, Any]]:
        return await self.client.get(self.path, params=self.params)

    @property
    def easter_eggs(self) -> List[Dict[str, Any]]:
        return self.data

    async def unlock(self, egg_id: int, discovery_method: str = "click", hints_used: int = 0) -> Dict[str, Any]:
        body = {
            "egg_id": egg_id,
            "item_id": self.params["item_id"],
            "item_type": self.params["item_type"],
            "discovery_method": discovery_method,
            "hints_used": hints_used,
        }
        return await self.optimistic_update(
            lambda: self.client.post(f"{self.path}/unlock", body),
            optimistic_data=lambda current: [
                {**egg, "discovered": True} if egg["id"] == egg_id else egg for egg in current
            ],
        )

    async def toggle_visibility(self, egg_id: int) -> List[Dict[str, Any]]:
        """Local-only flip of ``is_active`` for admin previews; nothing is sent."""
        toggled = [
            {**egg, "is_active": not egg.get("is_active")} if egg["id"] == egg_id else egg for egg in self.data
        ]
        return await self.mutate(toggled, revalidate=False)
