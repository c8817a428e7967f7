from datetime import datetime, timezone
from typing import Any, Dict, Optional

SERVER_MANAGED_FIELDS = ("id", "created_at", "updated_at")

ITEM_TYPES = ("book", "volume", "saga", "arc", "issue")


class CatalogRules:
    @staticmethod
    def prepare_update(payload: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        """Drops client-sent server fields and stamps a fresh ``updated_at``."""
        changes = {k: v for k, v in payload.items() if k not in SERVER_MANAGED_FIELDS}
        changes["updated_at"] = now or datetime.now(timezone.utc)
        return changes

    @staticmethod
    def is_valid_item_type(item_type: Optional[str]) -> bool:
        return item_type in ITEM_TYPES

    @staticmethod
    def invalid_item_type_message() -> str:
        return "Invalid item_type. Must be one of: " + ", ".join(ITEM_TYPES)
