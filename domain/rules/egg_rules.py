from datetime import datetime, timezone
from typing import Any, Dict, Optional


def _aware(moment: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; they are stored as UTC.
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


class EggRules:
    @staticmethod
    def is_available(is_active: bool, available_from: Optional[datetime], available_until: Optional[datetime], now: datetime) -> bool:
        if not is_active:
            return False
        start = _aware(available_from)
        end = _aware(available_until)
        if start is not None and now < start:
            return False
        if end is not None and now > end:
            return False
        return True

    @staticmethod
    def is_visible(
        egg: Dict[str, Any],
        item_type: str,
        admin_mode: bool = False,
        inline_mode: bool = False,
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Admins see every egg. Readers only see eggs on books unless the
        page is in inline mode, and never inactive or out-of-window ones.
        """
        if admin_mode:
            return True
        if not inline_mode and item_type != "book":
            return False
        return EggRules.is_available(
            egg.get("is_active", False),
            egg.get("available_from"),
            egg.get("available_until"),
            now or datetime.now(timezone.utc),
        )

    @staticmethod
    def reward_summary(egg: Dict[str, Any], include_art: bool = True) -> Dict[str, Any]:
        reward_data = egg.get("reward_data") or {}
        summary = {
            "title": egg.get("title"),
            "reward": egg.get("reward"),
            "points": reward_data.get("points") or 0,
        }
        if include_art:
            summary["exclusive_art"] = reward_data.get("exclusive_art")
        return summary
