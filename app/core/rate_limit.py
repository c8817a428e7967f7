import enum
import logging

logger = logging.getLogger(__name__)


class RateLimitBucket(str, enum.Enum):
    GENERAL = "general"
    REVIEW = "review"
    PROGRESS = "progress"
    ADMIN = "admin"


async def apply_rate_limit(bucket: RateLimitBucket, identifier: str) -> bool:
    """Always allows the request; no limiter backend is wired in yet."""
    logger.debug(f"Rate limit check {bucket.value}:{identifier} allowed")
    return True
