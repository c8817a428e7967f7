import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
from urllib.parse import urlencode

from adapters.client.api_client import ApiClientError

logger = logging.getLogger(__name__)

DEFAULT_DEDUPE_SECONDS = 5.0
DEFAULT_PAGE_SIZE = 50

Fetcher = Callable[[str], Awaitable[List[Dict[str, Any]]]]
Transform = Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]


def build_query_key(
    table: str,
    filters: Optional[Dict[str, Any]] = None,
    pagination: Optional[Dict[str, int]] = None,
    sorting: Optional[Dict[str, str]] = None,
) -> str:
    """
    ``build_query_key("reviews", {"item_id": 3}, {"limit": 10})`` -> ``"reviews?item_id=3&limit=10"``.
    None filters are dropped so equivalent queries share a key.
    """
    params = []
    for key, value in (filters or {}).items():
        if value is not None:
            params.append((key, str(value).lower() if isinstance(value, bool) else str(value)))
    for key in ("page", "limit", "offset"):
        if pagination and pagination.get(key) is not None:
            params.append((key, str(pagination[key])))
    if sorting and sorting.get("column"):
        params.append(("sort", sorting["column"]))
        params.append(("order", sorting.get("direction", "desc")))

    query = urlencode(params)
    return f"{table}?{query}" if query else table


class DataResource:
    """
    Cache-and-revalidate holder for one query key.

    ``load()`` serves the cached collection when it was fetched within the
    dedupe interval; ``revalidate()`` always refetches. Fetch failures are
    kept on ``error`` and the last good data stays in place.
    """

    def __init__(
        self,
        key: str,
        fetcher: Fetcher,
        dedupe_interval: float = DEFAULT_DEDUPE_SECONDS,
        page_size: int = DEFAULT_PAGE_SIZE,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.key = key
        self.fetcher = fetcher
        self.dedupe_interval = dedupe_interval
        self.page_size = page_size
        self._clock = clock

        self.data: List[Dict[str, Any]] = []
        self.error: Optional[ApiClientError] = None
        self.is_loading = False
        self.is_validating = False
        self._fetched_at: Optional[float] = None

    @property
    def has_more(self) -> bool:
        return len(self.data) == self.page_size

    def _is_fresh(self) -> bool:
        return self._fetched_at is not None and self._clock() - self._fetched_at < self.dedupe_interval

    async def load(self) -> List[Dict[str, Any]]:
        if self._is_fresh():
            return self.data
        return await self.revalidate()

    async def revalidate(self) -> List[Dict[str, Any]]:
        self.is_validating = True
        self.is_loading = self._fetched_at is None
        try:
            self.data = await self.fetcher(self.key)
            self.error = None
            self._fetched_at = self._clock()
        except ApiClientError as e:
            logger.warning(f"Revalidating {self.key} failed: {e.message}")
            self.error = e
        finally:
            self.is_validating = False
            self.is_loading = False
        return self.data

    async def mutate(self, data: Optional[List[Dict[str, Any]]] = None, revalidate: bool = True):
        """Replaces the cached data locally, then refetches unless told not to."""
        if data is not None:
            self.data = data
        if revalidate:
            return await self.revalidate()
        return self.data

    async def optimistic_update(
        self,
        mutation: Callable[[], Awaitable[Any]],
        optimistic_data: Union[List[Dict[str, Any]], Transform, None] = None,
        rollback_on_error: bool = True,
    ) -> Any:
        """
        Shows ``optimistic_data`` immediately, runs ``mutation`` and revalidates.
        When the mutation raises, the previous data comes back (unless
        ``rollback_on_error`` is False) and the error propagates.
        """
        if optimistic_data is None:
            result = await mutation()
            await self.revalidate()
            return result

        previous = list(self.data)
        self.data = optimistic_data(previous) if callable(optimistic_data) else optimistic_data
        try:
            result = await mutation()
        except Exception:
            if rollback_on_error:
                self.data = previous
            raise

        await self.revalidate()
        return result
