import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from app.core.config import settings

logger = logging.getLogger(__name__)


@dataclass
class AuthUser:
    id: str
    email: Optional[str] = None
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class IdentityClient:
    """Resolves bearer tokens against the hosted identity provider."""

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None, timeout: Optional[float] = None):
        self.base_url = (base_url or settings.AUTH_URL or "").rstrip("/")
        self.api_key = api_key if api_key is not None else settings.AUTH_API_KEY
        self.timeout = timeout or settings.AUTH_TIMEOUT_SECONDS

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)

    async def get_user(self, token: str) -> Optional[dict]:
        """Provider account for ``token``; None when the token is rejected."""
        if not self.base_url:
            logger.warning("AUTH_URL is not configured; rejecting bearer token.")
            return None

        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key

        try:
            async with self._client() as client:
                response = await client.get("/auth/v1/user", headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Identity provider unreachable: {e}")
            return None

        if response.status_code != 200:
            logger.info(f"Identity provider rejected token: {response.status_code}")
            return None
        return response.json()


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
