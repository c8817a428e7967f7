import httpx
import pytest

from app.core.auth import IdentityClient, bearer_token


class MockedIdentityClient(IdentityClient):
    def __init__(self, handler, **kwargs):
        super().__init__(**kwargs)
        self.handler = handler

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, transport=httpx.MockTransport(self.handler))


def test_bearer_token_parsing():
    assert bearer_token("Bearer abc") == "abc"
    assert bearer_token("bearer  abc ") == "abc"
    assert bearer_token("Basic abc") is None
    assert bearer_token("Bearer ") is None
    assert bearer_token(None) is None


@pytest.mark.asyncio
async def test_get_user_sends_token_and_api_key():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("authorization")
        seen["apikey"] = request.headers.get("apikey")
        return httpx.Response(200, json={"id": "u-1", "email": "u@example.com"})

    client = MockedIdentityClient(handler, base_url="http://identity.test", api_key="anon-key")
    account = await client.get_user("tok")

    assert account == {"id": "u-1", "email": "u@example.com"}
    assert seen == {"path": "/auth/v1/user", "auth": "Bearer tok", "apikey": "anon-key"}


@pytest.mark.asyncio
async def test_get_user_rejected_token():
    client = MockedIdentityClient(lambda request: httpx.Response(401, json={"msg": "bad jwt"}), base_url="http://identity.test")
    assert await client.get_user("tok") is None


@pytest.mark.asyncio
async def test_get_user_unreachable_provider():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = MockedIdentityClient(handler, base_url="http://identity.test")
    assert await client.get_user("tok") is None
