from contextvars import ContextVar
from typing import Optional

# Global context variable for Request ID
request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Caller id, consumed by the user-scoped database tier
user_id_ctx: ContextVar[Optional[str]] = ContextVar("user_id", default=None)


def get_request_id() -> str:
    return request_id_ctx.get() or "n/a"


def set_request_id(request_id: str):
    request_id_ctx.set(request_id)


def get_current_user_id() -> Optional[str]:
    return user_id_ctx.get()


def set_current_user_id(user_id: Optional[str]):
    user_id_ctx.set(user_id)
