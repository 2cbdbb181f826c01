from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def rate_limit(limit_value: str):
    if settings.rate_limit_enabled:
        return limiter.limit(limit_value)

    def decorator(func):
        return func

    return decorator
