"""
Per-IP request limiting.

One `Limiter` per application, stored on `app.state.limiter` where
`SlowAPIMiddleware` looks it up. Every route shares the default limit
(`RATE_LIMIT`, 100 requests per 15 minutes unless configured otherwise);
counters live in process memory.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from humanlenk.database.config.config import Settings

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


def build_limiter(settings: Settings) -> Limiter:
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.RATE_LIMIT],
        headers_enabled=True,
        enabled=settings.RATE_LIMIT_ENABLED,
    )
