"""
Health Router.

Liveness probe used by load balancers and the frontend.
"""

import time

from fastapi import APIRouter

from humanlenk.database.core.funcs import iso, utcnow

router = APIRouter(tags=["Health"])

_started = time.monotonic()


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok", "timestamp": iso(utcnow()), "uptime": round(time.monotonic() - _started, 3)}
