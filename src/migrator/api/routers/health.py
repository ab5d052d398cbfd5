"""
Health router.

GET /ping
"""

from __future__ import annotations

import time

from fastapi import APIRouter

router = APIRouter()


@router.get("/ping")
def ping() -> dict[str, int]:
    """Liveness probe with the server's current UTC timestamp."""
    return {"Timestamp": int(time.time())}
