import json
from typing import Any, Optional

from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from carpool.config import get_settings
from carpool.redis_client import get_redis

settings = get_settings()

IDEMPOTENCY_HEADER = "Idempotency-Key"


def _cache_key(user_id: int, key: str) -> str:
    # Per user: keys are client-chosen
    return f"idempotency:{user_id}:{key}"


async def check_idempotency(request: Request, user_id: int) -> Optional[Response]:
    """
    Returns the stored response if this user already used the
    Idempotency-Key, otherwise None (proceed normally).
    """
    key = request.headers.get(IDEMPOTENCY_HEADER)
    if not key:
        return None

    redis = await get_redis()
    cached = await redis.get(_cache_key(user_id, key))
    if cached:
        data = json.loads(cached)
        return JSONResponse(
            content=data["body"],
            status_code=data["status_code"],
            headers={"X-Idempotency-Replay": "true"},
        )
    return None


async def store_idempotency_result(user_id: int, key: str, status_code: int, body: Any) -> None:
    """Persist the response for the given idempotency key."""
    redis = await get_redis()
    await redis.setex(
        _cache_key(user_id, key),
        settings.idempotency_ttl_seconds,
        json.dumps({"status_code": status_code, "body": jsonable_encoder(body)}),
    )
