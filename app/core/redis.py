from functools import lru_cache

import redis

from app.core.config import settings


@lru_cache
def get_redis() -> redis.Redis:
    # one connection pool per process, shared by nonce store and rate limiter
    return redis.Redis.from_url(settings.redis_url, decode_responses=True)
