"""
Login Rate Limiter
Fixed-window attempt counter per identifier, stored in Redis.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import redis

from app.core.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_WINDOW_SECONDS = 15 * 60


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    retry_after: int = 0


class RateLimiter:
    """
    Counts login attempts per identifier in fixed windows.

    Every check counts as an attempt. The window starts at the first attempt:
    INCR and EXPIRE NX go out in one MULTI, so a counter never lives without a
    TTL for longer than one failed check. Only reset() after a fully successful
    login clears it early. EXPIRE NX needs Redis 7 or Valkey.
    """

    def __init__(
        self,
        client: redis.Redis,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        window_seconds: int = DEFAULT_WINDOW_SECONDS,
        scope: str = "login",
    ):
        self.client = client
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.scope = scope

    def key(self, identifier: str) -> str:
        return f"ratelimit:{self.scope}:{identifier}"

    def check(self, identifier: str) -> RateLimitResult:
        """
        Record an attempt and decide whether it may proceed.

        Args:
            identifier: Normalized wallet address

        Returns:
            RateLimitResult with remaining attempts, or the seconds to wait
            when the limit is exceeded

        Raises:
            StoreUnavailable: If the counter cannot be updated
        """
        key = self.key(identifier)
        try:
            with self.client.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                # NX keeps a running window and repairs a counter left without a TTL
                pipe.expire(key, self.window_seconds, nx=True)
                count, _ = pipe.execute()
            count = int(count)
        except redis.RedisError as exc:
            logger.error("Failed to update rate limit counter %s", key, exc_info=True)
            raise StoreUnavailable() from exc

        if count > self.max_attempts:
            return RateLimitResult(allowed=False, remaining=0, retry_after=self._retry_after(key))

        return RateLimitResult(allowed=True, remaining=self.max_attempts - count)

    def _retry_after(self, key: str) -> int:
        try:
            ttl = int(self.client.ttl(key))
        except redis.RedisError:
            logger.warning("Could not read TTL for %s, using full window", key, exc_info=True)
            return self.window_seconds
        if ttl == -1:
            self._restore_expiry(key)
            return self.window_seconds
        # -2: key vanished between INCR and TTL
        if ttl < 0:
            return self.window_seconds
        return ttl

    def _restore_expiry(self, key: str) -> None:
        try:
            self.client.expire(key, self.window_seconds)
        except redis.RedisError:
            logger.warning("Could not restore expiry on %s", key, exc_info=True)

    def reset(self, identifier: str) -> None:
        """Clear the counter after a successful login."""
        key = self.key(identifier)
        try:
            self.client.delete(key)
        except redis.RedisError as exc:
            raise StoreUnavailable() from exc
