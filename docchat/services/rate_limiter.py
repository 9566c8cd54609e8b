"""Rate limiting service using Redis with sliding window algorithm."""

import logging
import time
from typing import Optional, Tuple
from uuid import uuid4

import redis
from redis.exceptions import RedisError

from docchat.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Rate limiter using Redis with a sliding window log.

    Every allowed request is stored as a member of a sorted set scored by its
    timestamp; members older than the window are pruned on each check, so the
    count always covers exactly the last ``window`` seconds.

    Implements graceful degradation - if Redis is unavailable,
    requests are allowed through (fail open).
    """

    def __init__(self, redis_url: Optional[str] = None) -> None:
        """Initialize rate limiter with Redis connection."""
        try:
            self.redis_client = redis.from_url(
                redis_url or settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            # Test connection
            self.redis_client.ping()
            self.available = True
            logger.info("Rate limiter initialized with Redis")
        except RedisError as e:
            logger.warning(f"Redis unavailable for rate limiting: {e}")
            self.redis_client = None
            self.available = False

    @staticmethod
    def _redis_key(key: str) -> str:
        return f"ratelimit:{key}"

    def check_rate_limit(
        self, key: str, limit: int, window: int = 60
    ) -> Tuple[bool, int, int]:
        """
        Check if request is within rate limit and record it if allowed.

        Args:
            key: Unique identifier for rate limit (e.g., ip:1.2.3.4:api:chat)
            limit: Maximum requests allowed in window
            window: Time window in seconds

        Returns:
            Tuple of (allowed, remaining, reset_time)
            - allowed: True if request should be allowed
            - remaining: Number of requests remaining
            - reset_time: Unix timestamp when a slot frees up
        """
        if not self.available or not settings.RATE_LIMIT_ENABLED:
            # Fail open - allow request if Redis unavailable
            return True, limit, int(time.time() + window)

        try:
            now = time.time()
            redis_key = self._redis_key(key)

            pipe = self.redis_client.pipeline()
            pipe.zremrangebyscore(redis_key, 0, now - window)
            pipe.zcard(redis_key)
            _, current_count = pipe.execute()
            current_count = int(current_count or 0)

            if current_count >= limit:
                # Oldest request in the window decides when a slot frees up
                oldest = self.redis_client.zrange(redis_key, 0, 0, withscores=True)
                oldest_score = oldest[0][1] if oldest else now
                return False, 0, int(oldest_score + window) + 1

            pipe = self.redis_client.pipeline()
            pipe.zadd(redis_key, {f"{now}:{uuid4().hex}": now})
            pipe.expire(redis_key, window)
            pipe.execute()

            remaining = limit - (current_count + 1)
            return True, remaining, int(now + window)

        except RedisError as e:
            logger.error(f"Rate limit check failed: {e}")
            # Fail open
            return True, limit, int(time.time() + window)


# Global rate limiter instance
rate_limiter = RateLimiter()
