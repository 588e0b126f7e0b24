import json
import logging
from typing import Any, Optional
import redis
from itimock.core.config import settings

logger = logging.getLogger(__name__)

class RedisCache:
    """JSON values in Redis. A broken Redis degrades to cache misses."""

    def __init__(self, client: redis.Redis):
        self.redis = client

    def get(self, key: str, default: Any = None) -> Any:
        try:
            value = self.redis.get(key)
        except redis.RedisError as e:
            logger.error(f"Cache get error: {e}")
            return default
        if value is None:
            return default
        try:
            return json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return value

    def set(self, key: str, value: Any, expire: Optional[int] = None) -> bool:
        try:
            return bool(self.redis.set(key, json.dumps(value), ex=expire or settings.LEADERBOARD_TTL))
        except redis.RedisError as e:
            logger.error(f"Cache set error: {e}")
            return False

    def delete(self, *keys: str) -> int:
        try:
            return self.redis.delete(*keys)
        except redis.RedisError as e:
            logger.error(f"Cache delete error: {e}")
            return 0

redis_client = redis.Redis.from_url(settings.REDIS_URL, decode_responses=True)
cache = RedisCache(redis_client)

def get_cache() -> RedisCache:
    return cache
