import json
import logging
import redis
from typing import Optional, Any

from app.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Create Redis client
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)

# Rendered pages are cached under this prefix, keyed by their path.
PAGE_PREFIX = "page"
ADMIN_PATH = "/admin"


class CacheService:
    """
    Redis cache service for the admin listing.

    This service provides methods for:
    - Setting cache with TTL
    - Getting cached values
    - Invalidating cache
    - Marking a cached page as stale

    Redis failures never escape: a failed read is a miss and a failed
    write or delete is reported as False.
    """

    def __init__(self, client: redis.Redis = None, ttl: int = None):
        self.client = client or redis_client
        self.ttl = ttl or settings.CACHE_TTL

    def _make_key(self, prefix: str, key: str) -> str:
        """Create a namespaced cache key."""
        return f"{prefix}:{key}"

    def get(self, prefix: str, key: str) -> Optional[Any]:
        """
        Get a value from cache.

        Args:
            prefix: Cache key prefix (e.g., 'page')
            key: Unique identifier

        Returns:
            Cached value or None if not found
        """
        cache_key = self._make_key(prefix, key)
        try:
            value = self.client.get(cache_key)
            if value:
                return json.loads(value)
            return None
        except (redis.RedisError, json.JSONDecodeError) as e:
            logger.warning(f"Cache read failed for {cache_key}: {e}")
            return None

    def set(self, prefix: str, key: str, value: Any, ttl: int = None) -> bool:
        """
        Set a value in cache with TTL.

        Args:
            prefix: Cache key prefix
            key: Unique identifier
            value: Value to cache (will be JSON serialized)
            ttl: Time to live in seconds (optional, uses default if not provided)

        Returns:
            True if successful, False otherwise
        """
        cache_key = self._make_key(prefix, key)
        ttl = ttl or self.ttl
        try:
            serialized = json.dumps(value, default=str)
            self.client.setex(cache_key, ttl, serialized)
            return True
        except (redis.RedisError, TypeError) as e:
            logger.warning(f"Cache write failed for {cache_key}: {e}")
            return False

    def delete(self, prefix: str, key: str) -> bool:
        """
        Delete a value from cache.

        Args:
            prefix: Cache key prefix
            key: Unique identifier

        Returns:
            True if deleted, False otherwise
        """
        cache_key = self._make_key(prefix, key)
        try:
            self.client.delete(cache_key)
            return True
        except redis.RedisError as e:
            logger.warning(f"Cache delete failed for {cache_key}: {e}")
            return False

    def revalidate_path(self, path: str) -> bool:
        """Mark the cached page at ``path`` as stale so the next load rebuilds it."""
        return self.delete(PAGE_PREFIX, path)


# Singleton cache service instance
cache_service = CacheService()
