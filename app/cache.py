"""
Redis caching utilities for frequently read pricing data
Fails open: when Redis is disabled or unreachable every lookup is a miss
"""
import json
import logging
from typing import Any, Optional

from .config import COMMISSION_CACHE_TTL, REDIS_CACHE_ENABLED
from .redis_client import get_redis_client

logger = logging.getLogger(__name__)


class Cache:
    """Redis cache wrapper with automatic serialization"""

    def __init__(self, enabled: bool = REDIS_CACHE_ENABLED):
        self.enabled = enabled
        self.redis_client = None

    def _get_client(self):
        """Lazy load Redis client"""
        if not self.enabled:
            return None
        if self.redis_client is None:
            try:
                self.redis_client = get_redis_client()
            except Exception as e:
                logger.warning(f"⚠️ Redis cache unavailable: {e}")
                return None
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(key)
            if value:
                logger.debug(f"✅ Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"❌ Cache MISS: {key}")
            return None
        except Exception as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        """Set value in cache with TTL (default 1 hour)"""
        client = self._get_client()
        if not client:
            return False

        try:
            serialized = json.dumps(value)
            client.setex(key, ttl, serialized)
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        """Delete value from cache"""
        client = self._get_client()
        if not client:
            return False

        try:
            client.delete(key)
            logger.debug(f"✅ Cache DELETE: {key}")
            return True
        except Exception as e:
            logger.error(f"❌ Cache delete error for {key}: {e}")
            return False

    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern (e.g., 'commission_rule:*')"""
        client = self._get_client()
        if not client:
            return 0

        try:
            keys = list(client.scan_iter(match=pattern))
            if keys:
                deleted = client.delete(*keys)
                logger.debug(f"✅ Cache DELETE pattern: {pattern} ({deleted} keys)")
                return deleted
            return 0
        except Exception as e:
            logger.error(f"❌ Cache delete pattern error for {pattern}: {e}")
            return 0


# Global cache instance
cache = Cache()


# Commission rule cache

def commission_rule_key(property_type_id: Optional[int]) -> str:
    return f"commission_rule:{property_type_id if property_type_id is not None else 'global'}"


def get_commission_rule_cached(property_type_id: Optional[int]) -> Optional[dict]:
    return cache.get(commission_rule_key(property_type_id))


def set_commission_rule_cached(
    property_type_id: Optional[int], rule: dict, ttl: int = COMMISSION_CACHE_TTL
) -> bool:
    return cache.set(commission_rule_key(property_type_id), rule, ttl)


def invalidate_commission_cache(property_type_id: Optional[int] = None) -> int:
    """Drop one property type's cached rule, or every cached rule when no type is given"""
    if property_type_id is None:
        return cache.delete_pattern("commission_rule:*")
    return int(cache.delete(commission_rule_key(property_type_id)))
