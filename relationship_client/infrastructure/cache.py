"""
Redis caching layer for relationship lists
"""
import redis.asyncio as redis
from pydantic import ValidationError
from typing import Optional
import json
import logging

from ..config import settings
from ..domain.models import Actor
from ..domain.repositories import IRelationshipListInvalidator
from ..schemas import RelationshipListResponse

logger = logging.getLogger(__name__)


class RelationshipListCache(IRelationshipListInvalidator):
    """Redis cache manager for connections, followers, following and block lists"""

    def __init__(self, prefix: Optional[str] = None):
        self.redis: Optional[redis.Redis] = None
        self.prefix = prefix or settings.CACHE_KEY_PREFIX

    def _url(self) -> str:
        return f"redis://{settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}"

    async def connect(self):
        """Connect to Redis when list caching is enabled"""
        if not settings.REDIS_ENABLED:
            logger.info("Relationship list cache disabled")
            return

        try:
            self.redis = await redis.from_url(
                self._url(),
                password=settings.REDIS_PASSWORD or None,
                encoding="utf-8",
                decode_responses=True,
            )
            await self.redis.ping()
            logger.info(f"Relationship list cache connected to {self._url()}")
        except Exception as e:
            # Lists are always fetchable from the API, so run uncached
            logger.warning(f"Relationship list cache unavailable: {e}")
            self.redis = None

    async def disconnect(self):
        """Close the Redis connection"""
        if self.redis:
            await self.redis.close()
            self.redis = None
            logger.info("Relationship list cache disconnected")

    # Relationship list keys
    def connections_key(self, status: str) -> str:
        """Generate cache key for the viewer's connections"""
        return f"{self.prefix}:connections:{status}"

    def requests_key(self, direction: str) -> str:
        """Generate cache key for incoming/outgoing connection requests"""
        return f"{self.prefix}:requests:{direction}"

    def followers_key(self, user_id: Actor, limit: int, offset: int) -> str:
        """Generate cache key for a followers page"""
        return f"{self.prefix}:followers:{user_id}:{limit}:{offset}"

    def following_key(self, user_id: Actor, limit: int, offset: int) -> str:
        """Generate cache key for a following page"""
        return f"{self.prefix}:following:{user_id}:{limit}:{offset}"

    def blocks_key(self, limit: int, offset: int) -> str:
        """Generate cache key for a blocked users page"""
        return f"{self.prefix}:blocks:{limit}:{offset}"

    async def get_list(self, key: str) -> Optional[RelationshipListResponse]:
        """Get a cached relationship list, None on miss or unreadable entry"""
        if not self.redis:
            return None

        try:
            raw = await self.redis.get(key)
        except Exception as e:
            logger.error(f"Error reading relationship list {key}: {e}")
            return None
        if not raw:
            return None

        try:
            return RelationshipListResponse.from_payload(json.loads(raw))
        except (ValidationError, ValueError) as e:
            logger.warning(f"Dropping unreadable relationship list {key}: {e}")
            return None

    async def set_list(self, key: str, listing: RelationshipListResponse, ttl: int):
        """Cache a relationship list for ttl seconds"""
        if not self.redis:
            return

        try:
            await self.redis.setex(key, ttl, listing.model_dump_json(by_alias=True))
        except Exception as e:
            logger.error(f"Error caching relationship list {key}: {e}")

    async def invalidate_relationship_lists(self) -> None:
        """Drop every cached relationship list"""
        if not self.redis:
            return

        pattern = f"{self.prefix}:*"
        try:
            keys = [key async for key in self.redis.scan_iter(match=pattern)]
            if keys:
                await self.redis.delete(*keys)
                logger.info(f"Invalidated {len(keys)} cached relationship lists")
        except Exception as e:
            logger.error(f"Error invalidating relationship lists: {e}")
