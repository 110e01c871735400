"""
Application services - Relationship facade used by views
"""
from typing import Any, Callable, Dict, FrozenSet, Iterable, Optional
import logging

from .broadcaster import RelationshipBroadcaster, StatusCallback
from .coordinator import MutationCoordinator
from ..config import settings
from ..domain import transitions
from ..domain.models import Action, Actor, RelationshipStatus
from ..domain.repositories import IRelationshipRepository
from ..exceptions import InvariantViolation
from ..infrastructure.cache import RelationshipListCache
from ..schemas import RelationshipListResponse, RelationshipStatusPayload, RelationshipUser

logger = logging.getLogger(__name__)


class RelationshipService:
    """Relationship operations for one signed-in viewer"""

    def __init__(
        self,
        viewer_id: Actor,
        repository: IRelationshipRepository,
        broadcaster: RelationshipBroadcaster,
        coordinator: MutationCoordinator,
        cache: Optional[RelationshipListCache] = None,
    ):
        self.viewer_id = viewer_id
        self.repository = repository
        self.broadcaster = broadcaster
        self.coordinator = coordinator
        self.cache = cache

    # Status
    def seed_status(
        self, subject_id: Actor, payload: Optional[Dict[str, Any]]
    ) -> RelationshipStatus:
        """
        Store a relationship embedded in actor data

        Args:
            subject_id: User the relationship describes
            payload: Relationship object from the API (None means no relationship)

        Returns:
            The stored status
        """
        if isinstance(payload, RelationshipStatusPayload):
            parsed = payload
        else:
            parsed = RelationshipStatusPayload(**(payload or {}))
        status = parsed.to_status(self.viewer_id, subject_id)
        if self.coordinator.is_pending(subject_id):
            # The outstanding mutation owns this subject until it settles
            logger.debug(f"Not seeding user {subject_id}: mutation in progress")
            return self.broadcaster.get(subject_id)
        self.broadcaster.set(subject_id, status)
        return status

    def seed_from_users(self, users: Iterable[RelationshipUser]):
        """Seed statuses for list entries not already known"""
        for user in users:
            if user.relationship is None or self.broadcaster.get(user.id) is not None:
                continue
            try:
                self.seed_status(user.id, user.relationship)
            except InvariantViolation as e:
                logger.warning(f"Skipping inconsistent relationship for user {user.id}: {e}")

    async def load_status(self, subject_id: Actor) -> RelationshipStatus:
        """
        Fetch a subject's relationship and publish it

        Args:
            subject_id: User whose profile to load

        Returns:
            The loaded status
        """
        profile = await self.repository.get_user_profile(subject_id)
        status = self.seed_status(subject_id, profile.get("relationship"))
        logger.info(f"Loaded relationship with user {subject_id}")
        return status

    def get_status(self, subject_id: Actor) -> Optional[RelationshipStatus]:
        """Get the current status for a subject, if loaded"""
        return self.broadcaster.get(subject_id)

    def subscribe(self, subject_id: Actor, callback: StatusCallback) -> Callable[[], None]:
        """Watch a subject's relationship status"""
        return self.broadcaster.subscribe(subject_id, callback)

    def available_actions(self, subject_id: Actor) -> FrozenSet[Action]:
        """
        Get the actions a view should offer for a subject

        Empty while the status is unknown or a mutation is in flight.
        """
        status = self.broadcaster.get(subject_id)
        if status is None or self.coordinator.is_pending(subject_id):
            return frozenset()
        return transitions.available_actions(status)

    async def dispatch(self, subject_id: Actor, action: Action) -> RelationshipStatus:
        """Run a relationship action"""
        return await self.coordinator.dispatch(subject_id, action)

    # Lists
    async def _cached_list(
        self,
        key: Optional[str],
        ttl: int,
        fetch: Callable,
        *args,
    ) -> RelationshipListResponse:
        """Cache-aside read of a relationship list"""
        if self.cache and key:
            cached = await self.cache.get_list(key)
            if cached is not None:
                self.seed_from_users(cached.data)
                return cached

        listing = await fetch(*args)

        if self.cache and key:
            await self.cache.set_list(key, listing, ttl)
        self.seed_from_users(listing.data)
        return listing

    def _page(self, limit: Optional[int], offset: int):
        if limit is None:
            limit = settings.DEFAULT_PAGE_SIZE
        return min(max(1, limit), settings.MAX_PAGE_SIZE), max(0, offset)

    async def get_connections(self, status: str = "connected") -> RelationshipListResponse:
        """List the viewer's connections ('connected' or 'pending')"""
        key = self.cache.connections_key(status) if self.cache else None
        return await self._cached_list(
            key, settings.CACHE_TTL_CONNECTIONS, self.repository.get_connections, status
        )

    async def get_incoming_requests(self) -> RelationshipListResponse:
        """List connection requests sent to the viewer"""
        key = self.cache.requests_key("incoming") if self.cache else None
        return await self._cached_list(
            key, settings.CACHE_TTL_CONNECTIONS, self.repository.get_incoming_requests
        )

    async def get_outgoing_requests(self) -> RelationshipListResponse:
        """List connection requests the viewer sent"""
        key = self.cache.requests_key("outgoing") if self.cache else None
        return await self._cached_list(
            key, settings.CACHE_TTL_CONNECTIONS, self.repository.get_outgoing_requests
        )

    async def get_followers(
        self, user_id: Actor, limit: Optional[int] = None, offset: int = 0
    ) -> RelationshipListResponse:
        """List a user's followers"""
        limit, offset = self._page(limit, offset)
        key = self.cache.followers_key(user_id, limit, offset) if self.cache else None
        return await self._cached_list(
            key, settings.CACHE_TTL_FOLLOWS, self.repository.get_followers, user_id, limit, offset
        )

    async def get_following(
        self, user_id: Actor, limit: Optional[int] = None, offset: int = 0
    ) -> RelationshipListResponse:
        """List users a user follows"""
        limit, offset = self._page(limit, offset)
        key = self.cache.following_key(user_id, limit, offset) if self.cache else None
        return await self._cached_list(
            key, settings.CACHE_TTL_FOLLOWS, self.repository.get_following, user_id, limit, offset
        )

    async def get_blocked_users(
        self, limit: Optional[int] = None, offset: int = 0
    ) -> RelationshipListResponse:
        """List users the viewer blocked"""
        limit, offset = self._page(limit, offset)
        key = self.cache.blocks_key(limit, offset) if self.cache else None
        return await self._cached_list(
            key, settings.CACHE_TTL_BLOCKS, self.repository.get_blocked_users, limit, offset
        )
