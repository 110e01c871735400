"""
Repository interfaces - Contracts for the remote relationship authority
"""
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any

from .models import Actor
from ..schemas import RelationshipListResponse


class IRelationshipRepository(ABC):
    """Remote relationship service interface"""

    # Connections
    @abstractmethod
    async def send_connection_request(self, user_id: Actor) -> Optional[Dict[str, Any]]:
        """Send a connection request to a user"""
        pass

    @abstractmethod
    async def accept_connection_request(self, requester_id: Actor) -> Optional[Dict[str, Any]]:
        """Accept a connection request sent by requester_id"""
        pass

    @abstractmethod
    async def decline_connection_request(self, requester_id: Actor) -> Optional[Dict[str, Any]]:
        """Decline a connection request sent by requester_id"""
        pass

    @abstractmethod
    async def remove_connection(self, user_id: Actor) -> Optional[Dict[str, Any]]:
        """
        Delete the connection edge with a user

        Also cancels an outgoing request. Raises EdgeAlreadyAbsent when
        there is no edge to delete.
        """
        pass

    # Follows
    @abstractmethod
    async def follow_user(self, user_id: Actor) -> Optional[Dict[str, Any]]:
        """Follow a user"""
        pass

    @abstractmethod
    async def unfollow_user(self, user_id: Actor) -> Optional[Dict[str, Any]]:
        """Unfollow a user"""
        pass

    # Blocks
    @abstractmethod
    async def block_user(self, user_id: Actor) -> Optional[Dict[str, Any]]:
        """Block a user"""
        pass

    @abstractmethod
    async def unblock_user(self, user_id: Actor) -> Optional[Dict[str, Any]]:
        """Unblock a user"""
        pass

    # Reads
    @abstractmethod
    async def get_user_profile(self, user_id: Actor) -> Dict[str, Any]:
        """Get a user's profile, including the embedded relationship"""
        pass

    @abstractmethod
    async def get_connections(self, status: str) -> RelationshipListResponse:
        """List the viewer's connections ('connected' or 'pending')"""
        pass

    @abstractmethod
    async def get_incoming_requests(self) -> RelationshipListResponse:
        """List connection requests sent to the viewer"""
        pass

    @abstractmethod
    async def get_outgoing_requests(self) -> RelationshipListResponse:
        """List connection requests the viewer sent"""
        pass

    @abstractmethod
    async def get_followers(
        self, user_id: Actor, limit: int, offset: int
    ) -> RelationshipListResponse:
        """List a user's followers"""
        pass

    @abstractmethod
    async def get_following(
        self, user_id: Actor, limit: int, offset: int
    ) -> RelationshipListResponse:
        """List users a user follows"""
        pass

    @abstractmethod
    async def get_blocked_users(self, limit: int, offset: int) -> RelationshipListResponse:
        """List users the viewer blocked"""
        pass


class IRelationshipListInvalidator(ABC):
    """Holder of cached relationship lists that must be refreshed after a change"""

    @abstractmethod
    async def invalidate_relationship_lists(self) -> None:
        """Drop every cached connections/followers/following list"""
        pass
