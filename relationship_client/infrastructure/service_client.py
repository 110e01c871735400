"""
HTTP client for the remote relationship service
"""
import httpx
from pydantic import ValidationError
from typing import Optional, Dict, Any
import logging

from ..config import settings
from ..domain.models import Actor
from ..domain.repositories import IRelationshipRepository
from ..exceptions import RemoteCallFailure, EdgeAlreadyAbsent
from ..schemas import RelationshipListResponse

logger = logging.getLogger(__name__)

# User-facing messages by response status
STATUS_MESSAGES = {
    401: "Session expired. Please log in again.",
    403: "You do not have permission to perform this action.",
    404: "Resource not found.",
    429: "Too many requests. Please try again later.",
    500: "Server error. Please try again later.",
    502: "Server error. Please try again later.",
    503: "Server error. Please try again later.",
    504: "Server error. Please try again later.",
}

TIMEOUT_MESSAGE = "Request timeout. Please try again."
NETWORK_MESSAGE = "Network error. Please check your connection."
DEFAULT_MESSAGE = "An error occurred"


class RelationshipServiceClient(IRelationshipRepository):
    """HTTP client for the relationship endpoints of the social API"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.token = token
        self.timeout = httpx.Timeout(settings.REQUEST_TIMEOUT, connect=settings.CONNECT_TIMEOUT)
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def start(self):
        """Initialize HTTP client"""
        transport = self.transport or httpx.AsyncHTTPTransport(retries=settings.HTTP_RETRIES)
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )
        logger.info(f"Relationship service client initialized for {self.base_url}")

    async def stop(self):
        """Close HTTP client"""
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.info("Relationship service client closed")

    def set_token(self, token: Optional[str]):
        """Set or clear the bearer token used for every request"""
        self.token = token

    def _headers(self) -> Dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _error_for(self, response: httpx.Response) -> RemoteCallFailure:
        """Translate an error response into a user-facing failure"""
        status_code = response.status_code

        if status_code == 401:
            # Stale credentials are useless for every later call
            self.token = None

        message = STATUS_MESSAGES.get(status_code)
        if message is None:
            message = DEFAULT_MESSAGE
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("message"):
                message = str(body["message"])

        return RemoteCallFailure(message, status_code=status_code)

    async def _make_request(self, method: str, path: str, **kwargs) -> Any:
        """
        Make HTTP request to the relationship service

        Returns:
            Decoded JSON body, or None for an empty body

        Raises:
            RemoteCallFailure: On timeout, network error or non-2xx status
        """
        if not self.client:
            raise RuntimeError("Relationship service client not initialized")

        try:
            response = await self.client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout for {method} {path}: {e}")
            raise RemoteCallFailure(TIMEOUT_MESSAGE) from e
        except httpx.TransportError as e:
            logger.error(f"Request failed for {method} {path}: {e}")
            raise RemoteCallFailure(NETWORK_MESSAGE) from e

        if response.is_error:
            logger.error(f"HTTP error {response.status_code} for {method} {path}")
            raise self._error_for(response)

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {method} {path}: {e}")
            raise RemoteCallFailure(DEFAULT_MESSAGE, status_code=response.status_code) from e

    async def _get_list(self, path: str, **kwargs) -> RelationshipListResponse:
        payload = await self._make_request("GET", path, **kwargs)
        try:
            return RelationshipListResponse.from_payload(payload)
        except (ValidationError, ValueError) as e:
            logger.error(f"Malformed relationship list from {path}: {e}")
            raise RemoteCallFailure(DEFAULT_MESSAGE) from e

    # Connections
    async def send_connection_request(self, user_id: Actor) -> Optional[Dict[str, Any]]:
        """Send a connection request"""
        return await self._make_request("POST", f"/users/{user_id}/connect")

    async def accept_connection_request(self, requester_id: Actor) -> Optional[Dict[str, Any]]:
        """Accept a connection request from requester_id"""
        return await self._make_request("POST", f"/users/{requester_id}/connect/accept")

    async def decline_connection_request(self, requester_id: Actor) -> Optional[Dict[str, Any]]:
        """Decline a connection request from requester_id"""
        return await self._make_request("POST", f"/users/{requester_id}/connect/decline")

    async def remove_connection(self, user_id: Actor) -> Optional[Dict[str, Any]]:
        """Delete the connection edge (accepted connection or outgoing request)"""
        try:
            return await self._make_request("DELETE", f"/users/{user_id}/connect")
        except RemoteCallFailure as e:
            if e.status_code == 404:
                logger.info(f"Connection edge with user {user_id} already absent")
                raise EdgeAlreadyAbsent(user_id) from e
            raise

    async def cancel_connection_request(self, user_id: Actor) -> Optional[Dict[str, Any]]:
        """Cancel an outgoing connection request"""
        return await self.remove_connection(user_id)

    async def get_connections(self, status: str = "connected") -> RelationshipListResponse:
        """List the viewer's connections"""
        if status not in ("connected", "pending"):
            raise ValueError("status must be 'connected' or 'pending'")
        return await self._get_list("/users/me/connections", params={"status": status})

    async def get_incoming_requests(self) -> RelationshipListResponse:
        """List connection requests sent to the viewer"""
        return await self._get_list("/users/me/connection-requests/incoming")

    async def get_outgoing_requests(self) -> RelationshipListResponse:
        """List connection requests the viewer sent"""
        return await self._get_list("/users/me/connection-requests/outgoing")

    # Follows
    async def follow_user(self, user_id: Actor) -> Optional[Dict[str, Any]]:
        """Follow a user"""
        return await self._make_request("POST", f"/users/{user_id}/follow")

    async def unfollow_user(self, user_id: Actor) -> Optional[Dict[str, Any]]:
        """Unfollow a user"""
        return await self._make_request("DELETE", f"/users/{user_id}/follow")

    async def get_followers(
        self, user_id: Actor, limit: int = 50, offset: int = 0
    ) -> RelationshipListResponse:
        """List a user's followers"""
        return await self._get_list(
            f"/users/{user_id}/followers", params={"limit": limit, "offset": offset}
        )

    async def get_following(
        self, user_id: Actor, limit: int = 50, offset: int = 0
    ) -> RelationshipListResponse:
        """List users a user follows"""
        return await self._get_list(
            f"/users/{user_id}/following", params={"limit": limit, "offset": offset}
        )

    # Blocks
    async def block_user(self, user_id: Actor) -> Optional[Dict[str, Any]]:
        """Block a user"""
        return await self._make_request("POST", f"/users/{user_id}/block")

    async def unblock_user(self, user_id: Actor) -> Optional[Dict[str, Any]]:
        """Unblock a user"""
        return await self._make_request("DELETE", f"/users/{user_id}/block")

    async def get_blocked_users(self, limit: int = 50, offset: int = 0) -> RelationshipListResponse:
        """List users the viewer blocked"""
        return await self._get_list("/users/me/blocks", params={"limit": limit, "offset": offset})

    # Profiles
    async def get_user_profile(self, user_id: Actor) -> Dict[str, Any]:
        """Get a user's profile with the embedded relationship"""
        profile = await self._make_request("GET", f"/users/{user_id}")
        return profile or {}
