"""
Pydantic schemas for relationship API payloads
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Union, Any, Dict

from .domain.models import Actor, RelationshipStatus, same_actor


class RelationshipStatusPayload(BaseModel):
    """Relationship status as returned by the API"""
    is_connected: bool = Field(False, alias="isConnected")
    connection_status: Optional[str] = Field(None, alias="connectionStatus")
    connection_requester_id: Optional[Union[int, str]] = Field(
        None, alias="connectionRequesterId"
    )
    connection_pending: bool = Field(False, alias="connectionPending")
    i_follow_them: bool = Field(False, alias="iFollowThem")
    they_follow_me: bool = Field(False, alias="theyFollowMe")
    i_blocked: bool = Field(False, alias="iBlocked")
    blocked_me: bool = Field(False, alias="blockedMe")

    class Config:
        populate_by_name = True

    @classmethod
    def looks_like_status(cls, payload: Any) -> bool:
        """Check if a response body carries relationship flags"""
        if not isinstance(payload, dict):
            return False
        return any(
            name in payload
            for name in ("isConnected", "connectionPending", "iFollowThem", "iBlocked")
        )

    def to_status(self, viewer_id: Actor, subject_id: Actor) -> RelationshipStatus:
        """
        Build the domain status for the viewer/subject pair

        connectionStatus and the boolean flags are both honoured; a requester
        id the server keeps after the request resolved is dropped.
        """
        is_connected = self.is_connected or self.connection_status == "connected"
        pending = not is_connected and (
            self.connection_pending or self.connection_status == "pending"
        )

        requester = None
        if pending:
            requester = self.connection_requester_id
            # Keep the caller's id type so comparisons stay trivial
            if same_actor(requester, subject_id):
                requester = subject_id
            elif same_actor(requester, viewer_id):
                requester = viewer_id

        return RelationshipStatus(
            viewer_id=viewer_id,
            subject_id=subject_id,
            is_connected=is_connected,
            connection_pending=pending,
            connection_requester_id=requester,
            i_follow_them=self.i_follow_them,
            they_follow_me=self.they_follow_me,
            i_blocked=self.i_blocked,
            blocked_me=self.blocked_me,
        )


class RelationshipUser(BaseModel):
    """User entry in a relationship list"""
    id: Union[int, str]
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    headline: Optional[str] = None
    current_role: Optional[str] = None
    profile_picture: Optional[str] = None
    relationship: Optional[RelationshipStatusPayload] = None

    class Config:
        extra = "allow"


class RelationshipListResponse(BaseModel):
    """Normalized relationship list with pass-through pagination metadata"""
    count: int
    data: List[RelationshipUser]
    total: Optional[int] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    has_more: Optional[bool] = None

    class Config:
        extra = "allow"

    @classmethod
    def from_payload(cls, payload: Any) -> "RelationshipListResponse":
        """
        Normalize a list response

        Servers answer either with a bare list or with a ``{"data": [...]}``
        envelope; both end up as ``{count, data}``.
        """
        if payload is None:
            return cls(count=0, data=[])

        if isinstance(payload, list):
            return cls(count=len(payload), data=payload)

        if isinstance(payload, dict):
            envelope: Dict[str, Any] = dict(payload)
            items = envelope.pop("data", None)
            if not isinstance(items, list):
                items = []
            count = envelope.pop("count", None)
            if count is None:
                count = len(items)
            return cls(count=count, data=items, **envelope)

        raise ValueError(f"Unexpected relationship list payload: {type(payload).__name__}")
