"""
Domain models - Core relationship entities
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union, Dict, Any

from ..exceptions import InvariantViolation

Actor = Union[int, str]


def same_actor(a: Optional[Actor], b: Optional[Actor]) -> bool:
    """Compare actor ids regardless of numeric/string form"""
    if a is None or b is None:
        return False
    return str(a) == str(b)


class Action(str, Enum):
    """User-triggered relationship actions"""
    SEND_CONNECTION_REQUEST = "send_connection_request"
    ACCEPT_CONNECTION = "accept_connection"
    DECLINE_CONNECTION = "decline_connection"
    CANCEL_CONNECTION = "cancel_connection"
    REMOVE_CONNECTION = "remove_connection"
    FOLLOW = "follow"
    UNFOLLOW = "unfollow"
    UNBLOCK = "unblock"


class RelationshipView(str, Enum):
    """Which branch of the status ladder a relationship resolves to"""
    BLOCKED = "blocked"
    CONNECTED = "connected"
    INCOMING_PENDING = "incoming_pending"
    OUTGOING_PENDING = "outgoing_pending"
    DEFAULT = "default"


@dataclass(frozen=True)
class RelationshipStatus:
    """Relationship between the viewer and a subject, as seen by the viewer"""
    viewer_id: Actor
    subject_id: Actor
    is_connected: bool = False
    connection_pending: bool = False
    connection_requester_id: Optional[Actor] = None
    i_follow_them: bool = False
    they_follow_me: bool = False
    i_blocked: bool = False
    blocked_me: bool = False

    def __post_init__(self):
        if self.is_connected and self.connection_pending:
            raise InvariantViolation(
                "A relationship cannot be connected and pending at the same time"
            )

        if self.connection_pending:
            if self.connection_requester_id is None:
                raise InvariantViolation(
                    "A pending connection must have a requester"
                )
            if not (
                same_actor(self.connection_requester_id, self.viewer_id)
                or same_actor(self.connection_requester_id, self.subject_id)
            ):
                raise InvariantViolation(
                    f"Connection requester {self.connection_requester_id} is neither "
                    f"the viewer nor the subject"
                )
        elif self.connection_requester_id is not None:
            raise InvariantViolation(
                "Connection requester is only set while a request is pending"
            )

    @property
    def connection_status(self) -> Optional[str]:
        """'connected', 'pending' or None"""
        if self.is_connected:
            return "connected"
        if self.connection_pending:
            return "pending"
        return None

    @property
    def is_blocked(self) -> bool:
        """Check if a block exists in either direction"""
        return self.i_blocked or self.blocked_me

    @property
    def is_incoming_request(self) -> bool:
        """Check if the subject asked the viewer to connect"""
        return self.connection_pending and same_actor(
            self.connection_requester_id, self.subject_id
        )

    @property
    def is_outgoing_request(self) -> bool:
        """Check if the viewer asked the subject to connect"""
        return self.connection_pending and same_actor(
            self.connection_requester_id, self.viewer_id
        )

    def replace(self, **changes) -> "RelationshipStatus":
        """Return a validated copy with the given fields changed"""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the wire format used by the relationship API"""
        return {
            "isConnected": self.is_connected,
            "connectionStatus": self.connection_status,
            "connectionRequesterId": self.connection_requester_id,
            "connectionPending": self.connection_pending,
            "iFollowThem": self.i_follow_them,
            "theyFollowMe": self.they_follow_me,
            "iBlocked": self.i_blocked,
            "blockedMe": self.blocked_me,
        }


@dataclass
class InFlightMutation:
    """A dispatched action whose remote call has not settled"""
    subject_id: Actor
    action: Action
    optimistic_status: RelationshipStatus
    previous_status: RelationshipStatus
