"""
Transition rules - which actions a relationship allows and what they do
"""
from typing import FrozenSet

from .models import Action, RelationshipStatus, RelationshipView
from ..exceptions import InvalidTransition

# Cancelling an outgoing request and removing a connection hit the same
# delete-edge endpoint
EDGE_DELETE_ACTIONS: FrozenSet[Action] = frozenset(
    {Action.CANCEL_CONNECTION, Action.REMOVE_CONNECTION}
)


def resolve_view(status: RelationshipStatus) -> RelationshipView:
    """
    Resolve the single ladder branch a status falls into

    Args:
        status: Current relationship status

    Returns:
        RelationshipView for the first matching rule
    """
    if status.i_blocked or status.blocked_me:
        return RelationshipView.BLOCKED
    if status.is_connected:
        return RelationshipView.CONNECTED
    if status.is_incoming_request:
        return RelationshipView.INCOMING_PENDING
    if status.connection_pending:
        return RelationshipView.OUTGOING_PENDING
    return RelationshipView.DEFAULT


def _follow_toggle(status: RelationshipStatus) -> Action:
    return Action.UNFOLLOW if status.i_follow_them else Action.FOLLOW


def available_actions(status: RelationshipStatus) -> FrozenSet[Action]:
    """
    Get the actions the viewer may take on this relationship

    Args:
        status: Current relationship status

    Returns:
        Set of legal actions (empty when the subject blocked the viewer)
    """
    view = resolve_view(status)

    if view == RelationshipView.BLOCKED:
        if status.i_blocked:
            return frozenset({Action.UNBLOCK})
        return frozenset()

    if view == RelationshipView.CONNECTED:
        return frozenset({Action.REMOVE_CONNECTION, _follow_toggle(status)})

    if view == RelationshipView.INCOMING_PENDING:
        return frozenset({Action.ACCEPT_CONNECTION, Action.DECLINE_CONNECTION})

    if view == RelationshipView.OUTGOING_PENDING:
        return frozenset({Action.CANCEL_CONNECTION})

    return frozenset({Action.SEND_CONNECTION_REQUEST, _follow_toggle(status)})


def apply(status: RelationshipStatus, action: Action) -> RelationshipStatus:
    """
    Compute the optimistic status after an action

    Args:
        status: Current relationship status
        action: Requested action

    Returns:
        The status to show while the remote call is in flight

    Raises:
        InvalidTransition: If the action is not available for this status
    """
    try:
        action = Action(action)
    except ValueError:
        raise InvalidTransition(f"Unknown relationship action: {action}", action=action) from None

    if action not in available_actions(status):
        raise InvalidTransition(
            f"Cannot {action.value.replace('_', ' ')} while relationship is "
            f"{resolve_view(status).value.replace('_', ' ')}",
            action=action,
        )

    if action == Action.UNBLOCK:
        # Blocking does not touch the other edges server-side
        return status.replace(i_blocked=False)

    if action == Action.SEND_CONNECTION_REQUEST:
        return status.replace(
            connection_pending=True,
            connection_requester_id=status.viewer_id,
        )

    if action == Action.ACCEPT_CONNECTION:
        return status.replace(
            is_connected=True,
            connection_pending=False,
            connection_requester_id=None,
        )

    if action in (Action.DECLINE_CONNECTION, Action.CANCEL_CONNECTION):
        return status.replace(connection_pending=False, connection_requester_id=None)

    if action == Action.REMOVE_CONNECTION:
        return status.replace(
            is_connected=False,
            connection_pending=False,
            connection_requester_id=None,
        )

    if action == Action.FOLLOW:
        return status.replace(i_follow_them=True)

    return status.replace(i_follow_them=False)
