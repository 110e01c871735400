"""
Mutation coordinator - runs relationship actions against the remote service
"""
import asyncio
from typing import Any, Dict, Optional, Set
from pydantic import ValidationError
import logging

from .broadcaster import RelationshipBroadcaster
from .notifier import INotifier
from ..domain import transitions
from ..domain.models import Action, Actor, InFlightMutation, RelationshipStatus
from ..domain.repositories import IRelationshipRepository, IRelationshipListInvalidator
from ..exceptions import (
    EdgeAlreadyAbsent,
    InvalidTransition,
    InvariantViolation,
    MutationInProgress,
    RemoteCallFailure,
)
from ..schemas import RelationshipStatusPayload

logger = logging.getLogger(__name__)

SUCCESS_MESSAGES: Dict[Action, str] = {
    Action.SEND_CONNECTION_REQUEST: "Connection request sent",
    Action.ACCEPT_CONNECTION: "Connection accepted",
    Action.DECLINE_CONNECTION: "Request declined",
    Action.CANCEL_CONNECTION: "Request cancelled",
    Action.REMOVE_CONNECTION: "Connection removed",
    Action.FOLLOW: "Following",
    Action.UNFOLLOW: "Unfollowed",
    Action.UNBLOCK: "Unblocked user",
}

GENERIC_FAILURE_MESSAGE = "Action failed"


class MutationCoordinator:
    """
    Executes one remote call per user action.

    At most one mutation per subject is in flight. The optimistic status is
    broadcast before the call, then replaced by the confirmed status on
    success or by the previous status on failure.
    """

    def __init__(
        self,
        broadcaster: RelationshipBroadcaster,
        repository: IRelationshipRepository,
        notifier: INotifier,
        list_invalidator: Optional[IRelationshipListInvalidator] = None,
    ):
        self.broadcaster = broadcaster
        self.repository = repository
        self.notifier = notifier
        self.list_invalidator = list_invalidator
        self._in_flight: Dict[str, InFlightMutation] = {}
        self._background: Set[asyncio.Task] = set()

    def is_pending(self, subject_id: Actor) -> bool:
        """Check if a mutation for this subject has not settled yet"""
        return str(subject_id) in self._in_flight

    def in_flight(self, subject_id: Actor) -> Optional[InFlightMutation]:
        """Get the outstanding mutation for a subject"""
        return self._in_flight.get(str(subject_id))

    async def dispatch(self, subject_id: Actor, action: Action) -> RelationshipStatus:
        """
        Run a relationship action

        Args:
            subject_id: User the action targets
            action: Action chosen by the viewer

        Returns:
            The settled relationship status

        Raises:
            MutationInProgress: If another action for the subject is in flight
            InvalidTransition: If the action is not legal right now
            RemoteCallFailure: If the remote call failed (state already rolled back)
        """
        key = str(subject_id)
        if key in self._in_flight:
            logger.debug(f"Ignoring {action} for user {subject_id}: mutation in progress")
            raise MutationInProgress(subject_id, action)

        previous = self.broadcaster.get(subject_id)
        try:
            if previous is None:
                raise InvalidTransition(
                    f"Relationship with user {subject_id} is not loaded", action=action
                )
            optimistic = transitions.apply(previous, action)
        except InvalidTransition as e:
            self.notifier.warning(str(e))
            raise

        action = Action(action)
        self._in_flight[key] = InFlightMutation(
            subject_id=subject_id,
            action=action,
            optimistic_status=optimistic,
            previous_status=previous,
        )
        self.broadcaster.set(subject_id, optimistic)

        try:
            response = await self._invoke(subject_id, action)
        except EdgeAlreadyAbsent:
            logger.info(f"{action.value} for user {subject_id}: edge already absent")
            response = None
        except RemoteCallFailure as e:
            self._rollback(key, subject_id, previous, e)
            raise
        except Exception as e:
            logger.exception(f"Unexpected error during {action.value} for user {subject_id}")
            failure = RemoteCallFailure(GENERIC_FAILURE_MESSAGE)
            self._rollback(key, subject_id, previous, failure)
            raise failure from e

        del self._in_flight[key]
        confirmed = self._confirmed_status(response, previous) or optimistic
        self.broadcaster.set(subject_id, confirmed)

        logger.info(f"{action.value} for user {subject_id} succeeded")
        self.notifier.success(SUCCESS_MESSAGES[action])
        self._invalidate_lists()
        return confirmed

    def _rollback(
        self,
        key: str,
        subject_id: Actor,
        previous: RelationshipStatus,
        failure: RemoteCallFailure,
    ):
        del self._in_flight[key]
        failure.status = previous
        self.broadcaster.set(subject_id, previous)
        logger.warning(f"Relationship update for user {subject_id} failed: {failure.message}")
        self.notifier.error(failure.message or GENERIC_FAILURE_MESSAGE)

    async def _invoke(self, subject_id: Actor, action: Action) -> Any:
        """Call the remote operation behind an action"""
        if action == Action.SEND_CONNECTION_REQUEST:
            return await self.repository.send_connection_request(subject_id)
        if action == Action.ACCEPT_CONNECTION:
            # Only incoming requests can be accepted, so the subject is the requester
            return await self.repository.accept_connection_request(subject_id)
        if action == Action.DECLINE_CONNECTION:
            return await self.repository.decline_connection_request(subject_id)
        if action in transitions.EDGE_DELETE_ACTIONS:
            return await self.repository.remove_connection(subject_id)
        if action == Action.FOLLOW:
            return await self.repository.follow_user(subject_id)
        if action == Action.UNFOLLOW:
            return await self.repository.unfollow_user(subject_id)
        return await self.repository.unblock_user(subject_id)

    @staticmethod
    def _confirmed_status(
        response: Any, previous: RelationshipStatus
    ) -> Optional[RelationshipStatus]:
        """Extract a server-confirmed status from a mutation response, if any"""
        if isinstance(response, dict) and isinstance(response.get("relationship"), dict):
            response = response["relationship"]
        if not RelationshipStatusPayload.looks_like_status(response):
            return None
        try:
            payload = RelationshipStatusPayload(**response)
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable relationship in mutation response: {e}")
            return None
        try:
            return payload.to_status(previous.viewer_id, previous.subject_id)
        except InvariantViolation as e:
            logger.warning(f"Ignoring inconsistent relationship in mutation response: {e}")
            return None

    def _invalidate_lists(self):
        """Fire-and-forget refresh signal for cached relationship lists"""
        if not self.list_invalidator:
            return

        task = asyncio.create_task(self.list_invalidator.invalidate_relationship_lists())
        self._background.add(task)
        task.add_done_callback(self._on_invalidated)

    def _on_invalidated(self, task: asyncio.Task):
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Relationship list invalidation failed: {task.exception()}")

    async def drain(self):
        """Wait for outstanding list invalidations"""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
