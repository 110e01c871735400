"""
Relationship engine error taxonomy
"""
from typing import Optional, Any


class RelationshipError(Exception):
    """Base class for relationship engine errors"""


class InvariantViolation(RelationshipError):
    """A relationship status was built from contradictory signals"""


class InvalidTransition(RelationshipError):
    """The requested action is not legal for the current status"""

    def __init__(self, message: str, action: Any = None):
        super().__init__(message)
        self.action = action


class MutationInProgress(RelationshipError):
    """Another mutation for the same subject has not settled yet"""

    def __init__(self, subject_id: Any, action: Any = None):
        super().__init__(f"A relationship update for user {subject_id} is already in progress")
        self.subject_id = subject_id
        self.action = action


class RemoteCallFailure(RelationshipError):
    """
    Network or server error while talking to the relationship service.

    ``message`` is safe to show to the user. ``status`` is filled in by the
    mutation coordinator with the status that was restored after rollback.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        status: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.status = status


class EdgeAlreadyAbsent(RelationshipError):
    """Delete-edge call found nothing to delete"""

    def __init__(self, subject_id: Any):
        super().__init__(f"No connection edge exists for user {subject_id}")
        self.subject_id = subject_id
