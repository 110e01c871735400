"""
Relationship Client - relationship status resolution and transition engine
"""
from .config import settings
from .domain.models import Action, Actor, RelationshipStatus, RelationshipView
from .exceptions import (
    RelationshipError,
    InvariantViolation,
    InvalidTransition,
    MutationInProgress,
    RemoteCallFailure,
    EdgeAlreadyAbsent,
)


__all__ = [
    # config.py
    "settings",
    # domain/models.py
    "Action",
    "Actor",
    "RelationshipStatus",
    "RelationshipView",
    # exceptions.py
    "RelationshipError",
    "InvariantViolation",
    "InvalidTransition",
    "MutationInProgress",
    "RemoteCallFailure",
    "EdgeAlreadyAbsent",
]
