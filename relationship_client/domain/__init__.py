from .models import Action, Actor, InFlightMutation, RelationshipStatus, RelationshipView, same_actor
from .transitions import available_actions, apply, resolve_view


__all__ = [
    # models.py
    "Action",
    "Actor",
    "InFlightMutation",
    "RelationshipStatus",
    "RelationshipView",
    "same_actor",
    # transitions.py
    "available_actions",
    "apply",
    "resolve_view",
]
