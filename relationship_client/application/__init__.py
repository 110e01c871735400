from .broadcaster import RelationshipBroadcaster
from .coordinator import MutationCoordinator
from .notifier import INotifier, LoggingNotifier
from .services import RelationshipService


__all__ = [
    # broadcaster.py
    "RelationshipBroadcaster",
    # coordinator.py
    "MutationCoordinator",
    # notifier.py
    "INotifier",
    "LoggingNotifier",
    # services.py
    "RelationshipService",
]
