"""
Observation broadcaster - shared relationship status store with per-subject subscribers
"""
from collections import deque
from itertools import count
from typing import Callable, Deque, Dict, Optional, Set, Tuple
import logging

from ..domain.models import Actor, RelationshipStatus

logger = logging.getLogger(__name__)

StatusCallback = Callable[[RelationshipStatus], None]


class RelationshipBroadcaster:
    """
    Holds the current relationship status per subject and pushes every
    change to all views subscribed to that subject.

    Delivery is synchronous and ordered per subject. A ``set`` issued from a
    subscriber callback is queued behind the delivery in progress, so every
    subscriber observes the same sequence of states.
    """

    def __init__(self):
        self._statuses: Dict[str, RelationshipStatus] = {}
        self._subscribers: Dict[str, Dict[int, StatusCallback]] = {}
        self._pending: Dict[str, Deque[RelationshipStatus]] = {}
        self._delivering: Set[str] = set()
        self._tokens = count()

    @staticmethod
    def _key(subject_id: Actor) -> str:
        return str(subject_id)

    def get(self, subject_id: Actor) -> Optional[RelationshipStatus]:
        """Get the current status for a subject, if known"""
        return self._statuses.get(self._key(subject_id))

    def subscriber_count(self, subject_id: Actor) -> int:
        """Number of views currently watching a subject"""
        return len(self._subscribers.get(self._key(subject_id), {}))

    def subscribe(self, subject_id: Actor, callback: StatusCallback) -> Callable[[], None]:
        """
        Watch a subject's relationship status

        Args:
            subject_id: Subject to watch
            callback: Called with every new status, in issue order

        Returns:
            Function that removes this subscription
        """
        key = self._key(subject_id)
        token = next(self._tokens)
        self._subscribers.setdefault(key, {})[token] = callback

        def unsubscribe():
            self._unsubscribe(key, token)

        return unsubscribe

    def _unsubscribe(self, key: str, token: int):
        subscribers = self._subscribers.get(key)
        if not subscribers or token not in subscribers:
            return

        del subscribers[token]
        if not subscribers:
            del self._subscribers[key]
            # Nobody displays this subject anymore
            self._statuses.pop(key, None)
            logger.debug(f"Discarded relationship status for subject {key}")

    def set(self, subject_id: Actor, status: RelationshipStatus):
        """
        Store a new status and deliver it to every subscriber

        Only the mutation coordinator and the initial-load path call this.
        """
        key = self._key(subject_id)
        self._statuses[key] = status

        queue = self._pending.setdefault(key, deque())
        queue.append(status)
        if key in self._delivering:
            return

        self._delivering.add(key)
        try:
            while queue:
                self._deliver(key, queue.popleft())
        finally:
            self._delivering.discard(key)
            self._pending.pop(key, None)

    def _deliver(self, key: str, status: RelationshipStatus):
        # Snapshot so callbacks may (un)subscribe while being notified
        subscribers: Tuple[StatusCallback, ...] = tuple(
            self._subscribers.get(key, {}).values()
        )
        for callback in subscribers:
            try:
                callback(status)
            except Exception:
                logger.exception(f"Relationship subscriber for subject {key} failed")
