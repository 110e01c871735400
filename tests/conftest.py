import asyncio
from fnmatch import fnmatch
from typing import Any, Dict, List, Optional, Tuple

import pytest

from relationship_client.application.broadcaster import RelationshipBroadcaster
from relationship_client.application.coordinator import MutationCoordinator
from relationship_client.application.notifier import INotifier
from relationship_client.application.services import RelationshipService
from relationship_client.domain.models import RelationshipStatus
from relationship_client.domain.repositories import (
    IRelationshipRepository,
    IRelationshipListInvalidator,
)
from relationship_client.schemas import RelationshipListResponse

VIEWER = 1
SUBJECT = 2


class FakeRelationshipRepository(IRelationshipRepository):
    """In-memory stand-in for the remote relationship service"""

    def __init__(self):
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.responses: Dict[str, Any] = {}
        self.failures: Dict[str, Exception] = {}
        self.gate: Optional[asyncio.Event] = None
        self.profiles: Dict[str, Dict[str, Any]] = {}
        self.lists: Dict[str, Any] = {}

    async def _call(self, name: str, *args):
        self.calls.append((name, args))
        if self.gate is not None:
            await self.gate.wait()
        if name in self.failures:
            raise self.failures[name]
        return self.responses.get(name)

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    async def send_connection_request(self, user_id):
        return await self._call("send_connection_request", user_id)

    async def accept_connection_request(self, requester_id):
        return await self._call("accept_connection_request", requester_id)

    async def decline_connection_request(self, requester_id):
        return await self._call("decline_connection_request", requester_id)

    async def remove_connection(self, user_id):
        return await self._call("remove_connection", user_id)

    async def follow_user(self, user_id):
        return await self._call("follow_user", user_id)

    async def unfollow_user(self, user_id):
        return await self._call("unfollow_user", user_id)

    async def block_user(self, user_id):
        return await self._call("block_user", user_id)

    async def unblock_user(self, user_id):
        return await self._call("unblock_user", user_id)

    async def get_user_profile(self, user_id):
        self.calls.append(("get_user_profile", (user_id,)))
        return self.profiles.get(str(user_id), {"id": user_id})

    async def _list(self, name: str, *args) -> RelationshipListResponse:
        self.calls.append((name, args))
        return RelationshipListResponse.from_payload(self.lists.get(name, []))

    async def get_connections(self, status):
        return await self._list("get_connections", status)

    async def get_incoming_requests(self):
        return await self._list("get_incoming_requests")

    async def get_outgoing_requests(self):
        return await self._list("get_outgoing_requests")

    async def get_followers(self, user_id, limit, offset):
        return await self._list("get_followers", user_id, limit, offset)

    async def get_following(self, user_id, limit, offset):
        return await self._list("get_following", user_id, limit, offset)

    async def get_blocked_users(self, limit, offset):
        return await self._list("get_blocked_users", limit, offset)


class RecordingNotifier(INotifier):
    def __init__(self):
        self.notices: List[Tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.notices.append(("success", message))

    def warning(self, message: str) -> None:
        self.notices.append(("warning", message))

    def error(self, message: str) -> None:
        self.notices.append(("error", message))

    def of_kind(self, kind: str) -> List[str]:
        return [message for k, message in self.notices if k == kind]


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the list cache"""

    def __init__(self):
        self.store = {}
        self.ttls = {}
        self.fail = False

    async def get(self, key):
        if self.fail:
            raise ConnectionError("redis down")
        return self.store.get(key)

    async def setex(self, key, ttl, value):
        if self.fail:
            raise ConnectionError("redis down")
        self.store[key] = value
        self.ttls[key] = ttl

    async def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)

    async def scan_iter(self, match=None):
        for key in list(self.store):
            if match is None or fnmatch(key, match):
                yield key

    async def close(self):
        pass


class RecordingInvalidator(IRelationshipListInvalidator):
    def __init__(self):
        self.invalidations = 0

    async def invalidate_relationship_lists(self) -> None:
        self.invalidations += 1


def make_status(**flags) -> RelationshipStatus:
    return RelationshipStatus(viewer_id=VIEWER, subject_id=SUBJECT, **flags)


@pytest.fixture
def broadcaster():
    return RelationshipBroadcaster()


@pytest.fixture
def repository():
    return FakeRelationshipRepository()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def invalidator():
    return RecordingInvalidator()


@pytest.fixture
def coordinator(broadcaster, repository, notifier, invalidator):
    return MutationCoordinator(broadcaster, repository, notifier, list_invalidator=invalidator)


@pytest.fixture
def service(broadcaster, repository, coordinator):
    return RelationshipService(VIEWER, repository, broadcaster, coordinator)
