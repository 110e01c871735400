import httpx
import pytest
import pytest_asyncio

from relationship_client.exceptions import EdgeAlreadyAbsent, RemoteCallFailure
from relationship_client.infrastructure.service_client import RelationshipServiceClient

BASE_URL = "http://api.test/api"


class Router:
    """Maps (method, path) to canned responses and records requests"""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, response):
        self.routes[(method, path)] = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"message": "not found"})
        if isinstance(handler, Exception):
            raise handler
        return handler


@pytest.fixture
def router():
    return Router()


@pytest_asyncio.fixture
async def client(router):
    client = RelationshipServiceClient(
        base_url=BASE_URL, token="secret", transport=httpx.MockTransport(router)
    )
    await client.start()
    yield client
    await client.stop()


@pytest.mark.asyncio
async def test_mutations_hit_expected_endpoints(client, router):
    calls = [
        ("POST", "/api/users/5/connect", client.send_connection_request),
        ("POST", "/api/users/5/connect/accept", client.accept_connection_request),
        ("POST", "/api/users/5/connect/decline", client.decline_connection_request),
        ("DELETE", "/api/users/5/connect", client.remove_connection),
        ("POST", "/api/users/5/follow", client.follow_user),
        ("DELETE", "/api/users/5/follow", client.unfollow_user),
        ("POST", "/api/users/5/block", client.block_user),
        ("DELETE", "/api/users/5/block", client.unblock_user),
    ]
    for method, path, _ in calls:
        router.add(method, path, httpx.Response(200, json={"success": True}))

    for _, _, operation in calls:
        assert await operation(5) == {"success": True}

    assert [(r.method, r.url.path) for r in router.requests] == [(m, p) for m, p, _ in calls]


@pytest.mark.asyncio
async def test_bearer_token_sent(client, router):
    router.add("POST", "/api/users/5/follow", httpx.Response(204))

    assert await client.follow_user(5) is None
    assert router.requests[0].headers["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_cancel_uses_delete_edge(client, router):
    router.add("DELETE", "/api/users/5/connect", httpx.Response(204))

    await client.cancel_connection_request(5)

    assert router.requests[0].method == "DELETE"


@pytest.mark.asyncio
async def test_delete_edge_404_means_already_absent(client):
    with pytest.raises(EdgeAlreadyAbsent):
        await client.remove_connection(5)


@pytest.mark.asyncio
async def test_404_elsewhere_is_a_failure(client):
    with pytest.raises(RemoteCallFailure) as exc_info:
        await client.follow_user(5)
    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Resource not found."


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status_code,message",
    [
        (403, "You do not have permission to perform this action."),
        (429, "Too many requests. Please try again later."),
        (500, "Server error. Please try again later."),
        (503, "Server error. Please try again later."),
    ],
)
async def test_status_codes_map_to_messages(client, router, status_code, message):
    router.add("POST", "/api/users/5/connect", httpx.Response(status_code))

    with pytest.raises(RemoteCallFailure) as exc_info:
        await client.send_connection_request(5)
    assert exc_info.value.message == message
    assert exc_info.value.status_code == status_code


@pytest.mark.asyncio
async def test_other_errors_use_server_message(client, router):
    router.add("POST", "/api/users/5/connect", httpx.Response(409, json={"message": "Already requested"}))

    with pytest.raises(RemoteCallFailure) as exc_info:
        await client.send_connection_request(5)
    assert exc_info.value.message == "Already requested"


@pytest.mark.asyncio
async def test_unauthorized_clears_token(client, router):
    router.add("POST", "/api/users/5/follow", httpx.Response(401))

    with pytest.raises(RemoteCallFailure) as exc_info:
        await client.follow_user(5)

    assert exc_info.value.message == "Session expired. Please log in again."
    assert client.token is None


@pytest.mark.asyncio
async def test_timeout_and_network_errors(client, router):
    router.add("POST", "/api/users/5/follow", httpx.ReadTimeout("slow"))
    router.add("DELETE", "/api/users/5/follow", httpx.ConnectError("down"))

    with pytest.raises(RemoteCallFailure) as timeout:
        await client.follow_user(5)
    with pytest.raises(RemoteCallFailure) as network:
        await client.unfollow_user(5)

    assert timeout.value.message == "Request timeout. Please try again."
    assert network.value.message == "Network error. Please check your connection."


@pytest.mark.asyncio
async def test_connections_bare_list_normalized(client, router):
    router.add("GET", "/api/users/me/connections", httpx.Response(200, json=[{"id": 1}, {"id": 2}]))

    listing = await client.get_connections("pending")

    assert listing.count == 2
    assert [user.id for user in listing.data] == [1, 2]
    assert router.requests[0].url.params["status"] == "pending"


@pytest.mark.asyncio
async def test_connections_envelope_normalized(client, router):
    router.add(
        "GET",
        "/api/users/me/connections",
        httpx.Response(200, json={"data": [{"id": 1, "username": "ana"}]}),
    )

    listing = await client.get_connections()

    assert listing.count == 1
    assert listing.data[0].username == "ana"


@pytest.mark.asyncio
async def test_connections_status_validated(client, router):
    with pytest.raises(ValueError):
        await client.get_connections("blocked")
    assert router.requests == []


@pytest.mark.asyncio
async def test_followers_pass_through_pagination(client, router):
    router.add(
        "GET",
        "/api/users/7/followers",
        httpx.Response(200, json={"count": 120, "data": [{"id": 3}], "limit": 1, "offset": 10, "has_more": True}),
    )

    listing = await client.get_followers(7, limit=1, offset=10)

    assert listing.count == 120
    assert listing.limit == 1
    assert listing.offset == 10
    assert listing.has_more is True
    params = router.requests[0].url.params
    assert params["limit"] == "1" and params["offset"] == "10"


@pytest.mark.asyncio
async def test_following_and_request_lists(client, router):
    router.add("GET", "/api/users/7/following", httpx.Response(200, json=[]))
    router.add("GET", "/api/users/me/connection-requests/incoming", httpx.Response(200, json=[{"id": 4}]))
    router.add("GET", "/api/users/me/connection-requests/outgoing", httpx.Response(200, json={"data": []}))
    router.add("GET", "/api/users/me/blocks", httpx.Response(200, json={"data": [{"id": 9}], "total": 1}))

    assert (await client.get_following(7)).count == 0
    assert (await client.get_incoming_requests()).count == 1
    assert (await client.get_outgoing_requests()).count == 0
    blocked = await client.get_blocked_users()
    assert blocked.total == 1 and blocked.data[0].id == 9


@pytest.mark.asyncio
async def test_malformed_list_is_a_failure(client, router):
    router.add("GET", "/api/users/7/following", httpx.Response(200, json=[{"username": "no-id"}]))

    with pytest.raises(RemoteCallFailure):
        await client.get_following(7)


@pytest.mark.asyncio
async def test_profile_includes_relationship(client, router):
    router.add(
        "GET",
        "/api/users/5",
        httpx.Response(200, json={"id": 5, "relationship": {"isConnected": True}}),
    )

    profile = await client.get_user_profile(5)
    assert profile["relationship"]["isConnected"] is True


@pytest.mark.asyncio
async def test_request_before_start_fails():
    client = RelationshipServiceClient(base_url=BASE_URL)
    with pytest.raises(RuntimeError):
        await client.follow_user(5)
