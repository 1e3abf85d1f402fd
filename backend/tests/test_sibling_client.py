import httpx
import pytest

from banquet.services.directories import RemoteVenueDirectory, UserDirectory
from banquet.services.sibling_client import (
    RemoteNotFound,
    RemoteTimeout,
    RemoteUnavailable,
    SiblingClient,
)
from banquet.utils.errors import DependencyUnavailable, NotFound


def client_for(handler) -> SiblingClient:
    return SiblingClient("http://sibling.test/", timeout=1.0, transport=httpx.MockTransport(handler))


def test_returns_json_and_forwards_headers():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["user"] = request.headers.get("X-User-Id")
        return httpx.Response(200, json={"id": 1})

    client = client_for(handler)
    assert client.get_json("/api/venue/venues/1", headers={"X-User-Id": "u"}) == {"id": 1}
    assert seen == {"url": "http://sibling.test/api/venue/venues/1", "user": "u"}


@pytest.mark.parametrize(
    "handler, error",
    [
        (lambda request: httpx.Response(404), RemoteNotFound),
        (lambda request: httpx.Response(500), RemoteUnavailable),
        (lambda request: httpx.Response(200, content=b"not json"), RemoteUnavailable),
    ],
)
def test_status_mapping(handler, error):
    with pytest.raises(error):
        client_for(handler).get_json("/x")


def test_timeout_is_distinguished():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(RemoteTimeout):
        client_for(handler).get_json("/x")


def test_remote_venue_directory_maps_errors():
    def handler(request):
        if request.url.path.endswith("/1"):
            return httpx.Response(200, json={"id": 1, "vendorId": 7, "perHeadPrice": "12.50"})
        if request.url.path.endswith("/2"):
            return httpx.Response(404)
        return httpx.Response(502)

    venues = RemoteVenueDirectory(client_for(handler), {})
    record = venues.get(1)
    assert record.vendor_id == "7"
    assert str(record.per_head_price) == "12.50"
    assert venues.get(2) is None
    with pytest.raises(DependencyUnavailable):
        venues.get(3)


def test_user_directory():
    def handler(request):
        if request.url.path.endswith("/u1"):
            return httpx.Response(200, json={"id": "u1", "email": "u1@example.com", "name": "U"})
        if request.url.path.endswith("/noemail"):
            return httpx.Response(200, json={"id": "noemail"})
        return httpx.Response(404)

    users = UserDirectory(client_for(handler), {})
    assert users.get("u1").email == "u1@example.com"
    with pytest.raises(NotFound):
        users.get("ghost")
    with pytest.raises(DependencyUnavailable):
        users.get("noemail")
    with pytest.raises(DependencyUnavailable):
        UserDirectory(None, {}).get("u1")
