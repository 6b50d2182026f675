"""
Tests for the remote restaurant API client.
"""

import httpx
import pytest

from clients.restaurant_api import RestaurantApiClient
from core.exceptions import ExternalServiceError, UpstreamRequestError


def make_client(handler):
    return RestaurantApiClient(base_url="http://remote.test/api/", transport=httpx.MockTransport(handler))


class TestRestaurantApiClient:
    """Request forwarding and error mapping."""

    def test_forwards_token_and_params(self):
        seen = {}

        def handler(request):
            seen["request"] = request
            return httpx.Response(200, json={"ok": True})

        client = make_client(handler)
        assert client.get("/user/superadmin/all", "tok", params={"page": 1, "role": None, "search": ""}) == {"ok": True}
        request = seen["request"]
        assert request.url.path == "/api/user/superadmin/all"
        assert request.headers["Authorization"] == "Bearer tok"
        assert dict(request.url.params) == {"page": "1"}

    def test_error_status_passes_through(self):
        client = make_client(lambda request: httpx.Response(409, json={"message": "Email already in use"}))
        with pytest.raises(UpstreamRequestError) as exc_info:
            client.post("/user/post", "tok", json={})
        assert exc_info.value.status_code == 409
        assert exc_info.value.detail == "Email already in use"
        assert exc_info.value.path == "/user/post"

    def test_error_without_body_uses_reason(self):
        client = make_client(lambda request: httpx.Response(500))
        with pytest.raises(UpstreamRequestError) as exc_info:
            client.get("/invoice/x/dashboard", "tok")
        assert exc_info.value.detail == "Internal Server Error"

    def test_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused")

        with pytest.raises(ExternalServiceError) as exc_info:
            make_client(handler).get("/company/branch/x/", "tok")
        assert exc_info.value.status_code == 503

    def test_empty_body(self):
        assert make_client(lambda request: httpx.Response(204)).delete("/user/delete/1", "tok") is None

    def test_non_json_body(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(ExternalServiceError):
            client.get("/userrole/branch/x", "tok")
