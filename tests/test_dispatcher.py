"""Unit tests for the request dispatcher."""

import logging

import pytest

from authgate.auth.interfaces import ACCESS_TOKEN_KEY
from authgate.core.exceptions import RequestError, TransportError
from authgate.core.models import Response


@pytest.fixture()
def valid_now(transport):
    """Make the stored token A1 valid so no refresh is involved."""
    transport.valid_token = "A1"
    return transport


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------


class TestHeaders:
    def test_attaches_bearer_token(self, gateway, valid_now):
        gateway.get("/me")
        assert valid_now.calls[0].headers == {"Authorization": "Bearer A1"}

    def test_merges_caller_headers(self, gateway, valid_now):
        gateway.get("/me", headers={"X-Trace": "abc"})
        assert valid_now.calls[0].headers == {
            "Authorization": "Bearer A1",
            "X-Trace": "abc",
        }

    def test_caller_authorization_wins(self, gateway, transport):
        gateway.get("/me", headers={"authorization": "Basic dXNlcg=="})
        assert transport.calls[0].headers == {
            "authorization": "Basic dXNlcg=="
        }

    def test_access_token_flag_off(self, gateway, valid_now):
        valid_now.public.add("/public")
        gateway.get("/public", access_token=False)
        assert valid_now.calls[0].headers == {}

    def test_no_stored_token_sends_no_header(self, gateway, store, transport):
        store.remove(ACCESS_TOKEN_KEY)
        gateway.get("/me")
        assert "Authorization" not in transport.calls[0].headers


# ---------------------------------------------------------------------------
# Verbs and responses
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("verb", ["get", "post", "put", "delete"])
def test_each_verb_uses_its_method(gateway, valid_now, verb):
    getattr(gateway, verb)("/things", params={"q": "1"}, body={"a": 1})

    call = valid_now.calls[0]
    assert call.method == verb
    assert call.url == "/things"
    assert call.params == {"q": "1"}
    assert call.body == {"a": 1}


def test_response_is_returned_unmodified(gateway, valid_now):
    canned = Response(201, {"Location": "/things/9"}, {"id": 9})
    valid_now.responses["/things"] = canned

    assert gateway.post("/things", body={"name": "x"}) is canned


def test_no_refresh_when_token_is_valid(gateway, valid_now):
    gateway.get("/me")
    assert valid_now.refresh_calls == []


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    def test_server_error_message_is_surfaced(self, gateway, valid_now):
        valid_now.errors["/boom"] = TransportError(
            "500 Internal Server Error",
            status_code=500,
            body={"error": "database unavailable"},
        )

        with pytest.raises(RequestError) as excinfo:
            gateway.get("/boom")

        assert str(excinfo.value) == "database unavailable"
        assert excinfo.value.status_code == 500
        assert excinfo.value.body == {"error": "database unavailable"}
        assert valid_now.refresh_calls == []

    def test_network_error_keeps_transport_message(self, gateway, valid_now):
        valid_now.errors["/down"] = TransportError("Connection refused")

        with pytest.raises(RequestError, match="Connection refused") as excinfo:
            gateway.get("/down")

        assert excinfo.value.status_code is None

    def test_forbidden_is_not_an_authentication_failure(
        self, gateway, valid_now, redirects
    ):
        valid_now.errors["/admin"] = TransportError(
            "403 Forbidden", status_code=403, body={"error": "forbidden"}
        )

        with pytest.raises(RequestError, match="forbidden"):
            gateway.delete("/admin")

        assert valid_now.refresh_calls == []
        assert redirects.urls == []

    def test_transport_errors_are_logged(self, gateway, valid_now, caplog):
        valid_now.errors["/boom"] = TransportError("boom", status_code=502)

        with caplog.at_level(logging.ERROR, logger="authgate"):
            with pytest.raises(RequestError):
                gateway.get("/boom")

        assert "GET /boom failed" in caplog.text
