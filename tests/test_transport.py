"""Unit tests for the requests-backed transport.

``Session.request`` is replaced with a MagicMock so that no real HTTP
requests are made.
"""

from unittest.mock import MagicMock

import pytest
import requests

from authgate.core.exceptions import TransportError
from authgate.transport.requests_transport import RequestsTransport


def _response(status=200, content=b'{"ok": true}', reason="OK"):
    r = requests.Response()
    r.status_code = status
    r.reason = reason
    r._content = content
    r.encoding = "utf-8"
    r.url = "https://api.example.com/x"
    r.headers["Content-Type"] = "application/json"
    return r


@pytest.fixture()
def session():
    s = requests.Session()
    s.request = MagicMock(return_value=_response())
    return s


@pytest.fixture()
def transport(session):
    return RequestsTransport(
        base_url="https://api.example.com/", timeout=5, session=session
    )


def test_relative_url_is_joined_to_base(transport, session):
    transport.call("get", "/users", params={"page": 2})

    args, kwargs = session.request.call_args
    assert args == ("GET", "https://api.example.com/users")
    assert kwargs["params"] == {"page": 2}
    assert kwargs["timeout"] == 5


def test_absolute_url_is_left_alone(transport, session):
    transport.call("post", "https://auth.example.com/token", body={"a": 1})

    args, kwargs = session.request.call_args
    assert args == ("POST", "https://auth.example.com/token")
    assert kwargs["json"] == {"a": 1}


def test_headers_are_forwarded(transport, session):
    transport.call("get", "/x", headers={"Authorization": "Bearer A1"})
    assert session.request.call_args.kwargs["headers"] == {
        "Authorization": "Bearer A1"
    }


def test_session_sends_json(transport, session):
    assert session.headers["Content-Type"] == "application/json"


def test_success_is_decoded(transport):
    response = transport.call("get", "/x")

    assert response.status_code == 200
    assert response.data == {"ok": True}
    assert response.headers["Content-Type"] == "application/json"


def test_non_json_body_is_returned_as_text(transport, session):
    session.request.return_value = _response(content=b"plain text")
    assert transport.call("get", "/x").data == "plain text"


def test_empty_body_is_none(transport, session):
    session.request.return_value = _response(status=204, content=b"")
    assert transport.call("delete", "/x").data is None


def test_error_status_raises_with_body(transport, session):
    session.request.return_value = _response(
        status=401, content=b'{"error": "token expired"}', reason="Unauthorized"
    )

    with pytest.raises(TransportError) as excinfo:
        transport.call("get", "/x")

    assert excinfo.value.status_code == 401
    assert excinfo.value.body == {"error": "token expired"}


def test_network_failure_has_no_status(transport, session):
    session.request.side_effect = requests.ConnectionError("refused")

    with pytest.raises(TransportError, match="refused") as excinfo:
        transport.call("get", "/x")

    assert excinfo.value.status_code is None
