"""Shared fakes for the gateway tests."""

import threading
import time

import pytest

from authgate.core.exceptions import TransportError
from authgate.core.interfaces import Transport
from authgate.core.models import RequestDescriptor, Response

AUTH_URI = "https://auth.example.com"
REFRESH_URL = f"{AUTH_URI}/token"
LOGOUT_URL = f"{AUTH_URI}/logout"
CLIENT_ID = "client-1"


class FakeTransport(Transport):
    """In-memory API that accepts exactly one bearer token.

    Calls to the refresh endpoint block on ``refresh_gate`` (open by
    default) so tests can hold a refresh in flight while other requests
    fail.  :meth:`hold` does the same for one API call.
    """

    def __init__(self, valid_token: str = "A2"):
        self.valid_token = valid_token
        self.refresh_outcome: Response | Exception = Response(
            200, {}, {"accessToken": valid_token}
        )
        self.refresh_gate = threading.Event()
        self.refresh_gate.set()
        self.refresh_started = threading.Event()
        self.errors: dict[str, TransportError] = {}
        self.responses: dict[str, Response] = {}
        self.public: set[str] = set()
        self.calls: list[RequestDescriptor] = []
        self._holds: dict[tuple[str, str | None], tuple] = {}
        self._lock = threading.Lock()

    @property
    def refresh_calls(self) -> list[RequestDescriptor]:
        return [c for c in self.calls if c.url == REFRESH_URL]

    @property
    def api_calls(self) -> list[RequestDescriptor]:
        return [c for c in self.calls if c.url != REFRESH_URL]

    def hold(self, url: str, authorization: str | None = None):
        """Block the next call to ``url`` until released.

        Only a call carrying ``authorization`` is held, when given.

        Returns:
            An ``(entered, release)`` pair of events: ``entered`` is set
            once the call arrives, and the call proceeds after
            ``release`` is set.
        """
        gate = (threading.Event(), threading.Event())
        with self._lock:
            self._holds[(url, authorization)] = gate
        return gate

    def call(self, method, url, params=None, body=None, headers=None):
        with self._lock:
            self.calls.append(
                RequestDescriptor(
                    method=method,
                    url=url,
                    params=dict(params or {}),
                    body=body,
                    headers=dict(headers or {}),
                )
            )

        authorization = (headers or {}).get("Authorization")
        with self._lock:
            gate = self._holds.pop((url, authorization), None) or self._holds.pop(
                (url, None), None
            )
        if gate is not None:
            entered, release = gate
            entered.set()
            assert release.wait(5), f"{url} was never released"

        if url == REFRESH_URL:
            self.refresh_started.set()
            assert self.refresh_gate.wait(5), "refresh gate never opened"
            if isinstance(self.refresh_outcome, Exception):
                raise self.refresh_outcome
            return self.refresh_outcome

        if url in self.errors:
            raise self.errors[url]

        if url in self.public:
            return Response(200, {}, {"path": url, "auth": authorization})
        if authorization != f"Bearer {self.valid_token}":
            raise TransportError(
                "401 Unauthorized",
                status_code=401,
                body={"error": "token expired"},
            )
        if url in self.responses:
            return self.responses[url]
        return Response(
            200, {"X-Path": url}, {"path": url, "auth": authorization}
        )


def wait_until(predicate, timeout: float = 5.0) -> None:
    """Poll ``predicate`` until it returns true or fail the test."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            pytest.fail("condition not met in time")
        time.sleep(0.005)


class Redirects:
    """Records every URL the terminator navigates to."""

    def __init__(self):
        self.urls: list[str] = []

    def __call__(self, url: str) -> None:
        self.urls.append(url)
