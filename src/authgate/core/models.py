"""Data model dataclasses shared across the gateway."""

from collections.abc import Mapping
from concurrent.futures import Future
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

AUTHORIZATION_HEADER = "Authorization"


def bearer(token: str | None) -> str:
    """Return the ``Authorization`` header value for a bearer token."""
    return f"Bearer {token}"


# ----------------------
# Credentials
# ----------------------


@dataclass(frozen=True)
class CredentialPair:
    """An access credential and the refresh credential that renews it."""

    access_token: str | None
    refresh_token: str | None = None


# ----------------------
# Requests and responses
# ----------------------


@dataclass(frozen=True)
class RequestDescriptor:
    """Everything needed to (re)issue a request through a transport."""

    method: str
    url: str
    """Path relative to the API base URI, or an absolute URL."""

    params: Mapping[str, Any] = field(default_factory=dict)
    body: Any = None
    headers: Mapping[str, str] = field(default_factory=dict)

    def with_bearer(self, token: str) -> "RequestDescriptor":
        """Return a copy whose ``Authorization`` header carries ``token``.

        Args:
            token: The access credential to attach.

        Returns:
            A new :class:`RequestDescriptor`; the receiver is left untouched.
        """
        headers = {
            name: value
            for name, value in self.headers.items()
            if name.lower() != AUTHORIZATION_HEADER.lower()
        }
        headers[AUTHORIZATION_HEADER] = bearer(token)
        return replace(self, headers=headers)


@dataclass
class Response:
    """A successful HTTP response as returned by a transport."""

    status_code: int
    headers: Mapping[str, str] = field(default_factory=dict)
    data: Any = None
    """Decoded JSON body, or the raw text when the body is not JSON."""


# ----------------------
# Refresh coordination
# ----------------------


class RefreshState(str, Enum):
    """States of the refresh coordinator."""

    IDLE = "idle"
    REFRESHING = "refreshing"


@dataclass(eq=False)
class PendingCall:
    """A request that failed with 401 while a refresh was in flight.

    ``result`` is resolved exactly once: with the replayed response, or
    with the exception that ended the wait.
    """

    target: RequestDescriptor | None
    """``None`` for an explicit refresh that has no request to replay."""

    result: Future = field(default_factory=Future)
