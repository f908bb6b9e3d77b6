"""Transport implementation backed by a ``requests.Session``."""

from collections.abc import Mapping
from typing import Any

import requests

from authgate.core.exceptions import TransportError
from authgate.core.interfaces import Transport
from authgate.core.models import Response


class RequestsTransport(Transport):
    """HTTP transport over a single shared :class:`requests.Session`.

    Relative URLs are joined onto ``base_url``; absolute URLs (such as the
    refresh endpoint on a separate authorization server) are used as-is.
    Request bodies are sent as JSON.

    ``requests.Session`` is safe to use from several threads for plain
    request/response traffic, which is all the gateway does with it.
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float | None = 30.0,
        session: requests.Session | None = None,
    ):
        """Initialise the transport.

        Args:
            base_url: Base URI prepended to relative request paths.
            timeout: Per-request timeout in seconds, or ``None`` for none.
            session: An optional pre-configured session.  A new one is
                created when omitted.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def call(
        self,
        method: str,
        url: str,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        """Perform one HTTP request.

        Raises:
            TransportError: On a non-2xx status or a network failure.
        """
        try:
            r = self.session.request(
                method.upper(),
                self._absolute(url),
                params=dict(params or {}),
                json=body,
                headers=dict(headers or {}),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(str(e)) from e

        data = _decode(r)
        if not r.ok:
            raise TransportError(
                f"{r.status_code} {r.reason} for {method.upper()} {r.url}",
                status_code=r.status_code,
                body=data,
            )
        return Response(
            status_code=r.status_code,
            headers=dict(r.headers),
            data=data,
        )

    def _absolute(self, url: str) -> str:
        if url.startswith(("http://", "https://")) or not self.base_url:
            return url
        return f"{self.base_url}/{url.lstrip('/')}"


def _decode(r: requests.Response) -> Any:
    """Return the JSON body of ``r``, its text if not JSON, or ``None``."""
    if not r.content:
        return None
    try:
        return r.json()
    except ValueError:
        return r.text
