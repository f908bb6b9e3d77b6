"""Request dispatcher: the public face of the gateway."""

import logging
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from authgate.auth.tokens import TokenService
from authgate.core.exceptions import RequestError, TransportError
from authgate.core.interfaces import Transport
from authgate.core.models import (
    AUTHORIZATION_HEADER,
    RequestDescriptor,
    Response,
    bearer,
)
from authgate.gateway.coordinator import RefreshCoordinator

logger = logging.getLogger(__name__)


class RequestDispatcher:
    """Issues requests with the stored bearer credential attached.

    A 401 is never surfaced directly: the request is handed to the
    :class:`~authgate.gateway.coordinator.RefreshCoordinator`, and the
    caller receives either the replayed response or the terminal failure.
    Every other transport failure is logged and re-raised as
    :class:`~authgate.core.exceptions.RequestError`.

    Usage::

        gateway = build_gateway(GatewayConfig.from_env(), FileCredentialStore())
        response = gateway.get("/profile", params={"expand": "teams"})
        print(response.data)
    """

    def __init__(
        self,
        transport: Transport,
        tokens: TokenService,
        coordinator: RefreshCoordinator,
    ):
        """Initialise the dispatcher.

        Args:
            transport: Transport that performs the network calls.
            tokens: Accessors for the credential pair.
            coordinator: Shared refresh coordinator for this client.
        """
        self.transport = transport
        self.tokens = tokens
        self.coordinator = coordinator

    # -------------------------
    # HTTP verbs
    # -------------------------

    def get(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        access_token: bool = True,
    ) -> Response:
        """Send a GET request.

        Args:
            path: Path relative to the API base URI, or an absolute URL.
            params: Query-string parameters.
            body: Optional JSON body.
            headers: Extra headers, merged over the authorization header.
            access_token: Whether to attach the stored access credential.

        Returns:
            The transport's :class:`Response`, unmodified.

        Raises:
            RequestError: If the request fails for a reason other than an
                expired access credential.
            SessionTerminatedError: If the credential could not be
                refreshed.
        """
        return self.request("get", path, params, body, headers, access_token)

    def post(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        access_token: bool = True,
    ) -> Response:
        """Send a POST request.  See :meth:`get` for the arguments."""
        return self.request("post", path, params, body, headers, access_token)

    def put(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        access_token: bool = True,
    ) -> Response:
        """Send a PUT request.  See :meth:`get` for the arguments."""
        return self.request("put", path, params, body, headers, access_token)

    def delete(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        access_token: bool = True,
    ) -> Response:
        """Send a DELETE request.  See :meth:`get` for the arguments."""
        return self.request(
            "delete", path, params, body, headers, access_token
        )

    def refresh_access_token(self) -> str | None:
        """Refresh the access credential without waiting for a 401.

        Returns:
            The refreshed access credential.
        """
        return self.coordinator.refresh()

    # -------------------------
    # Core
    # -------------------------

    def request(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        access_token: bool = True,
    ) -> Response:
        """Send a request with any HTTP method.  See :meth:`get`."""
        target = RequestDescriptor(
            method=method,
            url=path,
            params=dict(params or {}),
            body=body,
            headers=self._headers(headers, access_token),
        )
        try:
            return self.transport.call(
                target.method,
                target.url,
                params=target.params,
                body=target.body,
                headers=target.headers,
            )
        except TransportError as e:
            if e.status_code == HTTPStatus.UNAUTHORIZED:
                return self.coordinator.handle_auth_failure(target, e)
            logger.error("%s %s failed: %s", method.upper(), path, e)
            raise RequestError.from_transport_error(e) from e

    def _headers(
        self, extra: Mapping[str, str] | None, access_token: bool
    ) -> dict[str, str]:
        """Merge caller headers over the authorization header.

        A caller-supplied ``Authorization`` (in any letter case) replaces
        the stored credential.
        """
        extra = dict(extra or {})
        headers: dict[str, str] = {}
        caller_authorizes = any(
            name.lower() == AUTHORIZATION_HEADER.lower() for name in extra
        )
        if access_token and not caller_authorizes:
            token = self.tokens.get_access_token()
            if token:
                headers[AUTHORIZATION_HEADER] = bearer(token)
        headers.update(extra)
        return headers
