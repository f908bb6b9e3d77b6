"""Single-flight refresh of the access credential.

When a request fails with HTTP 401 the dispatcher hands it to the
:class:`RefreshCoordinator`.  The first failure starts a refresh; failures
that arrive while that refresh is in flight are queued and block their own
thread until it resolves.  On success every failed request is replayed once
with the new credential, first the one that triggered the refresh and then
the queued ones in arrival order.  On failure the session is terminated and
every queued request fails with the same :class:`RefreshError`.

State machine::

    IDLE       --401, no refresh credential-->  terminate, stay IDLE
    IDLE       --401, refresh credential---->  REFRESHING
    IDLE       --401, token already replaced->  replay, stay IDLE
    REFRESHING --401------------------------>  REFRESHING (enqueue)
    REFRESHING --refresh ok----------------->  IDLE (replay all)
    REFRESHING --refresh failed------------->  IDLE (terminate, fail all)

A refresh that completes after the session was terminated does not store
its credential; it fails like a rejected refresh.
"""

import logging
import threading
from collections import deque
from collections.abc import Callable
from concurrent.futures import TimeoutError as FutureTimeoutError

from authgate.auth.tokens import TokenService
from authgate.core.exceptions import (
    MissingRefreshCredentialError,
    RefreshError,
    RefreshTimeoutError,
    RequestError,
    TransportError,
)
from authgate.core.interfaces import Transport
from authgate.core.models import (
    AUTHORIZATION_HEADER,
    PendingCall,
    RefreshState,
    RequestDescriptor,
    Response,
    bearer,
)
from authgate.gateway.terminator import SessionTerminator

logger = logging.getLogger(__name__)


class RefreshCoordinator:
    """Owns the refresh-in-flight flag and the queue of waiting requests.

    One instance is shared by every request issued through the same
    gateway, for the lifetime of the client.  Independent gateways in one
    process each get their own coordinator.

    The lock guards the flag and the queue together, so two concurrent
    401s can never both see the coordinator idle.  It is never held across
    a network call.
    """

    def __init__(
        self,
        transport: Transport,
        tokens: TokenService,
        terminator: SessionTerminator,
        refresh_url: str,
        client_id: str = "",
        wait_timeout: float | None = 60.0,
    ):
        """Initialise the coordinator.

        Args:
            transport: Transport used for the refresh call and for replays.
            tokens: Accessors for the credential pair.
            terminator: Invoked when the refresh cannot succeed.
            refresh_url: Absolute URL of the refresh endpoint.
            client_id: Client identifier sent with the refresh credential.
            wait_timeout: Seconds a queued request waits for the in-flight
                refresh before raising :class:`RefreshTimeoutError`.
                ``None`` waits indefinitely.
        """
        self._transport = transport
        self._tokens = tokens
        self._terminator = terminator
        self._refresh_url = refresh_url
        self._client_id = client_id
        self._wait_timeout = wait_timeout

        self._lock = threading.Lock()
        self._in_flight = False
        self._waiters: deque[PendingCall] = deque()

    # -------------------------
    # Introspection
    # -------------------------

    @property
    def refresh_url(self) -> str:
        return self._refresh_url

    @property
    def terminator(self) -> SessionTerminator:
        return self._terminator

    @property
    def refresh_in_flight(self) -> bool:
        with self._lock:
            return self._in_flight

    @property
    def state(self) -> RefreshState:
        """Return :attr:`RefreshState.REFRESHING` while a refresh is in flight."""
        if self.refresh_in_flight:
            return RefreshState.REFRESHING
        return RefreshState.IDLE

    @property
    def pending_count(self) -> int:
        """Number of requests currently queued behind the in-flight refresh."""
        with self._lock:
            return len(self._waiters)

    # -------------------------
    # Public operations
    # -------------------------

    def handle_auth_failure(
        self, target: RequestDescriptor, error: TransportError
    ) -> Response:
        """Recover a request that failed with HTTP 401.

        Args:
            target: The request that was rejected.
            error: The 401 failure reported by the transport.

        Returns:
            The response of the request replayed with the refreshed
            access credential.

        Raises:
            RefreshError: If the refresh call failed, or if ``target`` was
                the refresh endpoint itself.  The session is terminated.
            MissingRefreshCredentialError: If no refresh credential is
                stored.  The session is terminated.
            RefreshTimeoutError: If the request was queued and the
                in-flight refresh did not resolve in time.
            RequestError: If the replayed request itself fails.
        """
        if target.url == self._refresh_url:
            logger.error("Refresh endpoint rejected the request: %s", error)
            self._terminator.terminate()
            message = str(RequestError.from_transport_error(error))
            raise RefreshError(message) from error
        return self._run(target, error)

    def refresh(self) -> str | None:
        """Refresh the access credential now.

        Joins the refresh already in flight, if any, instead of starting a
        second one.

        Returns:
            The access credential held by the store once the refresh has
            resolved.

        Raises:
            RefreshError: If the refresh call failed.
            MissingRefreshCredentialError: If no refresh credential is
                stored.
            RefreshTimeoutError: If joining an in-flight refresh timed out.
        """
        self._run(None, None)
        return self._tokens.get_access_token()

    # -------------------------
    # Internal helpers
    # -------------------------

    def _run(
        self,
        target: RequestDescriptor | None,
        error: TransportError | None,
    ) -> Response | None:
        pending = None
        refresh_token = None
        current = None
        generation = 0
        with self._lock:
            if self._in_flight:
                pending = PendingCall(target=target)
                self._waiters.append(pending)
                logger.debug(
                    "Refresh in flight; queued request (%d waiting)",
                    len(self._waiters),
                )
            else:
                current = self._tokens.get_access_token()
                if target is None or not _sent_stale_bearer(target, current):
                    current = None
                    refresh_token = self._tokens.get_refresh_token()
                    if refresh_token:
                        self._in_flight = True
                        generation = self._terminator.terminations

        if pending is not None:
            return self._wait(pending)

        if current is not None:
            # Rejected token was replaced by a refresh that already finished.
            logger.debug("Access credential already refreshed; replaying")
            return self._replay(target.with_bearer(current))

        if not refresh_token:
            logger.info("No refresh credential stored")
            self._terminator.terminate()
            raise MissingRefreshCredentialError(
                "Access credential expired and no refresh credential is "
                "available."
            ) from error

        return self._refresh_and_replay(refresh_token, target, generation)

    def _refresh_and_replay(
        self,
        refresh_token: str,
        target: RequestDescriptor | None,
        generation: int,
    ) -> Response | None:
        logger.info("Refreshing access credential")
        try:
            access_token = self._request_access_token(refresh_token)
            with self._lock:
                if self._terminator.terminations != generation:
                    raise RefreshError(
                        "Session was terminated while the access credential "
                        "was being refreshed."
                    )
                self._tokens.set_access_token(access_token)
        except Exception as e:
            failure = (
                e
                if isinstance(e, RefreshError)
                else RefreshError(f"Access credential refresh failed: {e}")
            )
            logger.error("Access credential refresh failed: %s", failure)
            try:
                if self._terminator.terminations == generation:
                    self._terminator.terminate()
            finally:
                self._release(
                    lambda pending: pending.result.set_exception(failure)
                )
            if failure is e:
                raise
            raise failure from e

        logger.info("Access credential refreshed")
        try:
            if target is None:
                return None
            return self._replay(target.with_bearer(access_token))
        finally:
            self._release(
                lambda pending: self._deliver(pending, access_token)
            )

    def _request_access_token(self, refresh_token: str) -> str:
        """Call the refresh endpoint and return the new access credential.

        Raises:
            RefreshError: On any transport failure, or when the response
                carries no access credential.
        """
        try:
            response = self._transport.call(
                "post",
                self._refresh_url,
                body={
                    "refreshToken": refresh_token,
                    "clientId": self._client_id,
                },
            )
        except TransportError as e:
            message = str(RequestError.from_transport_error(e))
            raise RefreshError(message) from e

        data = response.data
        access_token = data.get("accessToken") if isinstance(data, dict) else None
        if not access_token:
            raise RefreshError(
                "Refresh response did not include an access credential."
            )
        return access_token

    def _replay(self, target: RequestDescriptor) -> Response:
        """Issue ``target`` once more, without any further refresh attempt."""
        try:
            return self._transport.call(
                target.method,
                target.url,
                params=target.params,
                body=target.body,
                headers=target.headers,
            )
        except TransportError as e:
            logger.error(
                "Replayed %s %s failed: %s", target.method.upper(), target.url, e
            )
            raise RequestError.from_transport_error(e) from e

    def _deliver(self, pending: PendingCall, access_token: str) -> None:
        """Replay a queued request and hand the outcome to its waiter."""
        if pending.target is None:
            pending.result.set_result(None)
            return
        try:
            response = self._replay(pending.target.with_bearer(access_token))
        except Exception as e:
            pending.result.set_exception(e)
        else:
            pending.result.set_result(response)

    def _release(self, resolve: Callable[[PendingCall], None]) -> None:
        """Resolve queued requests in FIFO order, then return to IDLE.

        Requests queued while earlier ones are being resolved are drained
        too; the flag is cleared only once the queue is seen empty under
        the lock.
        """
        while True:
            with self._lock:
                if not self._waiters:
                    self._in_flight = False
                    return
                pending = self._waiters.popleft()
            resolve(pending)

    def _wait(self, pending: PendingCall) -> Response | None:
        """Block the calling thread until ``pending`` is resolved."""
        try:
            return pending.result.result(timeout=self._wait_timeout)
        except FutureTimeoutError:
            with self._lock:
                abandoned = pending in self._waiters
                if abandoned:
                    self._waiters.remove(pending)
            if abandoned:
                raise RefreshTimeoutError(
                    f"Gave up after {self._wait_timeout}s waiting for the "
                    "access credential refresh."
                ) from None
        # Already taken off the queue for replay; its outcome is imminent.
        return pending.result.result()


def _sent_stale_bearer(target: RequestDescriptor, current: str | None) -> bool:
    """Return ``True`` if ``target`` carried a bearer other than ``current``."""
    if not current:
        return False
    sent = next(
        (
            value
            for name, value in target.headers.items()
            if name.lower() == AUTHORIZATION_HEADER.lower()
        ),
        None,
    )
    if sent is None or not sent.startswith("Bearer "):
        return False
    return sent != bearer(current)
