"""Composition helper that wires the gateway components together."""

from authgate.auth.credentials import MemoryCredentialStore
from authgate.auth.interfaces import CredentialStore
from authgate.auth.tokens import TokenService
from authgate.config import GatewayConfig
from authgate.core.interfaces import Transport
from authgate.gateway.coordinator import RefreshCoordinator
from authgate.gateway.dispatcher import RequestDispatcher
from authgate.gateway.terminator import Navigator, SessionTerminator
from authgate.transport.requests_transport import RequestsTransport


def build_gateway(
    config: GatewayConfig,
    store: CredentialStore | None = None,
    transport: Transport | None = None,
    navigate: Navigator | None = None,
) -> RequestDispatcher:
    """Build a dispatcher with its own coordinator and terminator.

    Each call returns an independent client: two gateways built here never
    share refresh state.

    Args:
        config: Endpoints and limits.
        store: Where the credential pair lives.  Defaults to an in-memory
            store.
        transport: HTTP transport.  Defaults to a
            :class:`RequestsTransport` on ``config.base_uri``.
        navigate: Redirect callable for the logout page.  Defaults to
            opening the system browser.

    Returns:
        A ready-to-use :class:`RequestDispatcher`.
    """
    tokens = TokenService(store or MemoryCredentialStore())
    transport = transport or RequestsTransport(
        base_url=config.base_uri, timeout=config.request_timeout
    )
    terminator = SessionTerminator(tokens, config.logout_url, navigate)
    coordinator = RefreshCoordinator(
        transport,
        tokens,
        terminator,
        refresh_url=config.refresh_url,
        client_id=config.client_id,
        wait_timeout=config.refresh_wait_timeout,
    )
    return RequestDispatcher(transport, tokens, coordinator)
