import pytest

from authgate.auth.credentials import MemoryCredentialStore
from authgate.auth.interfaces import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY
from authgate.auth.tokens import TokenService
from authgate.config import GatewayConfig
from authgate.gateway.factory import build_gateway
from helpers import AUTH_URI, CLIENT_ID, FakeTransport, Redirects


@pytest.fixture()
def config():
    return GatewayConfig(
        base_uri="https://api.example.com",
        auth_uri=AUTH_URI,
        client_id=CLIENT_ID,
        refresh_wait_timeout=5.0,
    )


@pytest.fixture()
def store():
    return MemoryCredentialStore(
        {ACCESS_TOKEN_KEY: "A1", REFRESH_TOKEN_KEY: "R1"}
    )


@pytest.fixture()
def tokens(store):
    return TokenService(store)


@pytest.fixture()
def transport():
    return FakeTransport()


@pytest.fixture()
def redirects():
    return Redirects()


@pytest.fixture()
def gateway(config, store, transport, redirects):
    return build_gateway(config, store, transport=transport, navigate=redirects)
