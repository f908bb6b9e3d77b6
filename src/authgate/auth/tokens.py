"""Named accessors for the access and refresh credentials."""

from authgate.auth.interfaces import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    CredentialStore,
)
from authgate.core.models import CredentialPair


class TokenService:
    """Reads and writes the credential pair through a :class:`CredentialStore`.

    This is the only place that knows which store keys hold which
    credential.  The gateway components go through it and never touch the
    store directly.
    """

    def __init__(self, store: CredentialStore):
        """Initialise the service.

        Args:
            store: The credential store that owns the credential pair.
        """
        self.store = store

    def persist(self, access_token: str, refresh_token: str | None) -> None:
        """Store a freshly issued credential pair (e.g. after login).

        Args:
            access_token: The bearer access credential.
            refresh_token: The refresh credential, or ``None`` when the
                issuer did not provide one.
        """
        self.store.set(ACCESS_TOKEN_KEY, access_token)
        if refresh_token:
            self.store.set(REFRESH_TOKEN_KEY, refresh_token)
        else:
            self.store.remove(REFRESH_TOKEN_KEY)

    def get_access_token(self) -> str | None:
        return self.store.get(ACCESS_TOKEN_KEY)

    def set_access_token(self, access_token: str) -> None:
        self.store.set(ACCESS_TOKEN_KEY, access_token)

    def get_refresh_token(self) -> str | None:
        return self.store.get(REFRESH_TOKEN_KEY)

    def credential_pair(self) -> CredentialPair:
        """Return both credentials as a :class:`CredentialPair`."""
        return CredentialPair(
            access_token=self.get_access_token(),
            refresh_token=self.get_refresh_token(),
        )

    def clear(self) -> None:
        """Remove both credentials from the store."""
        self.store.remove(ACCESS_TOKEN_KEY)
        self.store.remove(REFRESH_TOKEN_KEY)
