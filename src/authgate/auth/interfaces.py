"""Abstract interfaces for the credential layer.

The gateway never decides where credentials live.  It reads and writes them
through a :class:`CredentialStore` so that an in-memory dict, a JSON file,
a browser cookie jar or a keyring can be swapped in without changing the
dispatcher or the refresh coordinator.
"""

from abc import ABC, abstractmethod

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"


class CredentialStore(ABC):
    """Abstract key/value store for opaque credentials.

    Example usage::

        store = FileCredentialStore()           # concrete implementation
        tokens = TokenService(store)            # named accessors
        gateway = build_gateway(config, store)  # injected into the gateway
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under ``key``.

        Returns:
            The stored value, or ``None`` when the key is absent.
        """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key``.  Removing an absent key is a no-op."""
