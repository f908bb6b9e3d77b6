"""Session termination: the terminal action when a refresh cannot succeed."""

import logging
import threading
import webbrowser
from collections.abc import Callable

from authgate.auth.tokens import TokenService

logger = logging.getLogger(__name__)

Navigator = Callable[[str], object]
"""Directs the client to a URL (a browser, a UI router, a test recorder)."""


class SessionTerminator:
    """Clears the credential pair and sends the client to the logout page.

    Terminating is idempotent: when no credentials are stored the store is
    left as-is, but the redirect still happens.
    """

    def __init__(
        self,
        tokens: TokenService,
        logout_url: str,
        navigate: Navigator | None = None,
    ):
        """Initialise the terminator.

        Args:
            tokens: Accessors for the credential pair to clear.
            logout_url: Absolute URL of the external logout endpoint.
            navigate: Callable that directs the client to a URL.  Defaults
                to :func:`webbrowser.open`.
        """
        self._tokens = tokens
        self._logout_url = logout_url
        self._navigate = navigate or webbrowser.open
        self._count = 0
        self._count_lock = threading.Lock()

    @property
    def logout_url(self) -> str:
        return self._logout_url

    @property
    def terminations(self) -> int:
        """Number of times :meth:`terminate` has run."""
        with self._count_lock:
            return self._count

    def terminate(self) -> None:
        """Clear both credentials, then redirect to the logout endpoint."""
        self._tokens.clear()
        with self._count_lock:
            self._count += 1
        logger.info("Logging out")
        self._navigate(self._logout_url)
