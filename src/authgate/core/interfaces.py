"""Abstract interface for the HTTP transport used by the gateway."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from authgate.core.models import Response


class Transport(ABC):
    """Abstract base class for HTTP transports.

    The dispatcher and the refresh coordinator depend exclusively on this
    abstraction, never on a concrete HTTP library.  Concrete transports are
    chosen at the composition root and injected.
    """

    @abstractmethod
    def call(
        self,
        method: str,
        url: str,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        """Perform one HTTP request.

        Args:
            method: HTTP method, e.g. ``"get"`` or ``"post"``.
            url: Path relative to the transport's base URI, or an absolute
                URL.
            params: Query-string parameters.
            body: A JSON-serialisable request body, or ``None``.
            headers: Request headers.

        Returns:
            A :class:`Response` for any 2xx status.

        Raises:
            TransportError: For non-2xx statuses (with ``status_code`` set)
                and for network-level failures (``status_code`` is
                ``None``).
        """
