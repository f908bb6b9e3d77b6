"""Domain exceptions for the authgate library."""


class AuthgateError(Exception):
    """Base class for all authgate library exceptions."""


class ConfigError(AuthgateError):
    """Raised when gateway configuration values cannot be parsed."""


class TransportError(AuthgateError):
    """Raised by a :class:`~authgate.core.interfaces.Transport` on failure.

    Attributes:
        status_code: The HTTP status of the response, or ``None`` when the
            request never produced one (DNS failure, timeout, refused
            connection).
        body: The decoded response body, when one was received.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: object = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class RequestError(AuthgateError):
    """Generic request failure surfaced to the caller of the dispatcher.

    The message is the server-provided ``error`` field when the response
    body carries one, otherwise the transport's own description.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: object = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_transport_error(cls, error: TransportError) -> "RequestError":
        """Build a request failure from a transport failure.

        Args:
            error: The failure reported by the transport.

        Returns:
            A :class:`RequestError` with the server's ``error`` message when
            available.
        """
        message = str(error)
        if isinstance(error.body, dict) and error.body.get("error"):
            message = str(error.body["error"])
        return cls(message, status_code=error.status_code, body=error.body)


class SessionTerminatedError(AuthgateError):
    """Raised when the session has been terminated and the call cannot succeed.

    The credentials have already been cleared and the client redirected to
    the logout endpoint by the time this exception reaches the caller.
    The caller is responsible for guiding the user through a new login.
    """


class RefreshError(SessionTerminatedError):
    """Raised when the refresh endpoint rejects or fails the refresh call.

    Every request waiting on the same refresh receives this exception
    rather than its own original 401.
    """


class MissingRefreshCredentialError(SessionTerminatedError):
    """Raised when a 401 arrives and no refresh credential is stored."""


class RefreshTimeoutError(AuthgateError):
    """Raised when a queued request gave up waiting for an in-flight refresh."""
