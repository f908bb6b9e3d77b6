"""Gateway configuration.

Values are resolved from constructor arguments or, through
:meth:`GatewayConfig.from_env`, from ``AUTHGATE_*`` environment variables.
"""

import os
from dataclasses import dataclass

from authgate.core.exceptions import ConfigError

_ENV_BASE_URI = "AUTHGATE_API_BASE_URI"
_ENV_AUTH_URI = "AUTHGATE_AUTH_URI"
_ENV_CLIENT_ID = "AUTHGATE_AUTH_CLIENT_ID"
_ENV_TOKEN_PATH = "AUTHGATE_TOKEN_PATH"
_ENV_LOGOUT_PATH = "AUTHGATE_LOGOUT_PATH"
_ENV_REQUEST_TIMEOUT = "AUTHGATE_REQUEST_TIMEOUT"
_ENV_REFRESH_WAIT_TIMEOUT = "AUTHGATE_REFRESH_WAIT_TIMEOUT"

DEFAULT_TOKEN_PATH = "/token"
DEFAULT_LOGOUT_PATH = "/logout"
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_REFRESH_WAIT_TIMEOUT = 60.0


@dataclass(frozen=True)
class GatewayConfig:
    """Endpoints and limits for one gateway instance.

    Attributes:
        base_uri: Base URI prepended to relative request paths.
        auth_uri: Base URI of the authorization server.
        client_id: Client identifier sent with every refresh call.
        token_path: Path of the refresh endpoint under ``auth_uri``.
        logout_path: Path of the logout page under ``auth_uri``.
        request_timeout: Per-request network timeout, in seconds.
        refresh_wait_timeout: How long a queued request waits for an
            in-flight refresh before giving up.  ``None`` waits forever.
    """

    base_uri: str
    auth_uri: str
    client_id: str = ""
    token_path: str = DEFAULT_TOKEN_PATH
    logout_path: str = DEFAULT_LOGOUT_PATH
    request_timeout: float | None = DEFAULT_REQUEST_TIMEOUT
    refresh_wait_timeout: float | None = DEFAULT_REFRESH_WAIT_TIMEOUT

    @property
    def refresh_url(self) -> str:
        return f"{self.auth_uri}{self.token_path}"

    @property
    def logout_url(self) -> str:
        return f"{self.auth_uri}{self.logout_path}"

    @classmethod
    def from_env(cls, **overrides) -> "GatewayConfig":
        """Build a configuration from ``AUTHGATE_*`` environment variables.

        Keyword arguments take precedence over the environment.

        Args:
            **overrides: Field values that replace the environment ones.

        Returns:
            A :class:`GatewayConfig` instance.

        Raises:
            ConfigError: If a timeout variable is not a number.
        """
        values = {
            "base_uri": os.getenv(_ENV_BASE_URI, ""),
            "auth_uri": os.getenv(_ENV_AUTH_URI, ""),
            "client_id": os.getenv(_ENV_CLIENT_ID, ""),
            "token_path": os.getenv(_ENV_TOKEN_PATH, DEFAULT_TOKEN_PATH),
            "logout_path": os.getenv(_ENV_LOGOUT_PATH, DEFAULT_LOGOUT_PATH),
            "request_timeout": _env_seconds(
                _ENV_REQUEST_TIMEOUT, DEFAULT_REQUEST_TIMEOUT
            ),
            "refresh_wait_timeout": _env_seconds(
                _ENV_REFRESH_WAIT_TIMEOUT, DEFAULT_REFRESH_WAIT_TIMEOUT
            ),
        }
        values.update(overrides)
        return cls(**values)


def _env_seconds(name: str, default: float) -> float | None:
    """Parse a duration in seconds from the environment.

    An empty value keeps the default; ``"none"`` (any case) or ``"0"``
    disables the limit.
    """
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    if raw.lower() == "none":
        return None
    try:
        seconds = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number of seconds, got {raw!r}")
    return seconds if seconds > 0 else None
