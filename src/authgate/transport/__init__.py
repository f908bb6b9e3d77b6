"""HTTP transport implementations."""

from authgate.transport.requests_transport import RequestsTransport

__all__ = ["RequestsTransport"]
