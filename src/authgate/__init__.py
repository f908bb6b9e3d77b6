"""Bearer-credential HTTP gateway with single-flight refresh."""

from authgate.config import GatewayConfig
from authgate.gateway.factory import build_gateway

__all__ = ["GatewayConfig", "build_gateway"]
