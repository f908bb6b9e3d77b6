"""Dispatcher, refresh coordinator and session terminator."""

from authgate.gateway.coordinator import RefreshCoordinator
from authgate.gateway.dispatcher import RequestDispatcher
from authgate.gateway.factory import build_gateway
from authgate.gateway.terminator import SessionTerminator

__all__ = [
    "RefreshCoordinator",
    "RequestDispatcher",
    "SessionTerminator",
    "build_gateway",
]
