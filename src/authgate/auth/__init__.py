"""Credential layer: store interface, concrete stores and token accessors."""

from authgate.auth.credentials import FileCredentialStore, MemoryCredentialStore
from authgate.auth.interfaces import CredentialStore
from authgate.auth.tokens import TokenService

__all__ = [
    "CredentialStore",
    "FileCredentialStore",
    "MemoryCredentialStore",
    "TokenService",
]
