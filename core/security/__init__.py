"""Credential utilities."""

from .credential_manager import CredentialManager, SecretsBackend
from .credentials import (
    Credentials,
    CredentialsAdapter,
    ManagedCredentials,
    StaticCredentials,
)

__all__ = [
    "CredentialManager",
    "SecretsBackend",
    "Credentials",
    "CredentialsAdapter",
    "ManagedCredentials",
    "StaticCredentials",
]
