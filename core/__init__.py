"""Retry and credential handling for outbound requests."""

from .resilience import RequestRetryAdapter, RetryPolicy
from .security import CredentialsAdapter

__all__ = [
    "CredentialsAdapter",
    "RequestRetryAdapter",
    "RetryPolicy",
]
