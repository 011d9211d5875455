"""Retry policy utilities."""

from .backoff import STOP, ExponentialBackOff
from .handlers import (
    BackOffIOExceptionHandler,
    IOExceptionHandler,
    StatusCodeRetryHandler,
    UnsuccessfulResponseHandler,
)
from .retry_initializer import CredentialRefreshingRetryHandler, RequestRetryAdapter
from .retry_policies import RetryPolicy

__all__ = [
    "STOP",
    "ExponentialBackOff",
    "RetryPolicy",
    "UnsuccessfulResponseHandler",
    "IOExceptionHandler",
    "StatusCodeRetryHandler",
    "BackOffIOExceptionHandler",
    "CredentialRefreshingRetryHandler",
    "RequestRetryAdapter",
]
