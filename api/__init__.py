"""HTTP request helpers."""

from .http_request import HttpRequest, HttpRequestFactory, RequestInitializer
from .request_initializer import (
    DEFAULT_RETRY_POLICY,
    ClientRequestInitializer,
    default_retry_policy,
)

__all__ = [
    "HttpRequest",
    "HttpRequestFactory",
    "RequestInitializer",
    "ClientRequestInitializer",
    "DEFAULT_RETRY_POLICY",
    "default_retry_policy",
]
