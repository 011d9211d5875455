"""Per-request setup shared by every request a client sends."""

from __future__ import annotations

from typing import Optional, Union

import structlog

from config.defaults import (
    CLIENT_MAX_INTERVAL_MILLIS,
    CLIENT_MAX_RETRIES,
    CLIENT_RETRY_STATUS_CODES,
)
from config.settings import Settings
from core.resilience import RequestRetryAdapter, RetryPolicy
from core.security import Credentials, CredentialsAdapter
from exceptions import InvalidConfiguration

from .http_request import HttpRequest

logger = structlog.get_logger(__name__)


class _DefaultPolicy:
    def __repr__(self) -> str:
        return "DEFAULT_RETRY_POLICY"


DEFAULT_RETRY_POLICY = _DefaultPolicy()


def default_retry_policy() -> RetryPolicy:
    """Policy used when a client does not configure one."""
    return RetryPolicy(
        retry_status_codes=frozenset(CLIENT_RETRY_STATUS_CODES),
        max_retries=CLIENT_MAX_RETRIES,
        max_interval_millis=CLIENT_MAX_INTERVAL_MILLIS,
    )


class ClientRequestInitializer:
    """Apply credentials, timeouts and the retry policy to a request.

    Pass ``retry_policy=None`` to turn retries off; credential refresh
    stays installed either way.
    """

    def __init__(
        self,
        credentials: Credentials,
        retry_policy: Union[RetryPolicy, None, _DefaultPolicy] = DEFAULT_RETRY_POLICY,
        *,
        connect_timeout_millis: int = 0,
        read_timeout_millis: int = 0,
    ) -> None:
        if connect_timeout_millis < 0 or read_timeout_millis < 0:
            raise InvalidConfiguration("Timeouts must not be negative")
        if retry_policy is DEFAULT_RETRY_POLICY:
            retry_policy = default_retry_policy()

        self.credentials = CredentialsAdapter(credentials)
        self.retry_policy: Optional[RetryPolicy] = retry_policy
        self.retry = RequestRetryAdapter(self.credentials, retry_policy)
        self.connect_timeout_millis = connect_timeout_millis
        self.read_timeout_millis = read_timeout_millis

    @classmethod
    def from_settings(
        cls, credentials: Credentials, settings: Settings
    ) -> "ClientRequestInitializer":
        return cls(
            credentials,
            RetryPolicy.from_settings(settings),
            connect_timeout_millis=settings.connect_timeout_millis,
            read_timeout_millis=settings.read_timeout_millis,
        )

    def initialize(self, request: HttpRequest) -> None:
        self.credentials.initialize(request)
        request.connect_timeout_millis = self.connect_timeout_millis
        request.read_timeout_millis = self.read_timeout_millis
        self.retry.initialize(request)
        logger.debug(
            "request_initialized",
            request_id=request.request_id,
            max_retries=request.number_of_retries,
        )
