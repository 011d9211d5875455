"""Install a retry policy onto individual outbound requests."""

from __future__ import annotations

from typing import Any, Optional

import structlog

from exceptions import InvalidConfiguration

from .handlers import (
    BackOffIOExceptionHandler,
    StatusCodeRetryHandler,
    UnsuccessfulResponseHandler,
)
from .retry_policies import RetryPolicy

logger = structlog.get_logger(__name__)


class CredentialRefreshingRetryHandler:
    """Chain credential refresh ahead of status-code based retry.

    The credentials handler always runs first. When it asks for a retry the
    status codes are not looked at, so an expired token is refreshed before
    any backoff is spent. The request keeps a reference to this handler and
    consults it again on every failed attempt.
    """

    def __init__(
        self,
        credentials: UnsuccessfulResponseHandler,
        retry_handler: UnsuccessfulResponseHandler,
    ) -> None:
        self.credentials = credentials
        self.retry_handler = retry_handler

    def handle_response(self, request: Any, response: Any, supports_retry: bool) -> bool:
        if self.credentials.handle_response(request, response, supports_retry):
            logger.info("retry_after_credentials_refresh", status_code=response.status_code)
            return True
        retry = self.retry_handler.handle_response(request, response, supports_retry)
        if retry:
            logger.info("retry_attempt", status_code=response.status_code)
        else:
            logger.debug("retry_declined", status_code=response.status_code)
        return retry


class RequestRetryAdapter:
    """Configure a request's retry budget and failure handlers.

    Without a policy the request gets no retry budget and no I/O handler;
    the credentials handler is still installed so token refresh keeps
    working.
    """

    def __init__(
        self,
        credentials: UnsuccessfulResponseHandler,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> None:
        if credentials is None:
            raise InvalidConfiguration("credentials handler must not be None")
        self.credentials = credentials
        self.retry_policy = retry_policy

    def initialize(self, request: Any) -> None:
        policy = self.retry_policy
        if policy is None:
            request.number_of_retries = 0
            request.io_exception_handler = None
            request.unsuccessful_response_handler = self.credentials
            return

        request.number_of_retries = policy.max_retries
        request.unsuccessful_response_handler = self.new_unsuccessful_response_handler()
        request.io_exception_handler = BackOffIOExceptionHandler(
            policy.new_backoff(), policy.sleeper
        )

    def new_unsuccessful_response_handler(self) -> CredentialRefreshingRetryHandler:
        return CredentialRefreshingRetryHandler(
            self.credentials, StatusCodeRetryHandler(self.retry_policy)
        )
