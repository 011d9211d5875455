"""Minimal request/factory pair that drives the retry handlers."""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, Tuple

import requests
import structlog

from core.resilience.handlers import IOExceptionHandler, UnsuccessfulResponseHandler
from exceptions import HttpResponseError
from monitoring.telemetry import generate_request_id

logger = structlog.get_logger(__name__)


class RequestInitializer(Protocol):
    """Hook run on every request a factory builds."""

    def initialize(self, request: "HttpRequest") -> None:
        ...


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 300


def _seconds(millis: int) -> Optional[float]:
    return millis / 1000.0 if millis > 0 else None


class HttpRequest:
    """A single logical request, possibly sent over several attempts.

    ``number_of_retries`` is the retry budget. The failure handlers are
    looked up again after every failed attempt, so whatever an initializer
    installs stays in force for the life of the request.
    """

    def __init__(
        self,
        method: str,
        url: str,
        *,
        session: Optional[requests.Session] = None,
        headers: Optional[Dict[str, str]] = None,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.method = method.upper()
        self.url = url
        # A session created here is closed once execute() finishes.
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.headers: Dict[str, str] = dict(headers or {})
        self.json = json
        self.params = params

        self.connect_timeout_millis = 0
        self.read_timeout_millis = 0
        self.number_of_retries = 0
        self.unsuccessful_response_handler: Optional[UnsuccessfulResponseHandler] = None
        self.io_exception_handler: Optional[IOExceptionHandler] = None
        self.request_id = generate_request_id()

    @property
    def timeout(self) -> Optional[Tuple[Optional[float], Optional[float]]]:
        connect = _seconds(self.connect_timeout_millis)
        read = _seconds(self.read_timeout_millis)
        if connect is None and read is None:
            return None
        return (connect, read)

    def _send(self) -> requests.Response:
        return self.session.request(
            self.method,
            self.url,
            headers=self.headers,
            json=self.json,
            params=self.params,
            timeout=self.timeout,
        )

    def execute(self) -> requests.Response:
        """Send the request, retrying as the installed handlers decide.

        Returns the first 2xx response. Raises :class:`HttpResponseError`
        for the last unsuccessful response and re-raises the last
        connection error unchanged once no retry is granted.
        """
        try:
            return self._execute_attempts()
        finally:
            if self._owns_session:
                self.session.close()

    def _execute_attempts(self) -> requests.Response:
        retries_remaining = self.number_of_retries
        with structlog.contextvars.bound_contextvars(
            request_id=self.request_id, method=self.method, url=self.url
        ):
            while True:
                supports_retry = retries_remaining > 0
                try:
                    response = self._send()
                except (requests.ConnectionError, requests.Timeout) as exc:
                    handler = self.io_exception_handler
                    if handler is None or not handler.handle_io_exception(self, supports_retry):
                        logger.warning("request_failed", error=str(exc))
                        raise
                    retries_remaining -= 1
                    logger.info(
                        "request_retry",
                        reason="io_error",
                        retries_remaining=retries_remaining,
                    )
                    continue

                if _is_success(response.status_code):
                    return response

                handler = self.unsuccessful_response_handler
                retry = handler is not None and handler.handle_response(
                    self, response, supports_retry
                )
                if retry and supports_retry:
                    retries_remaining -= 1
                    logger.info(
                        "request_retry",
                        reason="status",
                        status_code=response.status_code,
                        retries_remaining=retries_remaining,
                    )
                    response.close()
                    continue

                logger.warning("request_unsuccessful", status_code=response.status_code)
                raise HttpResponseError(response)


class HttpRequestFactory:
    """Build requests that share a session and an initializer."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        initializer: Optional[RequestInitializer] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.initializer = initializer

    def build_request(self, method: str, url: str, **kwargs: Any) -> HttpRequest:
        request = HttpRequest(method, url, session=self.session, **kwargs)
        if self.initializer is not None:
            self.initializer.initialize(request)
        return request

    def build_get_request(self, url: str, **kwargs: Any) -> HttpRequest:
        return self.build_request("GET", url, **kwargs)

    def build_post_request(self, url: str, json: Any = None, **kwargs: Any) -> HttpRequest:
        return self.build_request("POST", url, json=json, **kwargs)

    def build_delete_request(self, url: str, **kwargs: Any) -> HttpRequest:
        return self.build_request("DELETE", url, **kwargs)
