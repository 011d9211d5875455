from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests
from requests.structures import CaseInsensitiveDict

from exceptions import CredentialsError


def make_response(
    status: int,
    headers: Optional[Dict[str, str]] = None,
    content: bytes = b"",
) -> requests.Response:
    """Build a ``requests.Response`` without touching the network."""
    response = requests.Response()
    response.status_code = status
    response.reason = "OK" if status < 400 else "Error"
    response.headers = CaseInsensitiveDict(headers or {})
    response._content = content
    response._content_consumed = True
    response.url = "https://example.com"
    return response


class FakeSession:
    """Session replaying queued responses or raising queued exceptions."""

    def __init__(self, outcomes: Optional[List[Any]] = None) -> None:
        self.outcomes = list(outcomes or [])
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append(
            {
                "method": method,
                "url": url,
                "headers": dict(kwargs.get("headers") or {}),
                **{k: v for k, v in kwargs.items() if k != "headers"},
            }
        )
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def close(self) -> None:
        self.closed = True


class RecordingSleeper:
    """Sleeper that records requested waits instead of blocking."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class FakeRequest:
    """Bare object exposing the attributes an initializer configures."""

    def __init__(self) -> None:
        self.headers: Dict[str, str] = {}
        self.number_of_retries = 10
        self.unsuccessful_response_handler = None
        self.io_exception_handler = None
        self.request_id = "test"


class CountingCredentials:
    """Credentials handing out ``token-N`` where N counts refreshes."""

    def __init__(self, fail_refresh: bool = False) -> None:
        self.refreshes = 0
        self.fail_refresh = fail_refresh

    def get_access_token(self) -> str:
        return f"token-{self.refreshes}"

    def refresh(self) -> None:
        if self.fail_refresh:
            raise CredentialsError("refresh failed")
        self.refreshes += 1


class StubHandler:
    """Unsuccessful-response handler returning a fixed answer."""

    def __init__(self, answer: bool) -> None:
        self.answer = answer
        self.calls = 0

    def handle_response(self, request: Any, response: Any, supports_retry: bool) -> bool:
        self.calls += 1
        return self.answer
