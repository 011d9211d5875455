"""Bearer credentials and the request adapter that refreshes them."""

from __future__ import annotations

import re
from typing import Any, Optional, Protocol

import structlog

from config.defaults import UNAUTHORIZED_STATUS_CODE
from exceptions import CredentialsError, InvalidConfiguration
from monitoring.telemetry import audit_log

from .credential_manager import CredentialManager

logger = structlog.get_logger(__name__)

_INVALID_TOKEN_ERROR = re.compile(r'\s*error\s*=\s*"?invalid_token"?')


class Credentials(Protocol):
    """Source of OAuth2 bearer tokens."""

    def get_access_token(self) -> str:
        ...

    def refresh(self) -> None:
        ...


class StaticCredentials:
    """A fixed token; refreshing it changes nothing."""

    def __init__(self, token: str) -> None:
        if not token:
            raise InvalidConfiguration("token must not be empty")
        self.token = token

    def get_access_token(self) -> str:
        return self.token

    def refresh(self) -> None:
        logger.debug("static_credentials_refresh_skipped")


class ManagedCredentials:
    """Token looked up by name through a :class:`CredentialManager`."""

    def __init__(self, manager: CredentialManager, secret_name: str) -> None:
        self.manager = manager
        self.secret_name = secret_name
        self._token: Optional[str] = None

    def get_access_token(self) -> str:
        if self._token is None:
            self._token = self._load()
        return self._token

    def refresh(self) -> None:
        self.manager.invalidate(self.secret_name)
        self._token = self._load()
        audit_log("credentials_refreshed", name=self.secret_name)

    def _load(self) -> str:
        token = self.manager.get(self.secret_name)
        if not token:
            raise CredentialsError(f"No credential available for {self.secret_name}")
        return token


def _bearer_challenges(response: Any) -> list[str]:
    headers = getattr(response, "headers", None) or {}
    value = headers.get("WWW-Authenticate")
    if not value:
        return []
    return [c.strip() for c in str(value).split(",") if c.strip()]


class CredentialsAdapter:
    """Stamp bearer tokens on requests and refresh them when rejected.

    A response carrying a ``WWW-Authenticate: Bearer`` challenge triggers a
    refresh only when the challenge reports ``invalid_token``; without a
    bearer challenge any 401 triggers one. After a refresh the request is
    re-stamped and the adapter asks for a retry.
    """

    def __init__(self, credentials: Credentials) -> None:
        if credentials is None:
            raise InvalidConfiguration("credentials must not be None")
        self.credentials = credentials

    def initialize(self, request: Any) -> None:
        request.unsuccessful_response_handler = self
        self._stamp(request)

    def _stamp(self, request: Any) -> None:
        token = self.credentials.get_access_token()
        request.headers["Authorization"] = f"Bearer {token}"

    def _needs_refresh(self, response: Any) -> bool:
        challenges = _bearer_challenges(response)
        # "Bearer realm=..., error=..." splits into several parts; parameters
        # following a Bearer scheme belong to it.
        bearer = False
        for challenge in challenges:
            if challenge.startswith("Bearer"):
                bearer = True
                challenge = challenge[len("Bearer"):]
            elif not bearer:
                continue
            if _INVALID_TOKEN_ERROR.search(challenge):
                return True
        if bearer:
            return False
        return response.status_code == UNAUTHORIZED_STATUS_CODE

    def handle_response(self, request: Any, response: Any, supports_retry: bool) -> bool:
        if not self._needs_refresh(response):
            return False
        try:
            self.credentials.refresh()
            self._stamp(request)
        except CredentialsError as exc:
            logger.error(
                "credentials_refresh_failed",
                status_code=response.status_code,
                error=str(exc),
            )
            return False
        logger.info("credentials_refreshed", status_code=response.status_code)
        return True
