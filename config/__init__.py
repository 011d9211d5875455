"""Environment-aware settings for the HTTP client SDK."""

from __future__ import annotations

from pydantic import ValidationError

from exceptions import InvalidConfiguration

from .settings import Settings
from . import defaults


def get_settings(**overrides) -> Settings:
    """Return settings read from the environment and ``.env``."""

    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise InvalidConfiguration(str(exc)) from exc


__all__ = [
    "Settings",
    "defaults",
    "get_settings",
]
