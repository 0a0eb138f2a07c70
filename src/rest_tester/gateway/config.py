from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

import httpx

from .errors import ConfigurationError
from .http import header_error

BASE_URL_VAR = "REST_BASE_URL"
TIMEOUT_VAR = "REST_TIMEOUT"


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read once at startup."""

    base_url: str
    basic_username: str | None = None
    basic_password: str | None = None
    bearer_token: str | None = None
    apikey_header_name: str | None = None
    apikey_value: str | None = None
    timeout: float | None = None

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ConfigurationError(f"{BASE_URL_VAR} environment variable is required")
        # Endpoints always carry their own leading slash.
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        try:
            httpx.URL(self.base_url)
        except httpx.InvalidURL as exc:
            raise ConfigurationError(f"{BASE_URL_VAR} is not a valid URL: {exc}") from exc
        if self.bearer_token:
            self._check_header("AUTH_BEARER", "Authorization", f"Bearer {self.bearer_token}")
        if self.apikey_header_name and self.apikey_value:
            self._check_header("AUTH_APIKEY_HEADER_NAME/AUTH_APIKEY_VALUE", self.apikey_header_name, self.apikey_value)
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError(f"{TIMEOUT_VAR} must be a positive number of seconds, got {self.timeout}")

    def _check_header(self, variables: str, name: str, value: str) -> None:
        error = header_error(name, value)
        if error is not None:
            raise ConfigurationError(f"{variables}: {error}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Empty values are treated the same as unset ones, so a credential slot
        only counts as configured when it holds a non-empty string.
        """
        env = os.environ if environ is None else environ
        return cls(
            base_url=_get(env, BASE_URL_VAR) or "",
            basic_username=_get(env, "AUTH_BASIC_USERNAME"),
            basic_password=_get(env, "AUTH_BASIC_PASSWORD"),
            bearer_token=_get(env, "AUTH_BEARER"),
            apikey_header_name=_get(env, "AUTH_APIKEY_HEADER_NAME"),
            apikey_value=_get(env, "AUTH_APIKEY_VALUE"),
            timeout=_parse_timeout(_get(env, TIMEOUT_VAR)),
        )


def _get(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key)
    return value if value else None


def _parse_timeout(raw: str | None) -> float | None:
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{TIMEOUT_VAR} must be a number of seconds, got {raw!r}") from exc
