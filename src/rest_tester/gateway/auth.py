"""Authentication mode selection.

Exactly one credential scheme is active for the lifetime of the process.
Precedence is fixed: Basic > Bearer > API key > none. A scheme is only
considered when every value it needs is configured; lower-precedence
credentials are ignored when a higher one is complete.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import ClassVar, Union

from ..logger import get_logger
from .config import Settings

_log = get_logger("rest_tester.gateway.auth")

AUTHORIZATION = "Authorization"


@dataclass(frozen=True)
class NoAuth:
    name: ClassVar[str] = "none"

    def header(self) -> tuple[str, str] | None:
        return None

    def describe(self) -> str:
        return "No authentication configured"


@dataclass(frozen=True)
class BasicAuth:
    name: ClassVar[str] = "basic"

    username: str
    password: str = field(repr=False)

    def header(self) -> tuple[str, str] | None:
        credentials = base64.b64encode(f"{self.username}:{self.password}".encode()).decode("ascii")
        return AUTHORIZATION, f"Basic {credentials}"

    def describe(self) -> str:
        return f"Basic Auth with username: {self.username}"


@dataclass(frozen=True)
class BearerAuth:
    name: ClassVar[str] = "bearer"

    token: str = field(repr=False)

    def header(self) -> tuple[str, str] | None:
        return AUTHORIZATION, f"Bearer {self.token}"

    def describe(self) -> str:
        return "Bearer token authentication configured"


@dataclass(frozen=True)
class ApiKeyAuth:
    name: ClassVar[str] = "apikey"

    header_name: str
    value: str = field(repr=False)

    def header(self) -> tuple[str, str] | None:
        return self.header_name, self.value

    def describe(self) -> str:
        return f"API Key using header: {self.header_name}"


AuthMode = Union[NoAuth, BasicAuth, BearerAuth, ApiKeyAuth]


def select_auth_mode(settings: Settings) -> AuthMode:
    """Pick the single active authentication mode from configured credentials."""
    candidates: list[AuthMode] = []
    if settings.basic_username and settings.basic_password:
        candidates.append(BasicAuth(settings.basic_username, settings.basic_password))
    if settings.bearer_token:
        candidates.append(BearerAuth(settings.bearer_token))
    if settings.apikey_header_name and settings.apikey_value:
        candidates.append(ApiKeyAuth(settings.apikey_header_name, settings.apikey_value))

    if not candidates:
        return NoAuth()

    active, ignored = candidates[0], candidates[1:]
    if ignored:
        _log.debug(
            f"Auth: using {active.name}, ignoring {', '.join(mode.name for mode in ignored)}",
            extra={"event": "auth_ignored_credentials", "active": active.name, "ignored": [m.name for m in ignored]},
        )
    return active
