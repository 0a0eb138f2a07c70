"""Result envelopes returned to the MCP host.

Two shapes exist:
- SuccessEnvelope: any completed HTTP exchange, whatever its status code
- TransportFailureEnvelope: the exchange never completed (DNS, refused, timeout, ...)
"""

from __future__ import annotations

import errno
import json
import socket
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Union

import httpx

from .http import decode_body


@dataclass(frozen=True)
class RequestDescription:
    """The outbound request exactly as dispatched, auth header included."""

    url: str
    method: str
    headers: dict[str, str]
    auth_method: str
    body: Any = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "url": self.url,
            "method": self.method,
            "headers": self.headers,
        }
        if self.body is not None:
            result["body"] = self.body
        result["authMethod"] = self.auth_method
        return result


@dataclass(frozen=True)
class SuccessEnvelope:
    request: RequestDescription
    status_code: int
    status_text: str
    timing_ms: int
    headers: dict[str, str]
    body: Any

    @classmethod
    def from_response(cls, request: RequestDescription, response: httpx.Response, timing_ms: int) -> SuccessEnvelope:
        return cls(
            request=request,
            status_code=response.status_code,
            status_text=response.reason_phrase,
            timing_ms=timing_ms,
            headers=dict(response.headers),
            body=decode_body(response),
        )

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400

    @property
    def messages(self) -> list[str]:
        if self.is_error:
            return [f"Request failed with status {self.status_code}"]
        return ["Request completed successfully"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "request": self.request.to_dict(),
            "response": {
                "statusCode": self.status_code,
                "statusText": self.status_text,
                "timing": f"{self.timing_ms}ms",
                "timingMs": self.timing_ms,
                "headers": self.headers,
                "body": self.body,
            },
            "validation": {
                "isError": self.is_error,
                "messages": self.messages,
            },
        }

    def to_json(self) -> str:
        return _dumps(self.to_dict())


@dataclass(frozen=True)
class TransportFailureEnvelope:
    request: RequestDescription
    message: str
    code: str

    is_error = True

    @classmethod
    def from_exception(cls, request: RequestDescription, exc: httpx.RequestError) -> TransportFailureEnvelope:
        return cls(request=request, message=str(exc) or type(exc).__name__, code=transport_error_code(exc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {"message": self.message, "code": self.code},
            "request": self.request.to_dict(),
        }

    def to_json(self) -> str:
        return _dumps(self.to_dict())


ResultEnvelope = Union[SuccessEnvelope, TransportFailureEnvelope]


def _dumps(payload: dict[str, Any]) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


# =============================================================================
# Transport error codes
# =============================================================================

# Checked in order, so subclasses come before their bases.
_FALLBACK_CODES: tuple[tuple[type[httpx.RequestError], str], ...] = (
    (httpx.ConnectError, "ERR_CONNECT"),
    (httpx.ReadError, "ECONNRESET"),
    (httpx.WriteError, "EPIPE"),
    (httpx.RemoteProtocolError, "ERR_BAD_RESPONSE"),
    (httpx.LocalProtocolError, "ERR_BAD_REQUEST"),
    (httpx.UnsupportedProtocol, "ERR_UNSUPPORTED_PROTOCOL"),
    (httpx.ProxyError, "ERR_PROXY"),
    (httpx.DecodingError, "ERR_BAD_RESPONSE"),
    (httpx.TooManyRedirects, "ERR_FR_TOO_MANY_REDIRECTS"),
)


def transport_error_code(exc: httpx.RequestError) -> str:
    """Symbolic code for a transport failure, e.g. ``ECONNREFUSED``.

    The OS-level cause is preferred when one is chained to the httpx error.
    """
    if isinstance(exc, httpx.TimeoutException):
        return "ETIMEDOUT"

    for cause in _causes(exc):
        if isinstance(cause, socket.gaierror):
            return "ENOTFOUND"
        if isinstance(cause, OSError) and cause.errno in errno.errorcode:
            return errno.errorcode[cause.errno]

    for exc_type, code in _FALLBACK_CODES:
        if isinstance(exc, exc_type):
            return code
    return "ERR_NETWORK"


def _causes(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    pending: list[BaseException] = [exc]
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        if isinstance(current, BaseExceptionGroup):
            pending.extend(current.exceptions)
        for linked in (current.__cause__, current.__context__):
            if linked is not None:
                pending.append(linked)
