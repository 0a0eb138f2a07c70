"""HTTP capability used by the endpoint tool.

Every HTTP status code is an ordinary outcome here: the status policy is part
of the client configuration, so only network-level failures surface as
``httpx.RequestError``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from .config import Settings
    from .envelope import RequestDescription

StatusPolicy = Callable[[int], bool]

TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"

# RFC 9110 field-name token and field-value characters (visible ASCII, space, tab).
_HEADER_NAME = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_HEADER_VALUE = re.compile(r"[\t\x20-\x7e]*")


def header_error(name: str, value: str) -> str | None:
    """Why a header cannot be sent as-is, or None when it can."""
    if not _HEADER_NAME.fullmatch(name):
        return f"invalid header name {name!r}"
    if not _HEADER_VALUE.fullmatch(value):
        return f"header {name!r} must contain only printable ASCII characters"
    return None


def accept_any_status(status_code: int) -> bool:
    return True


class RestClient:
    """Sends fully-built requests over one shared ``httpx.AsyncClient``.

    The underlying connection pool is safe for concurrent in-flight calls.
    """

    def __init__(self, client: httpx.AsyncClient, *, validate_status: StatusPolicy = accept_any_status) -> None:
        self._client = client
        self._validate_status = validate_status

    @classmethod
    def create(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        validate_status: StatusPolicy = accept_any_status,
    ) -> RestClient:
        kwargs: dict[str, Any] = {"transport": transport}
        if settings.timeout is not None:
            kwargs["timeout"] = settings.timeout
        return cls(httpx.AsyncClient(**kwargs), validate_status=validate_status)

    async def send(self, request: RequestDescription) -> httpx.Response:
        kwargs: dict[str, Any] = {"headers": request.headers}
        if request.body is not None:
            if isinstance(request.body, str):
                kwargs["content"] = request.body
                if not _has_header(request.headers, "content-type"):
                    kwargs["headers"] = {**request.headers, "Content-Type": TEXT_CONTENT_TYPE}
            else:
                kwargs["json"] = request.body

        response = await self._client.request(request.method, request.url, **kwargs)
        if not self._validate_status(response.status_code):
            raise httpx.HTTPStatusError(
                f"Status {response.status_code} rejected by status policy",
                request=response.request,
                response=response,
            )
        return response

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RestClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()


def _has_header(headers: Mapping[str, str], name: str) -> bool:
    return any(key.lower() == name for key in headers)


def decode_body(response: httpx.Response) -> Any:
    """Parsed JSON when the body is JSON, its text otherwise."""
    if not response.content:
        return ""
    try:
        return response.json()
    except ValueError:
        return response.text
