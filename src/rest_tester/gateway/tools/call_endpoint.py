"""Call a REST endpoint on the configured base URL."""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, Field, StrictStr, ValidationError, ValidationInfo, field_validator

from ...logger import get_logger
from ..envelope import RequestDescription, ResultEnvelope, SuccessEnvelope, TransportFailureEnvelope
from ..errors import InvalidParamsError
from ..http import header_error

if TYPE_CHECKING:
    from ..auth import AuthMode
    from ..http import RestClient


_log = get_logger("rest_tester.gateway.tools.call_endpoint")

ENDPOINT_TOOL_NAME = "endpoint"
HTTP_METHODS = ("GET", "POST", "PUT", "DELETE")
BODY_METHODS = frozenset({"POST", "PUT"})

INPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "method": {
            "type": "string",
            "enum": list(HTTP_METHODS),
            "description": "HTTP method to use",
        },
        "endpoint": {
            "type": "string",
            "description": 'Endpoint path (e.g. "/users"). Will be appended to base URL.',
        },
        "body": {
            "type": "object",
            "description": "Optional request body for POST/PUT requests",
        },
        "headers": {
            "type": "object",
            "description": "Optional request headers",
            "additionalProperties": {"type": "string"},
        },
    },
    "required": ["method", "endpoint"],
}


class EndpointArgs(BaseModel):
    """Validated arguments of one endpoint tool call."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    method: Literal["GET", "POST", "PUT", "DELETE"]
    endpoint: StrictStr
    body: Any = None
    headers: dict[StrictStr, StrictStr] | None = Field(default=None)

    @field_validator("endpoint")
    @classmethod
    def check_url(cls, endpoint: str, info: ValidationInfo) -> str:
        base_url = (info.context or {}).get("base_url", "")
        try:
            httpx.URL(f"{base_url}{normalize_endpoint(endpoint)}")
        except httpx.InvalidURL as exc:
            raise ValueError(f"not a valid URL path: {exc}") from exc
        return endpoint

    @field_validator("headers")
    @classmethod
    def check_headers(cls, headers: dict[str, str] | None) -> dict[str, str] | None:
        for name, value in (headers or {}).items():
            error = header_error(name, value)
            if error is not None:
                raise ValueError(error)
        return headers


def parse_arguments(arguments: Any, *, base_url: str = "") -> EndpointArgs:
    """Validate raw tool arguments.

    The endpoint is checked against ``base_url`` so that every accepted
    request has a URL httpx can build.

    Raises:
        InvalidParamsError: If arguments are not an object or any field is malformed
    """
    if not isinstance(arguments, Mapping):
        raise InvalidParamsError("Invalid endpoint arguments: expected an object")
    try:
        return EndpointArgs.model_validate(dict(arguments), context={"base_url": base_url})
    except ValidationError as exc:
        errors = [{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in exc.errors()]
        raise InvalidParamsError("Invalid endpoint arguments", data={"errors": errors}) from exc


def normalize_endpoint(endpoint: str) -> str:
    """Exactly one leading slash, no trailing slashes."""
    return "/" + endpoint.strip("/")


def build_request(base_url: str, args: EndpointArgs, auth: AuthMode) -> RequestDescription:
    headers = dict(args.headers or {})
    auth_header = auth.header()
    if auth_header is not None:
        name, value = auth_header
        # Header names are case-insensitive; the injected one replaces any caller variant.
        headers = {k: v for k, v in headers.items() if k.lower() != name.lower()}
        headers[name] = value

    return RequestDescription(
        url=f"{base_url}{normalize_endpoint(args.endpoint)}",
        method=args.method,
        headers=headers,
        auth_method=auth.name,
        body=args.body if args.method in BODY_METHODS else None,
    )


async def call_endpoint(client: RestClient, *, base_url: str, auth: AuthMode, arguments: Any) -> ResultEnvelope:
    """Run one endpoint tool invocation end to end.

    Args:
        client: Shared HTTP capability
        base_url: Prefix for the normalized endpoint
        auth: Active authentication mode
        arguments: Raw tool arguments from the MCP host

    Returns:
        SuccessEnvelope for any completed exchange, TransportFailureEnvelope
        when the request never got a response

    Raises:
        InvalidParamsError: If the arguments are malformed (nothing is sent)
    """
    request = build_request(base_url, parse_arguments(arguments, base_url=base_url), auth)

    _log.info(
        f"Endpoint: {request.method} {request.url}",
        extra={
            "event": "endpoint_call_start",
            "method": request.method,
            "url": request.url,
            "auth_method": request.auth_method,
        },
    )

    start_time = time.perf_counter()
    try:
        response = await client.send(request)
    except httpx.RequestError as exc:
        duration_ms = (time.perf_counter() - start_time) * 1000
        envelope = TransportFailureEnvelope.from_exception(request, exc)
        _log.warning(
            f"Endpoint: {request.method} {request.url} FAILED ({envelope.code}) [Duration: {duration_ms:.2f}ms]",
            extra={
                "event": "endpoint_call_transport_error",
                "method": request.method,
                "url": request.url,
                "duration_ms": duration_ms,
                "error_type": type(exc).__name__,
                "error_code": envelope.code,
                "error_message": envelope.message,
            },
        )
        return envelope
    duration_ms = (time.perf_counter() - start_time) * 1000

    envelope = SuccessEnvelope.from_response(request, response, round(duration_ms))
    _log.info(
        f"Endpoint: {request.method} {request.url} -> {envelope.status_code} [Duration: {duration_ms:.2f}ms]",
        extra={
            "event": "endpoint_call_complete",
            "method": request.method,
            "url": request.url,
            "status_code": envelope.status_code,
            "duration_ms": duration_ms,
        },
    )
    return envelope
