"""Gateway errors."""

from __future__ import annotations

from typing import Any

from mcp.shared.exceptions import McpError
from mcp.types import INVALID_PARAMS, METHOD_NOT_FOUND, ErrorData


class RestTesterError(Exception):
    """Base class for all rest-tester errors."""


class ConfigurationError(RestTesterError, ValueError):
    """Raised at startup when the environment cannot produce valid settings."""


class ProtocolError(RestTesterError):
    """A tool call rejected before any network access.

    Carries the JSON-RPC error code reported back to the MCP host.
    """

    code: int = INVALID_PARAMS

    def __init__(self, message: str, *, data: Any = None) -> None:
        self.data = data
        super().__init__(message)

    def to_mcp_error(self) -> McpError:
        return McpError(ErrorData(code=self.code, message=str(self), data=self.data))


class UnknownToolError(ProtocolError):
    code = METHOD_NOT_FOUND

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class InvalidParamsError(ProtocolError):
    code = INVALID_PARAMS
