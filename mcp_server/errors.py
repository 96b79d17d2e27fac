"""Error definitions for MCP tools.

This module defines structured error types with stable codes
that can be surfaced to MCP clients. Provider error codes are
re-exported so clients see a single taxonomy.
"""

from dataclasses import dataclass
from typing import Any

from mcp import types
from mcp.shared.exceptions import McpError

from openai_imagegen.images.errors import (
    AUTHENTICATION_ERROR,
    CONNECTION_ERROR,
    FILESYSTEM_ERROR,
    INVALID_REQUEST,
    NOT_FOUND,
    PERMISSION_DENIED,
    RATE_LIMITED,
    TIMEOUT,
    UPSTREAM_ERROR,
)

# Error code constants
INVALID_PARAMS = "invalid_params"
UNKNOWN_TOOL = "unknown_tool"
INTERNAL_ERROR = "internal_error"


@dataclass
class MCPError:
    """Structured error response for MCP tools.

    Attributes:
        code: Stable error code for programmatic handling.
        message: Human-readable error message.
        details: Optional additional error details.
    """

    code: str
    message: str
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


def make_error(
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> MCPError:
    """Create an MCPError instance.

    Args:
        code: Stable error code.
        message: Human-readable message.
        details: Optional additional details.

    Returns:
        MCPError instance.
    """
    return MCPError(code=code, message=message, details=details)


def invalid_params(message: str, details: dict[str, Any] | None = None) -> MCPError:
    """Create an invalid parameters error."""
    return make_error(INVALID_PARAMS, message, details)


def unknown_tool(name: str) -> MCPError:
    """Create an unknown tool error."""
    return make_error(
        UNKNOWN_TOOL,
        f"Unknown tool: {name}",
        details={"tool": name},
    )


def protocol_error(error: MCPError, jsonrpc_code: int) -> McpError:
    """Wrap a structured error into a JSON-RPC error response.

    Args:
        error: Structured error, sent as the error data.
        jsonrpc_code: JSON-RPC error code (e.g. types.INVALID_PARAMS).

    Returns:
        McpError to raise from a request handler.
    """
    return McpError(
        types.ErrorData(code=jsonrpc_code, message=error.message, data=error.to_dict())
    )


__all__ = [
    "AUTHENTICATION_ERROR",
    "CONNECTION_ERROR",
    "FILESYSTEM_ERROR",
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "MCPError",
    "NOT_FOUND",
    "PERMISSION_DENIED",
    "RATE_LIMITED",
    "TIMEOUT",
    "UNKNOWN_TOOL",
    "UPSTREAM_ERROR",
    "invalid_params",
    "make_error",
    "protocol_error",
    "unknown_tool",
]
