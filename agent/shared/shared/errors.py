"""Error taxonomy for the MCP server core.

``UnknownOperationError`` and ``MalformedEnvelopeError`` are raised before
anything reaches a provider. ``ProviderError`` and ``InitializationError``
are caught by the dispatcher and turned into failed ``ToolResult``s.
"""

from __future__ import annotations


class McpServerError(Exception):
    """Base class for errors raised by the server core."""


class UnknownOperationError(McpServerError):
    """The requested tool name is not in the catalog."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class MalformedEnvelopeError(McpServerError):
    """A JSON-RPC envelope failed protocol-level validation."""

    def __init__(self, message: str, code: int):
        self.code = code
        super().__init__(message)


class ProviderError(McpServerError):
    """A capability provider call failed (auth, not found, quota, network)."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class InitializationError(McpServerError):
    """The capability provider could not be constructed."""
