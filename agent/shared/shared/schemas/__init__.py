"""Pydantic schemas for the MCP server."""

from shared.schemas.common import HealthResponse, ServerInfo
from shared.schemas.jsonrpc import JSONRPC_VERSION, ErrorCode, JsonRpcError, JsonRpcResponse
from shared.schemas.tools import (
    ModuleManifest,
    ToolCall,
    ToolDefinition,
    ToolParameter,
    ToolResult,
)

__all__ = [
    "ErrorCode",
    "HealthResponse",
    "JSONRPC_VERSION",
    "JsonRpcError",
    "JsonRpcResponse",
    "ModuleManifest",
    "ServerInfo",
    "ToolCall",
    "ToolDefinition",
    "ToolParameter",
    "ToolResult",
]
