"""JSON-RPC method routing shared by the stdio and HTTP transports."""

from __future__ import annotations

import json
from typing import Any

import structlog

from shared.dispatcher import Dispatcher
from shared.errors import MalformedEnvelopeError
from shared.schemas.jsonrpc import JSONRPC_VERSION, ErrorCode, JsonRpcResponse
from shared.schemas.tools import ToolCall

logger = structlog.get_logger()


class McpRequestHandler:
    """Turn one decoded JSON-RPC message into one response (or none).

    ``tool_errors_as_results`` picks how failed tool calls are reported:
    as ``isError`` results (stdio clients) or as JSON-RPC errors, with
    -32601 for unknown tools and -32603 for everything else (HTTP clients).
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        server_name: str,
        server_version: str,
        protocol_version: str,
        tool_errors_as_results: bool = False,
    ):
        self.dispatcher = dispatcher
        self.server_name = server_name
        self.server_version = server_version
        self.protocol_version = protocol_version
        self.tool_errors_as_results = tool_errors_as_results

    def initialize_result(self) -> dict[str, Any]:
        return {
            "protocolVersion": self.protocol_version,
            "capabilities": {"tools": {}},
            "serverInfo": {"name": self.server_name, "version": self.server_version},
        }

    async def handle_line(self, line: str) -> JsonRpcResponse | None:
        """Decode a raw text frame and handle it."""
        try:
            message = json.loads(line)
        except (ValueError, RecursionError) as e:
            logger.warning("mcp_parse_error", error=str(e))
            return JsonRpcResponse.failure(None, ErrorCode.PARSE_ERROR, "Parse error")
        return await self.handle(message)

    async def handle(self, message: Any) -> JsonRpcResponse | None:
        """Handle a decoded message. Returns ``None`` for notifications."""
        request_id = message.get("id") if isinstance(message, dict) else None
        try:
            method, params = self._validate(message)
        except MalformedEnvelopeError as e:
            logger.warning("mcp_invalid_request", id=request_id, error=str(e))
            return JsonRpcResponse.failure(request_id, e.code, str(e))

        logger.info("mcp_request", id=request_id, method=method)

        if method.startswith("notifications/"):
            return None

        try:
            response = await self._route(request_id, method, params)
        except MalformedEnvelopeError as e:
            response = JsonRpcResponse.failure(request_id, e.code, str(e))
        except Exception as e:
            logger.error("mcp_internal_error", id=request_id, method=method, error=str(e), exc_info=True)
            response = JsonRpcResponse.failure(
                request_id, ErrorCode.INTERNAL_ERROR, str(e) or "Internal error"
            )

        logger.info("mcp_response", id=request_id, method=method, error=response.error is not None)
        return response

    def _validate(self, message: Any) -> tuple[str, dict[str, Any]]:
        if not isinstance(message, dict) or message.get("jsonrpc") != JSONRPC_VERSION:
            raise MalformedEnvelopeError("Invalid Request", ErrorCode.INVALID_REQUEST)
        method = message.get("method")
        if not isinstance(method, str) or not method:
            raise MalformedEnvelopeError("Invalid Request", ErrorCode.INVALID_REQUEST)
        params = message.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise MalformedEnvelopeError("Invalid params", ErrorCode.INVALID_PARAMS)
        return method, params

    async def _route(self, request_id: Any, method: str, params: dict[str, Any]) -> JsonRpcResponse:
        if method == "initialize":
            return JsonRpcResponse.success(request_id, self.initialize_result())
        if method == "ping":
            return JsonRpcResponse.success(request_id, {})
        if method == "tools/list":
            return JsonRpcResponse.success(request_id, {"tools": self.dispatcher.catalog.to_mcp()})
        if method == "tools/call":
            return await self._call_tool(request_id, params)
        return JsonRpcResponse.failure(request_id, ErrorCode.METHOD_NOT_FOUND, f"Unknown method: {method}")

    async def _call_tool(self, request_id: Any, params: dict[str, Any]) -> JsonRpcResponse:
        name = params.get("name")
        if not isinstance(name, str):
            raise MalformedEnvelopeError("Invalid params: tool name is required", ErrorCode.INVALID_PARAMS)
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise MalformedEnvelopeError("Invalid params: arguments must be an object", ErrorCode.INVALID_PARAMS)

        result = await self.dispatcher.dispatch(ToolCall(tool_name=name, arguments=arguments))
        if result.success or self.tool_errors_as_results:
            return JsonRpcResponse.success(request_id, result.to_mcp())

        code = ErrorCode.METHOD_NOT_FOUND if result.error_kind == "unknown_tool" else ErrorCode.INTERNAL_ERROR
        return JsonRpcResponse.failure(request_id, code, result.error)
