"""Tool dispatcher: catalog lookup, argument shaping, provider invocation."""

from __future__ import annotations

import re
from typing import Any

import structlog

from shared.errors import InitializationError, UnknownOperationError
from shared.lazy import LazyProvider
from shared.schemas.tools import ModuleManifest, ToolCall, ToolDefinition, ToolResult

logger = structlog.get_logger()

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def to_snake_case(name: str) -> str:
    """``documentId`` -> ``document_id``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def build_arguments(tool: ToolDefinition, arguments: dict[str, Any]) -> dict[str, Any]:
    """Map wire arguments onto provider keyword arguments.

    Every declared parameter is passed. Absent ones take the schema default,
    or ``None``; required parameters are not checked here, the provider
    rejects what it cannot use. Undeclared arguments are dropped.
    """
    kwargs: dict[str, Any] = {}
    for param in tool.parameters:
        value = arguments.get(param.name)
        if value is None:
            value = param.default
        kwargs[to_snake_case(param.name)] = value
    return kwargs


class Dispatcher:
    """Runs ``ToolCall``s against the lazily-built provider. Never raises."""

    def __init__(self, catalog: ModuleManifest, provider: LazyProvider):
        self.catalog = catalog
        self.provider = provider

    async def dispatch(self, call: ToolCall) -> ToolResult:
        tool = self.catalog.get(call.tool_name)
        if tool is None:
            error = UnknownOperationError(call.tool_name)
            logger.warning("unknown_tool", tool=call.tool_name)
            return ToolResult(
                tool_name=call.tool_name, success=False, error=str(error), error_kind="unknown_tool"
            )

        kwargs = build_arguments(tool, call.arguments or {})
        logger.info("tool_call", tool=tool.name, arguments=sorted(k for k, v in kwargs.items() if v is not None))

        try:
            provider = await self.provider.get()
            method = getattr(provider, tool.name)
            result = await method(**kwargs)
        except InitializationError as e:
            logger.error("tool_execution_error", tool=tool.name, error=str(e))
            return ToolResult(
                tool_name=tool.name, success=False, error=_message(e), error_kind="initialization"
            )
        except Exception as e:
            logger.error("tool_execution_error", tool=tool.name, error=str(e), exc_info=True)
            return ToolResult(tool_name=tool.name, success=False, error=_message(e), error_kind="provider")

        return ToolResult(tool_name=tool.name, success=True, result=result)


def _message(error: Exception) -> str:
    return str(error) or error.__class__.__name__
