"""Tool catalog and call/result schemas."""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

ErrorKind = Literal["unknown_tool", "provider", "initialization"]


class ToolParameter(BaseModel):
    """Parameter definition for a tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str  # string, integer, boolean, number, array, object
    description: str
    required: bool = True
    enum: list[str] | None = None
    default: Any = None
    items: dict[str, Any] | None = None  # item schema for arrays

    def json_schema(self) -> dict[str, Any]:
        """Render this parameter as a JSON-Schema property."""
        prop: dict[str, Any] = {"type": self.type}
        if self.items is not None:
            prop["items"] = dict(self.items)
        if self.enum is not None:
            prop["enum"] = list(self.enum)
        prop["description"] = self.description
        if self.default is not None:
            prop["default"] = self.default
        return prop


class ToolDefinition(BaseModel):
    """Definition of a single tool exposed by the server."""

    model_config = ConfigDict(frozen=True)

    name: str  # e.g. "docs_create_document"
    description: str
    parameters: tuple[ToolParameter, ...] = ()

    def input_schema(self) -> dict[str, Any]:
        """JSON-Schema object describing the tool's arguments.

        ``required`` is left out entirely when every parameter is optional.
        """
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.json_schema() for p in self.parameters},
        }
        required = [p.name for p in self.parameters if p.required]
        if required:
            schema["required"] = required
        return schema

    def to_mcp(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }


class ModuleManifest(BaseModel):
    """Ordered, read-only catalog of the tools a module exposes."""

    model_config = ConfigDict(frozen=True)

    module_name: str
    description: str
    tools: tuple[ToolDefinition, ...]

    @model_validator(mode="after")
    def check_unique_names(self) -> ModuleManifest:
        seen: set[str] = set()
        for tool in self.tools:
            if tool.name in seen:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            seen.add(tool.name)
        return self

    def get(self, name: str) -> ToolDefinition | None:
        """Look up a tool by name, or ``None`` if it is not registered."""
        for tool in self.tools:
            if tool.name == name:
                return tool
        return None

    def names(self) -> list[str]:
        return [t.name for t in self.tools]

    def to_mcp(self) -> list[dict[str, Any]]:
        """Catalog listing in registration order, as served by tools/list."""
        return [t.to_mcp() for t in self.tools]


class ToolCall(BaseModel):
    """A tool call request."""

    tool_name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Result from a tool execution: a payload on success, a message otherwise."""

    tool_name: str
    success: bool
    result: Any = None
    error: str | None = None
    error_kind: ErrorKind | None = None

    @model_validator(mode="after")
    def check_success_xor_error(self) -> ToolResult:
        if self.success and self.error is not None:
            raise ValueError("A successful result cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("A failed result must carry an error message")
        return self

    def text(self) -> str:
        """Text rendering used inside MCP content items."""
        if self.success:
            return json.dumps(self.result, indent=2, ensure_ascii=False)
        return f"Error: {self.error}"

    def to_mcp(self) -> dict[str, Any]:
        """MCP ``tools/call`` result body."""
        body: dict[str, Any] = {"content": [{"type": "text", "text": self.text()}]}
        if not self.success:
            body["isError"] = True
        return body
