"""JSON-RPC 2.0 envelope schemas."""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from pydantic import BaseModel

JSONRPC_VERSION = "2.0"


class ErrorCode(IntEnum):
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class JsonRpcError(BaseModel):
    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """Outgoing envelope. Exactly one of ``result`` / ``error`` is set."""

    jsonrpc: str = JSONRPC_VERSION
    id: Any = None
    result: Any = None
    error: JsonRpcError | None = None

    @classmethod
    def success(cls, request_id: Any, result: Any) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Any, code: int, message: str, data: Any = None) -> JsonRpcResponse:
        return cls(id=request_id, error=JsonRpcError(code=int(code), message=message, data=data))

    def to_dict(self) -> dict[str, Any]:
        """Wire form. ``id`` is always echoed, even when it is null."""
        body: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            body["error"] = self.error.model_dump(exclude_none=True)
        else:
            body["result"] = self.result
        return body
