"""Tests for the Google Docs module FastAPI endpoints."""

from __future__ import annotations

import json
from unittest.mock import create_autospec, patch

import pytest
from httpx import ASGITransport, AsyncClient

from modules.google_docs import main
from modules.google_docs.main import app
from modules.google_docs.providers.base import DocumentStoreProvider
from shared.errors import InitializationError, ProviderError
from shared.lazy import LazyProvider


@pytest.fixture
async def client():
    """Create an async test client for the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def mock_provider():
    provider = create_autospec(DocumentStoreProvider, instance=True)
    with patch.object(main.dispatcher, "provider", LazyProvider(lambda: provider)):
        yield provider


def _failing(message: str):
    def factory():
        raise InitializationError(message)

    return factory


def _rpc(method: str, params: dict | None = None, request_id=1) -> dict:
    body = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        body["params"] = params
    return body


def _call(name: str, arguments: dict | None = None, request_id=1) -> dict:
    return _rpc("tools/call", {"name": name, "arguments": arguments or {}}, request_id)


# ---------------------------------------------------------------------------
# Metadata endpoints
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_root(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json() == {
        "name": "Google Docs MCP Server",
        "version": "1.0.0",
        "description": "MCP server for Google Docs integration",
    }


@pytest.mark.asyncio
async def test_health(client, mock_provider):
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["service"] == "google-docs-mcp"
    assert data["provider"] == "uninitialized"
    assert "T" in data["timestamp"]


@pytest.mark.asyncio
async def test_health_is_200_even_when_provider_failed(client):
    cell = LazyProvider(_failing("no creds"))
    with patch.object(main.dispatcher, "provider", cell):
        await client.post("/mcp", json=_call("drive_list_files"))
        resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["provider"] == "failed"


@pytest.mark.asyncio
async def test_cors_preflight(client):
    resp = await client.options(
        "/mcp",
        headers={
            "Origin": "https://agent.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"


# ---------------------------------------------------------------------------
# Protocol methods
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_initialize(client):
    resp = await client.post("/mcp", json=_rpc("initialize", {"protocolVersion": "2024-11-05"}, request_id=0))
    assert resp.status_code == 200
    assert resp.json() == {
        "jsonrpc": "2.0",
        "id": 0,
        "result": {
            "protocolVersion": "2024-11-05",
            "capabilities": {"tools": {}},
            "serverInfo": {"name": "google-docs-mcp", "version": "1.0.0"},
        },
    }


@pytest.mark.asyncio
async def test_tools_list(client):
    resp = await client.post("/mcp", json=_rpc("tools/list", request_id="list-1"))
    data = resp.json()
    assert data["id"] == "list-1"
    names = [t["name"] for t in data["result"]["tools"]]
    assert len(names) == 26
    assert names[0] == "docs_create_document"
    assert names[-1] == "drive_delete_reply"


@pytest.mark.asyncio
async def test_wrong_version_is_400(client, mock_provider):
    resp = await client.post("/mcp", json={"jsonrpc": "1.0", "id": 3, "method": "tools/list"})
    assert resp.status_code == 400
    assert resp.json() == {"jsonrpc": "2.0", "id": 3, "error": {"code": -32600, "message": "Invalid Request"}}


@pytest.mark.asyncio
async def test_parse_error_is_400(client):
    resp = await client.post("/mcp", content=b"{oops", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == -32700


@pytest.mark.asyncio
async def test_deeply_nested_body_is_parse_error(client):
    body = b"[" * 200000 + b"]" * 200000
    resp = await client.post("/mcp", content=body, headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json() == {"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "Parse error"}}


@pytest.mark.asyncio
async def test_unknown_method(client):
    resp = await client.post("/mcp", json=_rpc("prompts/list"))
    assert resp.status_code == 200
    assert resp.json()["error"] == {"code": -32601, "message": "Unknown method: prompts/list"}


@pytest.mark.asyncio
async def test_notification_accepted_without_body(client):
    resp = await client.post("/mcp", json={"jsonrpc": "2.0", "method": "notifications/initialized"})
    assert resp.status_code == 202
    assert resp.content == b""


# ---------------------------------------------------------------------------
# tools/call end to end
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_document(client, mock_provider):
    payload = {"documentId": "abc123", "title": "Report", "url": "https://docs.google.com/document/d/abc123/edit"}
    mock_provider.docs_create_document.return_value = payload

    resp = await client.post("/mcp", json=_call("docs_create_document", {"title": "Report"}, request_id=11))

    assert resp.status_code == 200
    data = resp.json()
    assert data["id"] == 11
    assert data["result"] == {"content": [{"type": "text", "text": json.dumps(payload, indent=2)}]}
    mock_provider.docs_create_document.assert_awaited_once_with(title="Report")


@pytest.mark.asyncio
async def test_get_document_not_found(client, mock_provider):
    mock_provider.docs_get_document.side_effect = ProviderError("Not found", status_code=404)

    resp = await client.post("/mcp", json=_call("docs_get_document", {"documentId": "missing"}))

    assert resp.status_code == 200
    assert resp.json()["error"] == {"code": -32603, "message": "Not found"}


@pytest.mark.asyncio
async def test_unknown_tool(client, mock_provider):
    resp = await client.post("/mcp", json=_call("docs_frobnicate", {"x": 1}))

    error = resp.json()["error"]
    assert error["code"] == -32601
    assert "Unknown tool: docs_frobnicate" in error["message"]
    assert mock_provider.mock_calls == []


@pytest.mark.asyncio
async def test_initialization_failure_is_internal_error(client):
    cell = LazyProvider(_failing("Invalid GOOGLE_OAUTH_TOKENS format"))
    with patch.object(main.dispatcher, "provider", cell):
        resp = await client.post("/mcp", json=_call("docs_list_documents"))
    assert resp.json()["error"] == {"code": -32603, "message": "Invalid GOOGLE_OAUTH_TOKENS format"}
