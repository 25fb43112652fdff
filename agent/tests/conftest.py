"""Shared test fixtures for the MCP server test suite.

Provides an autospecced capability provider, a counting provider factory
and factory helpers for JSON-RPC envelopes, so the core can be exercised
without talking to Google.
"""

from __future__ import annotations

from unittest.mock import MagicMock, create_autospec

import pytest

from modules.google_docs.manifest import MANIFEST
from modules.google_docs.providers.base import DocumentStoreProvider
from shared.dispatcher import Dispatcher
from shared.lazy import LazyProvider
from shared.rpc import McpRequestHandler


# ---------------------------------------------------------------------------
# Provider mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_provider():
    """Autospecced provider: every tool method is an AsyncMock with the real signature.

    Calling a method with a keyword the interface does not declare fails,
    so tests also check the dispatcher's argument mapping.
    """
    provider = create_autospec(DocumentStoreProvider, instance=True)
    provider.docs_create_document.return_value = {
        "documentId": "abc123",
        "title": "Report",
        "url": "https://docs.google.com/document/d/abc123/edit",
    }
    return provider


@pytest.fixture
def provider_factory(mock_provider):
    """Counting factory handed to the lazy cell."""
    return MagicMock(return_value=mock_provider)


# ---------------------------------------------------------------------------
# Core objects
# ---------------------------------------------------------------------------


@pytest.fixture
def dispatcher(provider_factory):
    return Dispatcher(MANIFEST, LazyProvider(provider_factory))


@pytest.fixture
def make_handler(dispatcher):
    """Factory for McpRequestHandler instances over the shared dispatcher."""

    def _make(tool_errors_as_results: bool = False) -> McpRequestHandler:
        return McpRequestHandler(
            dispatcher,
            server_name="google-docs-mcp",
            server_version="1.0.0",
            protocol_version="2024-11-05",
            tool_errors_as_results=tool_errors_as_results,
        )

    return _make


# ---------------------------------------------------------------------------
# Envelope factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_request():
    """Factory for JSON-RPC request envelopes."""

    def _make(method: str, params: dict | None = None, request_id=1, jsonrpc: str | None = "2.0") -> dict:
        message: dict = {"id": request_id, "method": method}
        if jsonrpc is not None:
            message["jsonrpc"] = jsonrpc
        if params is not None:
            message["params"] = params
        return message

    return _make


@pytest.fixture
def make_call(make_request):
    """Factory for ``tools/call`` envelopes."""

    def _make(name: str, arguments: dict | None = None, request_id=1) -> dict:
        return make_request("tools/call", {"name": name, "arguments": arguments or {}}, request_id)

    return _make
