"""Wiring shared by the HTTP app and the stdio entry point."""

from __future__ import annotations

from typing import IO

import structlog

from modules.google_docs.auth import GoogleCredentials
from modules.google_docs.manifest import MANIFEST
from modules.google_docs.providers.google import GoogleWorkspaceProvider
from shared.config import Settings
from shared.dispatcher import Dispatcher
from shared.lazy import LazyProvider
from shared.rpc import McpRequestHandler
from shared.stdio import run_stdio

logger = structlog.get_logger()


def build_provider(settings: Settings) -> GoogleWorkspaceProvider:
    """Provider factory run by the lazy cell on the first tool call."""
    credentials = GoogleCredentials.from_settings(settings)
    return GoogleWorkspaceProvider(credentials, timeout=settings.google_api_timeout)


def build_dispatcher(settings: Settings) -> Dispatcher:
    return Dispatcher(MANIFEST, LazyProvider(lambda: build_provider(settings)))


def build_handler(
    settings: Settings, dispatcher: Dispatcher, tool_errors_as_results: bool = False
) -> McpRequestHandler:
    return McpRequestHandler(
        dispatcher,
        server_name=settings.server_name,
        server_version=settings.server_version,
        protocol_version=settings.protocol_version,
        tool_errors_as_results=tool_errors_as_results,
    )


async def serve_stdio(
    settings: Settings,
    input_stream: IO | None = None,
    output_stream: IO[str] | None = None,
    dispatcher: Dispatcher | None = None,
) -> None:
    """Run the stdio transport until stdin closes."""
    dispatcher = dispatcher or build_dispatcher(settings)
    handler = build_handler(settings, dispatcher, tool_errors_as_results=True)
    logger.info("stdio_server_running", server=settings.server_name, tools=len(dispatcher.catalog.tools))
    try:
        await run_stdio(handler, input_stream, output_stream)
    finally:
        await dispatcher.provider.aclose()
