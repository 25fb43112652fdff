"""Google Docs module — FastAPI service speaking MCP over HTTP."""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from modules.google_docs.service import build_dispatcher, build_handler
from shared.config import get_settings
from shared.logging_config import configure_logging
from shared.schemas.common import HealthResponse, ServerInfo
from shared.schemas.jsonrpc import ErrorCode, JsonRpcResponse

settings = get_settings()
configure_logging(settings.log_level)

logger = structlog.get_logger()
app = FastAPI(title=settings.server_display_name, version=settings.server_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)

# The provider behind the dispatcher is built on the first tool call.
dispatcher = build_dispatcher(settings)
handler = build_handler(settings, dispatcher)


@app.on_event("shutdown")
async def shutdown():
    await dispatcher.provider.aclose()


@app.get("/", response_model=ServerInfo)
async def root():
    return ServerInfo(
        name=settings.server_display_name,
        version=settings.server_version,
        description=settings.server_description,
    )


@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(
        status="healthy",
        service=settings.server_name,
        timestamp=datetime.now(timezone.utc).isoformat(),
        provider=dispatcher.provider.state,
    )


@app.post("/mcp")
async def mcp(request: Request):
    """Handle one JSON-RPC envelope."""
    try:
        message = await request.json()
    except (ValueError, RecursionError):
        logger.warning("mcp_parse_error")
        body = JsonRpcResponse.failure(None, ErrorCode.PARSE_ERROR, "Parse error").to_dict()
        return JSONResponse(body, status_code=400)

    response = await handler.handle(message)
    if response is None:
        return Response(status_code=202)

    status_code = 200
    if response.error is not None and response.error.code == ErrorCode.INVALID_REQUEST:
        status_code = 400
    return JSONResponse(response.to_dict(), status_code=status_code)
