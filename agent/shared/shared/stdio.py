"""Line-delimited JSON-RPC over stdin/stdout."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import IO

import structlog

from shared.rpc import McpRequestHandler
from shared.schemas.jsonrpc import ErrorCode, JsonRpcResponse

logger = structlog.get_logger()


def _decode(line: bytes | str) -> str:
    if isinstance(line, bytes):
        return line.decode("utf-8")
    return line


async def run_stdio(
    handler: McpRequestHandler,
    input_stream: IO | None = None,
    output_stream: IO[str] | None = None,
) -> int:
    """Serve requests until EOF, one line in and at most one line out.

    Input may be a binary or a text stream; binary lines are decoded one at a
    time so a frame that is not valid UTF-8 only costs that frame. Each request
    is fully answered before the next line is read. Returns the number of
    messages handled.
    """
    reader = input_stream or sys.stdin.buffer
    writer = output_stream or sys.stdout
    handled = 0

    while True:
        raw = await asyncio.to_thread(reader.readline)
        if not raw:
            logger.info("stdio_eof", handled=handled)
            return handled

        try:
            line = _decode(raw).strip()
        except UnicodeDecodeError as e:
            logger.warning("mcp_parse_error", error=str(e))
            response = JsonRpcResponse.failure(None, ErrorCode.PARSE_ERROR, "Parse error")
        else:
            if not line:
                continue
            response = await handler.handle_line(line)

        handled += 1
        if response is None:
            continue
        writer.write(json.dumps(response.to_dict(), ensure_ascii=False) + "\n")
        writer.flush()
