"""Shared MCP server core: settings, schemas, dispatch and transports."""
