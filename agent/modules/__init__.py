"""Tool modules served over MCP."""
