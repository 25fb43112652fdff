"""Google Docs and Drive tools."""
