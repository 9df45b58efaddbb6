"""MCP server exposing the Lexware Office (lexoffice) API as read-only tools."""

__version__ = "0.1.1"
