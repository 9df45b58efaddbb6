"""MCP server for Lexware Office (lexoffice) integration.

TOOLS:
-----
- get-invoices: invoice vouchers filtered by status
- get-invoice-details: a single invoice by id
- get-contacts: contacts filtered by email, name, number and customer/vendor role
- list-posting-categories: bookkeeping posting categories, optionally by type
- list-countries: countries with their tax classification

All tools are read-only and issue exactly one GET against the lexoffice API.

CONFIGURATION:
-------------
- LEXWARE_OFFICE_API_KEY: REQUIRED lexoffice public API key; the server exits
  with status 1 before binding stdio when it is missing
- LEXOFFICE_API_URL: API origin, defaults to https://api.lexoffice.io
- LEXOFFICE_TIMEOUT: request timeout in seconds, unset waits indefinitely
- LEXOFFICE_LOG_FILE: log file, defaults to mcp-server.log next to this module

Values are read from the environment after loading a .env file if present.

ERROR HANDLING:
--------------
- Network, HTTP status and JSON decode failures come back as a fixed
  "Failed to retrieve ..." text for the tool, never as protocol errors
- Invalid arguments are rejected before any request and reported by MCP as
  tool errors
- Anything unexpected inside a tool is logged and answered with "Error: ..."
"""

import asyncio
import os
import sys
from typing import Any, Dict, List, Optional

# Ensure package imports work whether run as a module or as a script path
if __package__ is None or __package__ == "":
    sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from dotenv import load_dotenv, find_dotenv
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool
from pydantic import ValidationError

from mcp_server_lexoffice.lexoffice_client import LexofficeClient, LexofficeConfig
from mcp_server_lexoffice.logger import ServerLogger
from mcp_server_lexoffice.tools import LexofficeTools

SERVER_NAME = "lexware-office"
SERVER_VERSION = "0.1.1"

# Load environment variables (works even if CWD is not the project root)
_found_env = find_dotenv()
if not _found_env:
    _found_env = os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env")
load_dotenv(_found_env)


class ConfigurationError(ValueError):
    """Raised when the server cannot be configured from the environment."""


def load_config() -> LexofficeConfig:
    """Build the lexoffice configuration from environment variables."""
    access_token = os.getenv("LEXWARE_OFFICE_API_KEY", "").strip()
    if not access_token:
        raise ConfigurationError("LEXWARE_OFFICE_API_KEY environment variable is required")

    settings: Dict[str, Any] = {"access_token": access_token}
    if os.getenv("LEXOFFICE_API_URL"):
        settings["api_url"] = os.environ["LEXOFFICE_API_URL"]
    if os.getenv("LEXOFFICE_TIMEOUT"):
        settings["timeout"] = os.environ["LEXOFFICE_TIMEOUT"]
    if os.getenv("LEXOFFICE_LOG_FILE"):
        settings["log_file"] = os.environ["LEXOFFICE_LOG_FILE"]

    try:
        return LexofficeConfig(**settings)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid lexoffice configuration: {e}")


def create_server(client: LexofficeClient) -> Server:
    """Create the MCP server with all lexoffice tools bound to ``client``."""
    server = Server(SERVER_NAME, version=SERVER_VERSION)
    tools = LexofficeTools(client)

    @server.list_tools()
    async def list_tools() -> List[Tool]:
        """List available tools."""
        return tools.list_tools()

    @server.call_tool()
    async def call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
        """Handle tool calls."""
        try:
            return await tools.call(name, arguments)
        except ValidationError:
            # Argument errors surface as MCP tool errors, not as text replies
            raise
        except Exception as e:
            client.logger.error(f"Error handling tool call {name}", {"error": repr(e)})
            return [TextContent(type="text", text=f"Error: {e}")]

    return server


async def main() -> None:
    """Main entry point for the server."""
    logger = ServerLogger(os.getenv("LEXOFFICE_LOG_FILE") or None)

    try:
        config = load_config()
    except ConfigurationError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    async with LexofficeClient(config, logger=logger) as client:
        server = create_server(client)
        async with stdio_server() as (read_stream, write_stream):
            logger.log("Lexware Office MCP Server running on stdio")
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except Exception as e:
        ServerLogger(os.getenv("LEXOFFICE_LOG_FILE") or None).error("Fatal error in main():", {"error": repr(e)})
        sys.exit(1)


if __name__ == "__main__":
    run()
