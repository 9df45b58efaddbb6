from mcp_server_lexoffice.server import run

run()
