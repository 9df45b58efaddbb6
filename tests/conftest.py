"""Shared fixtures for lexoffice MCP server tests."""

import uuid

import httpx
import pytest

from mcp_server_lexoffice.lexoffice_client import LexofficeClient, LexofficeConfig
from mcp_server_lexoffice.logger import ServerLogger


@pytest.fixture
def log_file(tmp_path):
    return tmp_path / "mcp-server.log"


@pytest.fixture
def server_logger(log_file):
    logger = ServerLogger(log_file, name=f"lexoffice-test-{uuid.uuid4().hex}")
    yield logger
    logger.close()


@pytest.fixture
def config():
    return LexofficeConfig(access_token="test-token")


@pytest.fixture
def make_client(config, server_logger):
    """Build a client whose upstream is answered by ``handler``.

    Every request seen by the fake upstream is appended to ``client.requests``.
    """

    def factory(handler):
        requests = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        client = LexofficeClient(config, logger=server_logger, transport=httpx.MockTransport(recording_handler))
        client.requests = requests
        return client

    return factory


@pytest.fixture
def json_upstream():
    """Factory for an upstream that answers every request with ``payload``."""

    def make(payload, status_code=200):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, json=payload)

        return handler

    return make
