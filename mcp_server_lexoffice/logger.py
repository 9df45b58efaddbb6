"""File logger for the Lexware Office MCP server.

stdout carries MCP protocol frames, so nothing here may write to it. Every
line goes to an append-only log file next to the package; errors are also
mirrored to stderr where MCP hosts surface them as diagnostics.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Union

LOG_FILE = Path(__file__).resolve().parent / "mcp-server.log"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"


class IsoFormatter(logging.Formatter):
    """Formatter stamping records with an ISO-8601 UTC timestamp."""

    def formatTime(self, record: logging.LogRecord, datefmt: Optional[str] = None) -> str:
        """Render the record time as UTC with millisecond precision."""
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_message(message: str, data: Any = None) -> str:
    """Append pretty-printed JSON data to a log message."""
    if data is None:
        return message
    return f"{message}\n{json.dumps(data, indent=2, default=str, ensure_ascii=False)}"


class ServerLogger:
    """Synchronous file logger with INFO and ERROR levels."""

    def __init__(
        self,
        log_file: Optional[Union[str, Path]] = None,
        name: str = "mcp_server_lexoffice",
    ) -> None:
        self.log_file = Path(log_file) if log_file else LOG_FILE
        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False

        # Reconfiguring the same named logger must not duplicate lines
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

        formatter = IsoFormatter(LOG_FORMAT)

        file_handler = logging.FileHandler(self.log_file, mode="a", encoding="utf-8", delay=True)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(formatter)
        self._logger.addHandler(file_handler)

        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.ERROR)
        stderr_handler.setFormatter(formatter)
        self._logger.addHandler(stderr_handler)

    def log(self, message: str, data: Any = None) -> None:
        """Write an INFO line to the log file."""
        self._logger.info(format_message(message, data))

    def error(self, message: str, data: Any = None) -> None:
        """Write an ERROR line to the log file and to stderr."""
        self._logger.error(format_message(message, data))

    def close(self) -> None:
        """Detach and close all handlers."""
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()
