#!/usr/bin/env python3
"""
Configuration and logging setup shared by the MCP servers.

Both servers talk MCP over stdio, so stdout belongs to the protocol and
every log line goes to stderr.
"""

import logging
import os
import sys
from pathlib import Path

# Configuration
TODOS_FILE_PATH_ENV = "TODOS_FILE_PATH"
LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ConfigurationError(RuntimeError):
    """Raised when required startup configuration is missing"""


def setup_logging(level: str = None):
    """Send log output to stderr at the configured level"""
    level_name = (level or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        stream=sys.stderr,
        format=LOG_FORMAT,
    )


def get_todos_file_path(environ=None) -> Path:
    """Return the todoodles file path from the environment"""
    environ = os.environ if environ is None else environ
    raw_path = environ.get(TODOS_FILE_PATH_ENV, "").strip()

    if not raw_path:
        raise ConfigurationError(
            f"{TODOS_FILE_PATH_ENV} environment variable is not set. "
            f"Please set {TODOS_FILE_PATH_ENV} in your environment or MCP client configuration"
        )

    return Path(raw_path).expanduser()
