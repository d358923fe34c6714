# Copyright 2025 podgate
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Structured logging configuration for podgate.

Environment Variables:
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default: INFO
    LOG_FORMAT: Output format (console, json, auto). Default: auto
    LOG_FILE: Optional file path for log output. Default: None (stderr only)

Example:
    import structlog
    from podgate.logging import configure_structlog

    configure_structlog()
    logger = structlog.get_logger(__name__)
    logger.info("feed_served", episodes=12)
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, List

import structlog
from structlog.dev import ConsoleRenderer
from structlog.processors import JSONRenderer


def get_log_level() -> int:
    """Get log level from environment variable."""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def get_log_format() -> str:
    """Get log format from environment variable.

    Formats:
        - console: Colored output for development
        - json: JSON output for production
        - auto: console if stderr is a TTY, json otherwise (default)
    """
    format_str = os.getenv("LOG_FORMAT", "auto").lower()
    if format_str == "auto":
        return "console" if sys.stderr.isatty() else "json"
    return format_str


def _get_renderer(log_format: str) -> Any:
    if log_format == "console":
        return ConsoleRenderer(colors=sys.stderr.isatty())
    return JSONRenderer()


def configure_structlog() -> None:
    """Configure structlog from LOG_LEVEL, LOG_FORMAT and LOG_FILE.

    Call once at startup, before loggers are used. Output goes to stderr,
    and additionally to a rotating file when LOG_FILE is set.
    """
    log_level = get_log_level()
    log_file = os.getenv("LOG_FILE")

    # Order matters: processors run sequentially on each log message
    processors: List[Any] = [
        # Pulls in request_id etc. bound by LoggingMiddleware
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _get_renderer(get_log_format()),
    ]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)

        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(stderr_handler)

        # 10MB max, 5 backups
        file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(file_handler)

        logger_factory = structlog.stdlib.LoggerFactory()
    else:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=True,
    )
