"""
Bitget Connector - Logging Setup.

============================================================
PURPOSE
============================================================
Console logging for command-line use.

Log records go to stderr so stdout stays reserved for JSON
results. Request/response entries are already masked by
RequestLogger before they reach a handler.

============================================================
"""

import json
import logging
import sys


LOG_FORMATS = ("json", "text")


def configure_logging(level: str = "INFO", log_format: str = "text") -> logging.Logger:
    """
    Install a single console handler on the root logger.

    Args:
        level: Log level name
        log_format: "json" or "text"

    Returns:
        The package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "message": "%(message)s",
            })
        )
    else:
        formatter = logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    return logging.getLogger("bitget_connector")
