"""Structured logging configuration for the Firebase Storage client."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from loguru import logger

LOGGER_NAMESPACE = "firebase_storage"


class JSONFormatter:
    """JSON formatter for structured logging."""

    def __call__(self, record: dict[str, Any]) -> str:
        """Format log record as a single JSON line."""
        log_data = {
            "timestamp": record["time"].isoformat(),
            "level": record["level"].name,
            "message": record["message"],
            "module": record.get("module", ""),
            "function": record.get("function", ""),
            "line": record.get("line", 0),
        }

        exception = record.get("exception")
        if exception:
            log_data["exception"] = {
                "type": exception.type.__name__ if exception.type else None,
                "value": str(exception.value) if exception.value else None,
            }

        if record.get("extra"):
            log_data.update(record["extra"])

        # loguru treats the returned string as a format template
        serialized = json.dumps(log_data, ensure_ascii=False, default=str)
        return serialized.replace("{", "{{").replace("}", "}}") + "\n"


TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def setup_logging(
    *,
    level: str = "INFO",
    json_format: bool = False,
    log_file: Path | None = None,
) -> list[int]:
    """Configure logging for applications embedding the client.

    The package keeps its logger disabled until this is called.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Whether to use JSON formatting (useful for production).
        log_file: Optional path to log file. If None, logs only to stderr.

    Returns:
        Ids of the installed handlers.
    """
    logger.remove()
    logger.enable(LOGGER_NAMESPACE)

    formatter: Any = JSONFormatter() if json_format else TEXT_FORMAT

    handler_ids = [
        logger.add(
            sys.stderr,
            format=formatter,
            level=level,
            colorize=not json_format,
        )
    ]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler_ids.append(
            logger.add(
                log_file,
                format=formatter,
                level=level,
                rotation="10 MB",
                retention="7 days",
                compression="zip",
            )
        )
    return handler_ids


__all__ = ["JSONFormatter", "LOGGER_NAMESPACE", "setup_logging"]
