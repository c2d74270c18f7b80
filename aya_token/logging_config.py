"""
Structured Logging Configuration Module

Token operations log through log_action with a fixed vocabulary of fields
(caller, action, account, amount, ...). JSONFormatter lifts those fields
to top-level keys of one JSON object per line.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Any, Optional


# Fields a token log record may carry, in output order
TOKEN_FIELDS = (
    "caller", "action", "account", "spender", "role",
    "amount", "legs", "total", "treasury", "batch_id", "error",
)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record with token fields as top-level keys"""

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in TOKEN_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Amounts above 2**53 stay exact: json writes Python ints verbatim
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", logger_name: str = "aya",
                  fmt: str = "json") -> logging.Logger:
    """
    Configure the token logger hierarchy with a single stream handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Root of the hierarchy, "aya" by default
        fmt: "json" for structured lines, "text" for plain lines

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(TEXT_FORMAT) if fmt == "text" else JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False
    return logger


def get_logger(name: str = "aya") -> logging.Logger:
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               caller: Optional[str] = None, action: Optional[str] = None,
               **fields: Any) -> None:
    """
    Log a token operation.

    Args:
        logger: Logger instance
        level: Level name (info, warning, ...)
        message: Human-readable message
        caller: Account that made the call
        action: Operation name, e.g. "transfer_batch"
        **fields: Further TOKEN_FIELDS values; None values are dropped

    Raises:
        TypeError: a field outside TOKEN_FIELDS
    """
    unknown = set(fields) - set(TOKEN_FIELDS)
    if unknown:
        raise TypeError(f"Unknown log fields: {sorted(unknown)}")

    levelno = getattr(logging, level.upper())
    if not logger.isEnabledFor(levelno):
        return

    fields.update(caller=caller, action=action)
    logger.log(levelno, message, extra={k: v for k, v in fields.items() if v is not None})
