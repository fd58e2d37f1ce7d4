"""
Logging setup shared by the CLI and the Lambda handler.

The Lambda handler logs JSON lines for CloudWatch Insights; the CLI logs one
human-readable line per record. Both pass every record through
RedactingFilter, since provider errors can echo the EOD token or the
CoinMarketCap key back in their message.

Usage:
    from currencytracker.logging_config import setup_logging, get_logger

    setup_logging()  # JSON when AWS_LAMBDA_FUNCTION_NAME is set
    logger = get_logger(__name__)

    logger.info("Updated range: %s", target_range, extra={'updated_cells': 3})
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .secure_logging import redact_sensitive_data

PACKAGE_PREFIX = 'currencytracker.'

# Attributes every LogRecord carries; anything else came in through extra=
_RECORD_ATTRS = frozenset(
    logging.LogRecord('', logging.INFO, '', 0, '', None, None).__dict__
) | {'message', 'asctime'}

# Third-party loggers that are chatty at INFO
_QUIET_LOGGERS = {
    'googleapiclient.discovery_cache': logging.ERROR,
    'googleapiclient.discovery': logging.WARNING,
    'urllib3': logging.WARNING,
    'botocore': logging.WARNING,
}


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    """Fields passed through ``extra=`` on the logging call."""
    return {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}


class RedactingFilter(logging.Filter):
    """Strip credentials from the rendered message before any handler sees it."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_sensitive_data(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record:

    {"timestamp": "2026-10-19T08:00:00.000+00:00", "level": "ERROR",
     "logger": "currencytracker.pipeline", "message": "Sheet update failed: ...",
     "range": "Crypto!C2:C4", "kind": "transport"}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec='milliseconds'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        for key, value in record_extras(record).items():
            log_obj.setdefault(key, value)

        if record.exc_info:
            log_obj['exception'] = self.formatException(record.exc_info)

        # RunReport summaries and enum kinds fall back to str()
        return json.dumps(log_obj, default=str)


class HumanFormatter(logging.Formatter):
    """
    2026-10-19 08:00:00 ERROR [pipeline] Sheet update failed: ... (range=Crypto!C2:C4, kind=transport)
    """

    LEVEL_COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: Optional[bool] = None):
        super().__init__(datefmt='%Y-%m-%d %H:%M:%S')
        self.use_colors = sys.stderr.isatty() if use_colors is None else use_colors

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname.ljust(5)
        if self.use_colors:
            level = f"{self.LEVEL_COLORS.get(record.levelname, '')}{level}{self.RESET}"

        name = record.name
        if name.startswith(PACKAGE_PREFIX):
            name = name[len(PACKAGE_PREFIX):]

        output = f"{self.formatTime(record, self.datefmt)} {level} [{name}] {record.getMessage()}"

        extras = record_extras(record)
        if extras:
            output += " (" + ", ".join(f"{k}={v}" for k, v in extras.items()) + ")"

        if record.exc_info:
            output += "\n" + self.formatException(record.exc_info)
        return output


def setup_logging(json_format: Optional[bool] = None, level: Optional[str] = None) -> None:
    """
    Configure the root logger.

    Args:
        json_format: JSON lines (True) or human-readable (False). None picks
            JSON inside Lambda (AWS_LAMBDA_FUNCTION_NAME set).
        level: DEBUG, INFO, WARNING or ERROR. Defaults to LOG_LEVEL, then INFO.
    """
    if json_format is None:
        json_format = 'AWS_LAMBDA_FUNCTION_NAME' in os.environ

    level_name = (level or os.getenv('LOG_LEVEL') or 'INFO').upper()
    numeric_level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_format else HumanFormatter())
    handler.addFilter(RedactingFilter())

    root = logging.getLogger()
    # Lambda reuses the interpreter between invocations
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(max(quiet_level, numeric_level))


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
