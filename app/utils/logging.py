import json
import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Optional

from app.models.time_mixin import utc_now

# Service logs start with an operation tag, e.g. "[FILE_UPLOAD] Upload completed"
OPERATION_TAG = re.compile(r"^\[(?P<operation>[A-Z_]+)\]\s*")

# Third-party loggers and the level they are capped at
QUIET_LOGGERS: Dict[str, int] = {
    "uvicorn.access": logging.INFO,
    "uvicorn.error": logging.INFO,
    "fastapi": logging.INFO,
    "pymongo": logging.WARNING,
    "motor": logging.WARNING,
    "urllib3": logging.WARNING,
    "minio": logging.WARNING,
    "sentry_sdk": logging.WARNING,
}

_RESERVED_ATTRS = set(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


def split_operation(message: str):
    """Return (operation, message) with the leading [OPERATION] tag removed"""
    match = OPERATION_TAG.match(message)
    if not match:
        return None, message
    return match.group("operation"), message[match.end():]


class JSONFormatter(logging.Formatter):
    """One JSON object per line; operation tag and `extra=` fields become keys"""

    def __init__(self, app_name: str = "CloudVault"):
        super().__init__()
        self.app_name = app_name

    def format(self, record: logging.LogRecord) -> str:
        operation, message = split_operation(record.getMessage())
        payload = {
            "timestamp": utc_now().isoformat() + "Z",
            "app": self.app_name,
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        if operation:
            payload["operation"] = operation

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value if isinstance(value, (str, int, float, bool, type(None))) else str(value)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False)


class ColoredFormatter(logging.Formatter):
    """Console formatter for development, colors the level and the operation tag"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    TAG_COLOR = "\033[1;34m"
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Copy, other handlers must see the plain record
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.RESET)
        record.levelname = f"{color}{record.levelname:<8}{self.RESET}"

        operation, message = split_operation(record.getMessage())
        if operation:
            record.msg = f"{self.TAG_COLOR}{operation}{self.RESET} {message}"
            record.args = None
        return super().format(record)


def _console_handler(level: int, as_json: bool, app_name: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if as_json:
        handler.setFormatter(JSONFormatter(app_name))
    else:
        handler.setFormatter(ColoredFormatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
    return handler


def _file_handler(log_file: str, level: int, app_name: str) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter(app_name))
    return handler


def setup_logging(
    level: str = "INFO",
    app_name: str = "CloudVault",
    enable_json: bool = False,
    log_file: Optional[str] = None
) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level name
        app_name: Added to every JSON line
        enable_json: JSON console output (production) instead of colored text
        log_file: Optional rotating JSON log file
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(numeric_level)

    root_logger.addHandler(_console_handler(numeric_level, enable_json, app_name))
    if log_file:
        root_logger.addHandler(_file_handler(log_file, numeric_level, app_name))

    configure_loggers()
    logging.getLogger(app_name).info(f"Logging configured - level: {level}, json: {enable_json}")


def configure_loggers(overrides: Optional[Dict[str, int]] = None) -> None:
    for name, level in {**QUIET_LOGGERS, **(overrides or {})}.items():
        logging.getLogger(name).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
