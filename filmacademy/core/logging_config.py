"""Logging configuration.

Console output (colored locally), optional rotating files and JSON records for aggregation.
Request-scoped contextvars (request_id/user_id/ip) are stamped onto every record so a
single request can be followed from middleware to service layer.
"""

import json
import logging
import logging.handlers
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_ctx: ContextVar[Optional[int]] = ContextVar("user_id", default=None)
ip_ctx: ContextVar[Optional[str]] = ContextVar("ip_address", default=None)

_CONTEXT_VARS = {
    "request_id": request_id_ctx,
    "user_id": user_id_ctx,
    "ip_address": ip_ctx,
}

_PLAIN_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
)
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Record attributes copied into JSON output when a caller passed them via `extra=`.
_JSON_EXTRA_FIELDS = (
    "request_id",
    "user_id",
    "ip_address",
    "endpoint",
    "method",
    "status_code",
    "error_code",
    "course_id",
    "quiz_id",
    "certificate_number",
)


class JSONFormatter(logging.Formatter):
    """Emit one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        for field in _JSON_EXTRA_FIELDS:
            if hasattr(record, field):
                payload[field] = getattr(record, field)
        if hasattr(record, "duration"):
            payload["duration_ms"] = record.duration
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """ANSI-colored level names for terminals."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class ContextEnricher(logging.Filter):
    """Copy bound contextvars onto records that don't already carry them."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        for attr, var in _CONTEXT_VARS.items():
            value = var.get()
            if value and not hasattr(record, attr):
                setattr(record, attr, value)
        return True


def bind_request_context(
    *,
    request_id: Optional[str] = None,
    user_id: Optional[int] = None,
    ip_address: Optional[str] = None,
):
    """Bind request context into contextvars; returns tokens for reset."""
    values = {"request_id": request_id, "user_id": user_id, "ip_address": ip_address}
    return [
        (key, _CONTEXT_VARS[key].set(value))
        for key, value in values.items()
        if value is not None
    ]


def reset_request_context(tokens) -> None:
    """Undo `bind_request_context`."""
    for key, token in reversed(tokens):
        _CONTEXT_VARS[key].reset(token)


def _reset_handlers(logger: logging.Logger) -> None:
    """Close and detach existing handlers so repeated setup doesn't leak descriptors."""
    for handler in list(logger.handlers):
        try:
            handler.flush()
        finally:
            handler.close()
            logger.removeHandler(handler)


def _rotating_handler(
    path: Path, level: int, formatter: logging.Formatter, max_bytes: int, backups: int
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backups,
        encoding="utf-8",
        delay=True,
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    app_name: str = "filmacademy",
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    use_json: bool = False,
    use_colors: bool = True,
) -> None:
    """Configure root logging.

    Args:
        log_level: Minimum logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_dir: Directory for log files; None logs to console only.
        app_name: Prefix for log file names.
        max_bytes: Max size per log file before rotation.
        backup_count: Number of rotated files to keep.
        use_json: Use JSON for file handlers.
        use_colors: Add ANSI colors to console output.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    context_filter = ContextEnricher()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    _reset_handlers(root_logger)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    formatter_cls = ColoredFormatter if use_colors else logging.Formatter
    console_handler.setFormatter(formatter_cls(_PLAIN_FORMAT, datefmt=_DATE_FORMAT))
    root_logger.addHandler(console_handler)

    access_logger = logging.getLogger("access")
    _reset_handlers(access_logger)
    access_logger.setLevel(logging.INFO)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        def _file_formatter(fmt: str) -> logging.Formatter:
            if use_json:
                return JSONFormatter()
            return logging.Formatter(fmt, datefmt=_DATE_FORMAT)

        root_logger.addHandler(
            _rotating_handler(
                log_path / f"{app_name}.log",
                logging.DEBUG,
                _file_formatter(_PLAIN_FORMAT),
                max_bytes,
                backup_count,
            )
        )
        root_logger.addHandler(
            _rotating_handler(
                log_path / f"{app_name}_error.log",
                logging.ERROR,
                _file_formatter(_PLAIN_FORMAT),
                max_bytes,
                backup_count,
            )
        )
        access_logger.addHandler(
            _rotating_handler(
                log_path / f"{app_name}_access.log",
                logging.INFO,
                _file_formatter(
                    "%(asctime)s | %(method)s %(endpoint)s | Status: %(status_code)s"
                    " | Duration: %(duration)sms | IP: %(ip_address)s"
                ),
                max_bytes,
                backup_count,
            )
        )
        access_logger.propagate = False
    else:
        access_logger.propagate = True

    # Logger-level filters skip propagated records, so enrich at the handlers.
    for handler in root_logger.handlers + access_logger.handlers:
        handler.addFilter(context_filter)

    for noisy in ("urllib3", "asyncio", "multipart", "sqlalchemy.engine"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.info(
        f"Logging configured. Level: {log_level}, Directory: {log_dir or 'console only'}"
    )


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)


def log_request(
    method: str,
    endpoint: str,
    status_code: int,
    duration_ms: float,
    ip_address: str,
    user_id: Optional[int] = None,
    request_id: Optional[str] = None,
) -> None:
    """Write one access-log line for an HTTP request."""
    extra = {
        "method": method,
        "endpoint": endpoint,
        "status_code": status_code,
        "duration": f"{duration_ms:.2f}",
        "ip_address": ip_address,
    }
    if user_id:
        extra["user_id"] = user_id
    if request_id:
        extra["request_id"] = request_id

    logging.getLogger("access").info(
        f"{method} {endpoint} - {status_code} - {duration_ms:.2f}ms", extra=extra
    )
