"""Logging helpers for dex-access.

The library only ever calls logging.getLogger(__name__); handlers are
installed by the application through setup_logging().
"""

import json
import logging
import re
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler

from dex_access.core.config import LogConfig
from dex_access.core.constants import DEFAULT_LOG, LOG_FILE_BACKUP_COUNT, LOG_FILE_MAX_BYTES

_LOG_RECORD_RESERVED_FIELDS = set(logging.makeLogRecord({}).__dict__.keys()) | {"message", "asctime"}
_REDACTED_VALUE = "[REDACTED]"
_SENSITIVE_FIELD_PARTS = ("token", "secret", "password", "api_key", "apikey", "authorization")
_SENSITIVE_VALUE_PATTERN = re.compile(
    r"(?i)(?P<key>\b(?:bot[_-]?token|token|secret|password|api[_-]?key|authorization)\b)"
    r"(?P<separator>\s*[:=]\s*)"
    r"(?!\[REDACTED\])"
    r"(?P<value>\"[^\"]*\"|'[^']*'|[^,\s;}\]]+)"
)
_BEARER_PATTERN = re.compile(r"(?i)\b(bearer|bot)\s+([A-Za-z0-9._~+/=-]{16,})")


def _redact_message(message: str) -> str:
    # Bearer tokens first: the key pattern would otherwise consume the scheme word only
    redacted = _BEARER_PATTERN.sub(lambda m: f"{m.group(1)} {_REDACTED_VALUE}", message)
    return _SENSITIVE_VALUE_PATTERN.sub(
        lambda m: f"{m.group('key')}{m.group('separator')}{_REDACTED_VALUE}", redacted
    )


def _is_sensitive_field(name: str) -> bool:
    lowered = name.lower()
    return any(part in lowered for part in _SENSITIVE_FIELD_PARTS)


def _record_extras(record: logging.LogRecord) -> dict[str, object]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if isinstance(key, str) and key not in _LOG_RECORD_RESERVED_FIELDS and not key.startswith("_")
    }


class SensitiveDataFilter(logging.Filter):
    """Best-effort redaction of credentials in log messages and extras."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except Exception:
            # Keep logging alive when a message has bad placeholders
            message = f"{record.msg} [log-message-format-error]"
        record.msg = _redact_message(message)
        record.args = ()
        for key, value in _record_extras(record).items():
            if _is_sensitive_field(key):
                record.__dict__[key] = _REDACTED_VALUE
            elif isinstance(value, str):
                record.__dict__[key] = _redact_message(value)
        return True


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging output.

    Each log record is a single JSON object on one line.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "thread_name": record.threadName,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Custom attributes passed through logging's `extra`
        for key, value in _record_extras(record).items():
            log_entry.setdefault(key, value)

        return json.dumps(log_entry, default=str)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges contextual fields into record extras."""

    def process(self, msg, kwargs):
        merged_extra = dict(self.extra)
        extra = kwargs.get("extra")
        if isinstance(extra, dict):
            merged_extra.update(extra)
        kwargs["extra"] = merged_extra
        return msg, kwargs


def with_log_context(
    logger: logging.Logger | logging.LoggerAdapter, **context: object
) -> logging.Logger | logging.LoggerAdapter:
    """Return a logger enriched with persistent contextual fields.

    Fields set to None are dropped. Adapters are flattened so context
    accumulates instead of nesting.
    """
    base = logger
    existing: dict[str, object] = {}
    if isinstance(logger, logging.LoggerAdapter):
        existing = dict(logger.extra or {})
        base = logger.logger
    if not isinstance(base, logging.Logger):
        # Test doubles pass through untouched
        return logger
    existing.update({k: v for k, v in context.items() if v is not None})
    return ContextLoggerAdapter(base, existing)


def setup_logging(
    level: str | None = None,
    log_format: str | None = None,
    log_file: str | None = None,
    config: LogConfig | None = None,
) -> logging.Logger:
    """Install stdout (and optional rotating file) handlers on the root logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL); overrides config.level
        log_format: "text" or "json" for structured logging; overrides config.format
        log_file: Optional path for a RotatingFileHandler; overrides config.file
        config: LogConfig supplying anything not passed explicitly (default: DEFAULT_LOG)

    Returns:
        The package logger
    """
    config = config or DEFAULT_LOG
    level = level or config.level
    log_format = log_format or config.format
    log_file = log_file or config.file

    level_name = (level or "INFO").upper()
    if level_name not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        print(f"Warning: Invalid log level '{level}', using INFO", file=sys.stderr)
        level_name = "INFO"
    numeric_level = getattr(logging, level_name)

    for handler in logging.root.handlers[:]:
        handler.close()
        logging.root.removeHandler(handler)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(RotatingFileHandler(log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUP_COUNT))

    if log_format.lower() == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        handler.addFilter(SensitiveDataFilter())
        logging.root.addHandler(handler)
    logging.root.setLevel(numeric_level)

    logger = logging.getLogger("dex_access")
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    logger.debug(f"Logging initialized (level={level_name}, format={log_format}, file={log_file or 'none'})")
    return logger
