"""Logging setup: JSON records, request correlation and redaction.

Every record emitted through the root logger:
- carries the ``request_id`` of the HTTP request being served (contextvars)
- has credentials (passwords, tokens, OTPs) replaced by ``[REDACTED]``
- has email addresses masked to ``j***@example.com``
- is rendered as one JSON object per line unless LOG_FORMAT=plain
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from logging import LogRecord
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable, Mapping

from fintrax.core.config import LogSettings, settings

REDACTED = "[REDACTED]"

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

# Fields whose value never reaches a log sink
SENSITIVE_KEYS_DEFAULT: frozenset[str] = frozenset(
    {
        "authorization",
        "token",
        "access_token",
        "refresh_token",
        "jwt_secret",
        "secret",
        "password",
        "old_password",
        "new_password",
        "password_hash",
        "otp",
        "cookie",
        "set-cookie",
    }
)

# Fields holding an email address; logged masked, not dropped
EMAIL_KEYS: frozenset[str] = frozenset({"email", "recipient", "to"})

# Built-in LogRecord attributes, never copied into the JSON payload
_RESERVED_ATTRS = frozenset(vars(LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def set_request_id(request_id: str | None) -> None:
    """Bind a correlation id to the current context."""

    _request_id_var.set(request_id)


def get_request_id() -> str | None:
    return _request_id_var.get()


def clear_request_id() -> None:
    _request_id_var.set(None)


def mask_email(value: Any) -> Any:
    """Mask the local part of an email address.

    Examples:
        >>> mask_email("jane.doe@example.com")
        'j***@example.com'
        >>> mask_email("not-an-email")
        'not-an-email'
    """

    if not isinstance(value, str) or "@" not in value:
        return value
    local, _, domain = value.partition("@")
    return f"{local[:1]}***@{domain}"


def redact(key: str, value: Any, sensitive_keys: frozenset[str] = SENSITIVE_KEYS_DEFAULT) -> Any:
    """Return the loggable form of ``value`` stored under ``key``.

    Mappings and sequences are walked recursively.
    """

    lowered = key.lower()
    if lowered in sensitive_keys:
        return REDACTED
    if lowered in EMAIL_KEYS:
        return mask_email(value)
    if isinstance(value, Mapping):
        return {k: redact(str(k), v, sensitive_keys) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(redact("", v, sensitive_keys) for v in value)
    return value


def record_extras(record: LogRecord, sensitive_keys: frozenset[str] = SENSITIVE_KEYS_DEFAULT) -> dict[str, Any]:
    """Collect the ``extra={...}`` fields of a record, redacted."""

    return {
        key: redact(key, value, sensitive_keys)
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class RequestIdFilter(logging.Filter):
    """Attach request_id from context when absent on the record."""

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        if getattr(record, "request_id", None) is None:
            request_id = get_request_id()
            if request_id:
                record.request_id = request_id
        return True


class SensitiveDataFilter(logging.Filter):
    """Redact sensitive fields on the record in place before formatting."""

    def __init__(self, sensitive_keys: Iterable[str] | None = None) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(k.lower() for k in (sensitive_keys or SENSITIVE_KEYS_DEFAULT))

    def filter(self, record: LogRecord) -> bool:  # noqa: D401
        for key, value in record_extras(record, self.sensitive_keys).items():
            setattr(record, key, value)
        return True


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def __init__(
        self,
        *,
        sensitive_keys: Iterable[str] | None = None,
        ensure_ascii: bool = True,
    ) -> None:
        super().__init__()
        self.sensitive_keys = frozenset(k.lower() for k in (sensitive_keys or SENSITIVE_KEYS_DEFAULT))
        self.ensure_ascii = ensure_ascii

    def format(self, record: LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None) or get_request_id()
        if request_id:
            payload["request_id"] = request_id

        payload.update(record_extras(record, self.sensitive_keys))

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=self.ensure_ascii)


def _build_handler(log_settings: LogSettings) -> logging.Handler:
    if log_settings.output.lower() != "file":
        return logging.StreamHandler(sys.stdout)

    file_path = Path(log_settings.file_path or "logs/fintrax.log")
    file_path.parent.mkdir(parents=True, exist_ok=True)
    if log_settings.max_bytes:
        return RotatingFileHandler(
            file_path,
            maxBytes=log_settings.max_bytes,
            backupCount=log_settings.backup_count,
            encoding="utf-8",
        )
    return logging.FileHandler(file_path, encoding="utf-8")


def configure_logging(log_settings: LogSettings | None = None, *, debug: bool = False) -> None:
    """Configure the root logger with JSON output and redaction.

    Args:
        log_settings: Log settings; defaults to the global settings.
        debug: Force DEBUG level regardless of LOG_LEVEL.
    """

    cfg = log_settings or settings.log

    level = logging.DEBUG if debug else getattr(logging, cfg.level.upper(), logging.INFO)
    handler = _build_handler(cfg)

    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())

    if cfg.format.lower() == "plain":
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Avoid double logging from uvicorn if it gets re-configured
    logging.getLogger("uvicorn").propagate = False
    logging.getLogger("uvicorn.access").propagate = False
