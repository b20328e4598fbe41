"""Centralized logging configuration for Provider Registry.

Log lines can carry signing keys, RPC URLs with embedded API keys and raw
wallet errors. Every record is redacted once, before any handler formats it,
by ``RedactingFilter``. The formatters redact again when they are used on
their own. Wallet and RPC failures are mapped to short readable messages by
``format_error_for_user``.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

ENV_PREFIX = "PROVIDER_REGISTRY"
REDACTED = "[REDACTED]"
UNEXPECTED_ERROR = "An unexpected error occurred."


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")


@dataclass
class LoggingConfig:
    log_level: LogLevel = LogLevel.INFO
    log_to_file: bool = False
    log_to_stdout: bool = False
    log_format: str = "human"
    log_dir: Path | None = None
    log_filename: str = "provider-registry.log"
    sanitize_sensitive: bool = True

    @classmethod
    def from_environment(cls) -> "LoggingConfig":
        try:
            log_level = LogLevel(os.getenv(f"{ENV_PREFIX}_LOG_LEVEL", "INFO").upper())
        except ValueError:
            log_level = LogLevel.INFO

        log_format = os.getenv(f"{ENV_PREFIX}_LOG_FORMAT", "human").lower()
        log_dir = os.getenv(f"{ENV_PREFIX}_LOG_DIR")

        return cls(
            log_level=log_level,
            log_to_file=_env_flag(f"{ENV_PREFIX}_LOG_FILE"),
            log_to_stdout=_env_flag(f"{ENV_PREFIX}_LOG_STDOUT"),
            log_format="json" if log_format == "json" else "human",
            log_dir=Path(log_dir) if log_dir else None,
        )


# (pattern, replacement) applied in order.
REDACTIONS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(
            r"(private[_-]?key['\"]?\s*[:=]\s*['\"]?)(?:0x)?[A-Fa-f0-9]{64}",
            re.IGNORECASE,
        ),
        rf"\1{REDACTED}",
    ),
    (
        re.compile(
            r"(mnemonic['\"]?\s*[:=]\s*['\"]?)[a-z]+(?:\s+[a-z]+){11,23}",
            re.IGNORECASE,
        ),
        rf"\1{REDACTED}",
    ),
    (
        re.compile(r"(password['\"]?\s*[:=]\s*['\"]?)[^\s'\"]+", re.IGNORECASE),
        rf"\1{REDACTED}",
    ),
    # Hosted RPC endpoints put the API key in the path: /v2/<key>, /v3/<key>.
    (
        re.compile(r"(https?://[^\s/]+/v\d+/)[A-Za-z0-9_-]{16,}"),
        rf"\1{REDACTED}",
    ),
    # Hashes and topics are always 0x-prefixed; a bare 32-byte hex is a key.
    (re.compile(r"(?<![0-9A-Za-z])[A-Fa-f0-9]{64}\b"), "[KEY_REDACTED]"),
]

SENSITIVE_KEYS = ("private_key", "privatekey", "password", "secret", "mnemonic", "api_key")

ADDRESS_PATTERN = re.compile(r"\b0x[0-9a-fA-F]{40}\b")


def sanitize_message(message: str, preserve_addresses: bool = True) -> str:
    if not message:
        return message
    for pattern, replacement in REDACTIONS:
        message = pattern.sub(replacement, message)
    if not preserve_addresses:
        message = ADDRESS_PATTERN.sub("[ADDRESS_REDACTED]", message)
    return message


def _sanitize_value(value: Any, preserve_addresses: bool) -> Any:
    if isinstance(value, str):
        return sanitize_message(value, preserve_addresses)
    if isinstance(value, dict):
        return sanitize_dict(value, preserve_addresses)
    if isinstance(value, (list, tuple)):
        return type(value)(_sanitize_value(item, preserve_addresses) for item in value)
    return value


def sanitize_dict(
    data: dict[str, Any], preserve_addresses: bool = True
) -> dict[str, Any]:
    return {
        key: REDACTED
        if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS)
        else _sanitize_value(value, preserve_addresses)
        for key, value in data.items()
    }


def redact_record(record: logging.LogRecord, preserve_addresses: bool = True) -> None:
    """Render and redact ``record`` in place. Safe to call more than once."""
    if getattr(record, "_redacted", False):
        return
    record.msg = sanitize_message(record.getMessage(), preserve_addresses)
    record.args = ()
    context = getattr(record, "context", None)
    if isinstance(context, dict):
        record.context = sanitize_dict(context, preserve_addresses)
    if record.exc_info and not record.exc_text:
        record.exc_text = logging.Formatter().formatException(record.exc_info)
    if record.exc_text:
        record.exc_text = sanitize_message(record.exc_text, preserve_addresses)
    record._redacted = True


class RedactingFilter(logging.Filter):
    def __init__(self, preserve_addresses: bool = True):
        super().__init__()
        self.preserve_addresses = preserve_addresses

    def filter(self, record: logging.LogRecord) -> bool:
        redact_record(record, self.preserve_addresses)
        return True


@dataclass(frozen=True)
class ErrorMapping:
    pattern: re.Pattern[str]
    user_message: str
    suggest_action: str | None = None


def _mapping(pattern: str, user_message: str, suggest_action: str) -> ErrorMapping:
    return ErrorMapping(re.compile(pattern, re.IGNORECASE), user_message, suggest_action)


ERROR_MAPPINGS: list[ErrorMapping] = [
    _mapping(
        r"user rejected|user denied|rejected by user",
        "The transaction was rejected in the wallet.",
        "Approve the request in your wallet to continue.",
    ),
    _mapping(
        r"insufficient funds|insufficient balance",
        "Insufficient funds for gas or value.",
        "Top up the signing wallet with ETH on Base and try again.",
    ),
    _mapping(
        r"nonce too low|replacement transaction underpriced|already known",
        "A conflicting transaction is already pending for this wallet.",
        "Wait for the pending transaction to confirm and try again.",
    ),
    _mapping(
        r"execution reverted|reverted",
        "The contract call reverted.",
        "Check that the name is not already taken and that you own the entry.",
    ),
    _mapping(
        r"timeout|timed out|not in the chain after",
        "Timed out waiting for the network.",
        "Check the transaction on a block explorer before retrying.",
    ),
    _mapping(
        r"connection refused|cannot connect|connection error",
        "Unable to connect to the RPC node.",
        "Check your internet connection and RPC URL.",
    ),
    _mapping(
        r"invalid.*address|address.*invalid",
        "The address provided is not valid.",
        "Please check the address format (0x followed by 40 hex digits).",
    ),
    _mapping(
        r"rate limit|too many requests|429",
        "Too many requests. Please slow down.",
        "Wait a moment and try again.",
    ),
]


def get_user_friendly_error(error: Exception | str) -> tuple[str, str | None]:
    text = str(error)
    for mapping in ERROR_MAPPINGS:
        if mapping.pattern.search(text):
            return mapping.user_message, mapping.suggest_action
    return UNEXPECTED_ERROR, None


def format_error_for_user(error: Exception | str) -> str:
    """One readable line for a wallet or RPC failure.

    Known failures become the mapped message plus its suggestion. Anything
    else keeps its own (redacted) text.
    """
    user_message, suggestion = get_user_friendly_error(error)
    if user_message == UNEXPECTED_ERROR:
        return sanitize_message(str(error)) or UNEXPECTED_ERROR
    if suggestion:
        return f"{user_message} {suggestion}"
    return user_message


class StructuredFormatter(logging.Formatter):
    """One JSON object per line."""

    def __init__(self, sanitize: bool = True, preserve_addresses: bool = True):
        super().__init__()
        self.sanitize = sanitize
        self.preserve_addresses = preserve_addresses

    def format(self, record: logging.LogRecord) -> str:
        if self.sanitize:
            redact_record(record, self.preserve_addresses)

        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        context = getattr(record, "context", None)
        if isinstance(context, dict) and context:
            log_data["context"] = context
        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            log_data["exception"] = record.exc_text

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """``time - logger - LEVEL - message [key=value ...]``."""

    def __init__(self, sanitize: bool = True, preserve_addresses: bool = True):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.sanitize = sanitize
        self.preserve_addresses = preserve_addresses

    def format(self, record: logging.LogRecord) -> str:
        if self.sanitize:
            redact_record(record, self.preserve_addresses)

        message = super().format(record)
        context = getattr(record, "context", None)
        if isinstance(context, dict) and context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            message = f"{message} [{pairs}]"
        return message


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter that attaches a ``context`` dict to every record."""

    def __init__(self, logger: logging.Logger, context: dict[str, Any] | None = None):
        super().__init__(logger, context or {})

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        context = {**(self.extra or {}), **extra.pop("context", {})}
        if context:
            extra["context"] = context
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **kwargs: Any) -> "ContextAdapter":
        return ContextAdapter(self.logger, {**(self.extra or {}), **kwargs})


_logging_initialized = False


def setup_logging(config: LoggingConfig | None = None, force: bool = False) -> None:
    global _logging_initialized

    if _logging_initialized and not force:
        return

    if config is None:
        config = LoggingConfig.from_environment()

    if config.log_format == "json":
        formatter: logging.Formatter = StructuredFormatter(sanitize=config.sanitize_sensitive)
    else:
        formatter = HumanReadableFormatter(sanitize=config.sanitize_sensitive)

    handlers: list[logging.Handler] = []
    if config.log_to_file:
        log_dir = config.log_dir or Path.home() / ".provider-registry"
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.FileHandler(log_dir / config.log_filename, mode="a", encoding="utf-8")
        )
    if config.log_to_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.log_level.value))
    if handlers:
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        for handler in handlers:
            handler.setFormatter(formatter)
            if config.sanitize_sensitive:
                handler.addFilter(RedactingFilter())
            root_logger.addHandler(handler)

    _logging_initialized = True


def get_logger(name: str, context: dict[str, Any] | None = None) -> ContextAdapter:
    return ContextAdapter(logging.getLogger(name), context)


__all__ = [
    "LogLevel",
    "LoggingConfig",
    "ContextAdapter",
    "RedactingFilter",
    "StructuredFormatter",
    "HumanReadableFormatter",
    "redact_record",
    "sanitize_message",
    "sanitize_dict",
    "get_user_friendly_error",
    "format_error_for_user",
    "setup_logging",
    "get_logger",
]
