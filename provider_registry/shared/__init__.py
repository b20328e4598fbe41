"""Shared utilities for Provider Registry."""

from provider_registry.shared.errors import (
    ConfirmationError,
    ErrorKind,
    LogDecodeError,
    NotConnected,
    NotesError,
    OnChainRevert,
    RegistryError,
    SubmissionError,
    ValidationError,
)
from provider_registry.shared.logging import (
    ContextAdapter,
    LoggingConfig,
    LogLevel,
    format_error_for_user,
    get_logger,
    get_user_friendly_error,
    sanitize_dict,
    sanitize_message,
    setup_logging,
)
from provider_registry.shared.network import (
    NetworkError,
    NetworkErrorType,
    RetryConfig,
    RpcClient,
    TimeoutConfig,
)
from provider_registry.shared.validation import (
    AddressValidator,
    PriceValidator,
    ValidationResult,
)

__all__ = [
    "ConfirmationError",
    "ErrorKind",
    "LogDecodeError",
    "NotConnected",
    "NotesError",
    "OnChainRevert",
    "RegistryError",
    "SubmissionError",
    "ValidationError",
    "NetworkError",
    "NetworkErrorType",
    "RetryConfig",
    "RpcClient",
    "TimeoutConfig",
    "AddressValidator",
    "PriceValidator",
    "ValidationResult",
    "ContextAdapter",
    "LoggingConfig",
    "LogLevel",
    "format_error_for_user",
    "get_logger",
    "get_user_friendly_error",
    "sanitize_dict",
    "sanitize_message",
    "setup_logging",
]
