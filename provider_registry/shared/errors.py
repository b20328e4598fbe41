"""Error taxonomy for provider registration and note updates."""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    VALIDATION = "validation"
    NOT_CONNECTED = "not_connected"
    SUBMISSION = "submission"
    CONFIRMATION = "confirmation"
    ON_CHAIN_REVERT = "on_chain_revert"
    LOG_DECODE = "log_decode"
    NOTES = "notes"


class RegistryError(Exception):
    kind: ErrorKind = ErrorKind.SUBMISSION

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        return self.message


class ValidationError(RegistryError, ValueError):
    """Malformed input rejected before any network interaction."""

    kind = ErrorKind.VALIDATION


class NotConnected(RegistryError):
    kind = ErrorKind.NOT_CONNECTED

    def __init__(self, message: str = "Wallet not connected"):
        super().__init__(message)


class SubmissionError(RegistryError):
    """The signer rejected the transaction or the RPC node refused it."""

    kind = ErrorKind.SUBMISSION


class ConfirmationError(RegistryError):
    """No receipt could be obtained for a submitted transaction."""

    kind = ErrorKind.CONFIRMATION


class OnChainRevert(RegistryError):
    kind = ErrorKind.ON_CHAIN_REVERT

    def __init__(
        self,
        message: str = "Transaction failed on-chain - the contract call reverted",
        tx_hash: str | None = None,
    ):
        super().__init__(message)
        self.tx_hash = tx_hash


class LogDecodeError(RegistryError):
    kind = ErrorKind.LOG_DECODE

    def __init__(
        self,
        message: str = "Could not extract TBA address from transaction logs.",
    ):
        super().__init__(message)


class NotesError(RegistryError):
    """Writing notes failed after the account was minted."""

    kind = ErrorKind.NOTES

    def __init__(
        self,
        message: str,
        account_address: str | None = None,
        cause: ErrorKind | None = None,
    ):
        super().__init__(message)
        self.account_address = account_address
        self.cause = cause


__all__ = [
    "ErrorKind",
    "RegistryError",
    "ValidationError",
    "NotConnected",
    "SubmissionError",
    "ConfirmationError",
    "OnChainRevert",
    "LogDecodeError",
    "NotesError",
]
