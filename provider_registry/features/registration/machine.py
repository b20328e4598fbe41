"""Registration state and its reducer.

``reduce_registration`` is pure: it never touches the network and never
invokes callbacks. It returns the next state and the commands the
dispatcher must run to get there.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from provider_registry.config import RegistryConfig
from provider_registry.encoding import encode_mint, encode_notes_batch
from provider_registry.features.registration.validators import ProviderValidator
from provider_registry.provider import ProviderRecord, note_set_from_record
from provider_registry.receipts import extract_created_account
from provider_registry.shared.dispatch import (
    AwaitReceipt,
    CancelRequested,
    Command,
    NotifyComplete,
    NotifyError,
    ReceiptReceived,
    ResetRequested,
    ScheduleReset,
    Stage,
    SubmissionStarted,
    SubmitTransaction,
    TransactionFailed,
    TransactionSubmitted,
)
from provider_registry.shared.errors import (
    ErrorKind,
    LogDecodeError,
    NotConnected,
    NotesError,
    OnChainRevert,
    ValidationError,
)
from provider_registry.shared.validation import AddressValidator


class RegistrationPhase(Enum):
    IDLE = "idle"
    MINTING = "minting"
    SETTING_NOTES = "setting_notes"
    COMPLETE = "complete"


ACTIVE_PHASES = (RegistrationPhase.MINTING, RegistrationPhase.SETTING_NOTES)


@dataclass(frozen=True)
class RegistrationState:
    phase: RegistrationPhase = RegistrationPhase.IDLE
    minted_account_address: str | None = None
    pending_record: ProviderRecord | None = None
    last_error: str | None = None
    error_kind: ErrorKind | None = None
    error_cause: ErrorKind | None = None
    attempt_id: int = 0
    tx_hash: str | None = None
    signer_address: str | None = None
    # Set from the moment the adapter starts signing until a hash or failure.
    submitting: bool = False
    # Account minted by a failed attempt whose notes were never written.
    orphaned_account_address: str | None = None

    @property
    def is_active(self) -> bool:
        return self.phase in ACTIVE_PHASES

    @property
    def in_flight(self) -> bool:
        return self.is_active and (self.submitting or self.tx_hash is not None)


@dataclass(frozen=True)
class StartRegistration:
    record: ProviderRecord
    signer: str | None


@dataclass(frozen=True)
class ResumeRegistration:
    record: ProviderRecord
    account_address: str
    signer: str | None


def notes_payload(record: ProviderRecord, config: RegistryConfig) -> bytes:
    return encode_notes_batch(
        note_set_from_record(record).pairs(),
        config.hypermap_address,
        config.multicall_address,
    )


def _validate_record(record: ProviderRecord, config: RegistryConfig) -> None:
    result = ProviderValidator.validate_record(record)
    if not result.is_valid:
        raise ValidationError(result.error_message or "Invalid provider record")
    notes_payload(record, config)


def _reject(state: RegistrationState, error: Exception, kind: ErrorKind):
    return state, [NotifyError(str(error), kind)]


def _fail(
    state: RegistrationState,
    message: str,
    kind: ErrorKind,
    cause: ErrorKind | None = None,
) -> tuple[RegistrationState, list[Command]]:
    """Back to Idle at once, keeping what the caller needs to retry or resume."""
    orphaned = state.orphaned_account_address
    if state.phase is RegistrationPhase.SETTING_NOTES:
        orphaned = state.minted_account_address

    idle = RegistrationState(
        attempt_id=state.attempt_id,
        last_error=message,
        error_kind=kind,
        error_cause=cause or kind,
        orphaned_account_address=orphaned,
    )
    return idle, [NotifyError(message, kind)]


def _notes_failure(
    state: RegistrationState, detail: str, cause: ErrorKind
) -> tuple[RegistrationState, list[Command]]:
    account = state.minted_account_address
    error = NotesError(
        f"Setting notes failed: {detail}. "
        f"The provider entry was minted at {account}; "
        "resume the registration to write its notes.",
        account_address=account,
        cause=cause,
    )
    return _fail(state, str(error), error.kind, error.cause)


def _begin_notes(
    state: RegistrationState,
    config: RegistryConfig,
    record: ProviderRecord,
    account_address: str,
) -> tuple[RegistrationState, list[Command]]:
    new_state = replace(
        state,
        phase=RegistrationPhase.SETTING_NOTES,
        minted_account_address=account_address,
        tx_hash=None,
        submitting=False,
    )
    return new_state, [
        SubmitTransaction(
            attempt_id=state.attempt_id,
            stage=Stage.NOTES,
            payload=notes_payload(record, config),
            target=account_address,
            signer=state.signer_address,
            gas_hint=config.registration_notes_gas,
        )
    ]


def _start(
    state: RegistrationState, event: StartRegistration, config: RegistryConfig
) -> tuple[RegistrationState, list[Command]]:
    if state.phase is not RegistrationPhase.IDLE:
        return state, []
    if not event.signer:
        return _reject(state, NotConnected(), ErrorKind.NOT_CONNECTED)

    try:
        _validate_record(event.record, config)
        payload = encode_mint(event.signer, event.record.name)
    except ValidationError as e:
        return _reject(state, e, ErrorKind.VALIDATION)

    attempt_id = state.attempt_id + 1
    new_state = RegistrationState(
        phase=RegistrationPhase.MINTING,
        pending_record=event.record,
        attempt_id=attempt_id,
        signer_address=event.signer,
    )
    return new_state, [
        SubmitTransaction(
            attempt_id=attempt_id,
            stage=Stage.MINT,
            payload=payload,
            target=config.minter_address,
            signer=event.signer,
        )
    ]


def _resume(
    state: RegistrationState, event: ResumeRegistration, config: RegistryConfig
) -> tuple[RegistrationState, list[Command]]:
    if state.phase is not RegistrationPhase.IDLE:
        return state, []
    if not event.signer:
        return _reject(state, NotConnected(), ErrorKind.NOT_CONNECTED)

    address = AddressValidator.validate(event.account_address, "Account address")
    if not address.is_valid:
        return _reject(
            state, ValidationError(address.error_message), ErrorKind.VALIDATION
        )
    try:
        _validate_record(event.record, config)
    except ValidationError as e:
        return _reject(state, e, ErrorKind.VALIDATION)

    started = RegistrationState(
        phase=RegistrationPhase.SETTING_NOTES,
        pending_record=event.record,
        attempt_id=state.attempt_id + 1,
        signer_address=event.signer,
    )
    return _begin_notes(started, config, event.record, address.normalized_value)


def _stage_matches(state: RegistrationState, attempt_id: int, stage: Stage) -> bool:
    if attempt_id != state.attempt_id:
        return False
    if stage is Stage.MINT:
        return state.phase is RegistrationPhase.MINTING
    if stage is Stage.NOTES:
        return state.phase is RegistrationPhase.SETTING_NOTES
    return False


def _on_submission_started(
    state: RegistrationState, event: SubmissionStarted
) -> tuple[RegistrationState, list[Command]]:
    if not _stage_matches(state, event.attempt_id, event.stage):
        return state, []
    if state.submitting or state.tx_hash:
        return state, []
    return replace(state, submitting=True), []


def _on_submitted(
    state: RegistrationState, event: TransactionSubmitted
) -> tuple[RegistrationState, list[Command]]:
    if not _stage_matches(state, event.attempt_id, event.stage) or state.tx_hash:
        return state, []
    return replace(state, tx_hash=event.tx_hash, submitting=False), [
        AwaitReceipt(event.attempt_id, event.stage, event.tx_hash)
    ]


def _on_receipt(
    state: RegistrationState, event: ReceiptReceived, config: RegistryConfig
) -> tuple[RegistrationState, list[Command]]:
    if not _stage_matches(state, event.attempt_id, event.stage):
        return state, []

    receipt = event.receipt
    if event.stage is Stage.MINT:
        if not receipt.success:
            return _fail(
                state, f"Minting failed: {OnChainRevert()}", ErrorKind.ON_CHAIN_REVERT
            )
        account = extract_created_account(receipt.logs, config.account_created_topic)
        if account is None:
            return _fail(state, str(LogDecodeError()), ErrorKind.LOG_DECODE)
        return _begin_notes(state, config, state.pending_record, account)

    if not receipt.success:
        return _notes_failure(state, str(OnChainRevert()), ErrorKind.ON_CHAIN_REVERT)

    complete = replace(
        state,
        phase=RegistrationPhase.COMPLETE,
        tx_hash=None,
        last_error=None,
        error_kind=None,
        error_cause=None,
        orphaned_account_address=None,
    )
    return complete, [
        NotifyComplete(state.minted_account_address),
        ScheduleReset(state.attempt_id, config.reset_delay),
    ]


def _on_failed(
    state: RegistrationState, event: TransactionFailed
) -> tuple[RegistrationState, list[Command]]:
    if not _stage_matches(state, event.attempt_id, event.stage):
        return state, []

    if event.stage is Stage.MINT:
        return _fail(state, f"Minting failed: {event.message}", event.kind)
    return _notes_failure(state, event.message, event.kind)


def reduce_registration(
    state: RegistrationState, event: object, config: RegistryConfig
) -> tuple[RegistrationState, list[Command]]:
    if isinstance(event, StartRegistration):
        return _start(state, event, config)
    if isinstance(event, ResumeRegistration):
        return _resume(state, event, config)
    if isinstance(event, SubmissionStarted):
        return _on_submission_started(state, event)
    if isinstance(event, TransactionSubmitted):
        return _on_submitted(state, event)
    if isinstance(event, ReceiptReceived):
        return _on_receipt(state, event, config)
    if isinstance(event, TransactionFailed):
        return _on_failed(state, event)
    if isinstance(event, ResetRequested):
        if (
            event.attempt_id != state.attempt_id
            or state.phase is not RegistrationPhase.COMPLETE
        ):
            return state, []
        return RegistrationState(attempt_id=state.attempt_id), []
    if isinstance(event, CancelRequested):
        if state.in_flight or state.phase is RegistrationPhase.IDLE:
            return state, []
        # Bumping the attempt id orphans any late events from the cancelled attempt.
        return RegistrationState(attempt_id=state.attempt_id + 1), []
    return state, []


def registration_step_text(state: RegistrationState) -> str:
    if state.phase is RegistrationPhase.MINTING:
        if state.tx_hash is None:
            return "Creating provider entry on blockchain..."
        return "Waiting for transaction confirmation..."
    if state.phase is RegistrationPhase.SETTING_NOTES:
        if state.tx_hash is None:
            return "Setting provider metadata notes..."
        return "Waiting for notes transaction confirmation..."
    if state.phase is RegistrationPhase.COMPLETE:
        return "Provider successfully registered on-chain!"
    if state.last_error:
        return f"Registration failed: {state.last_error}"
    return "Initializing..."
