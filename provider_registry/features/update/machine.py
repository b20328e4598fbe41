"""Note-update state and its reducer."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from provider_registry.config import RegistryConfig
from provider_registry.encoding import (
    ExecuteMode,
    encode_notes_batch,
    encode_set_note,
    encode_tba_execute,
)
from provider_registry.provider import NoteSet
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
    NotConnected,
    OnChainRevert,
    ValidationError,
)
from provider_registry.shared.validation import AddressValidator


class UpdatePhase(Enum):
    IDLE = "idle"
    UPDATING = "updating"
    COMPLETE = "complete"


@dataclass(frozen=True)
class UpdateState:
    phase: UpdatePhase = UpdatePhase.IDLE
    last_error: str | None = None
    error_kind: ErrorKind | None = None
    attempt_id: int = 0
    tx_hash: str | None = None
    submitting: bool = False
    account_address: str | None = None

    @property
    def in_flight(self) -> bool:
        return self.phase is UpdatePhase.UPDATING and (
            self.submitting or self.tx_hash is not None
        )


@dataclass(frozen=True)
class StartUpdate:
    account_address: str
    notes: NoteSet
    signer: str | None


def update_call(
    notes: NoteSet, config: RegistryConfig
) -> tuple[bytes, int | None]:
    """Payload for the account's ``execute`` plus the gas hint to send it with.

    A single note is a plain call from the account to the registry. Several
    notes are batched through multicall in delegate mode.
    """
    if len(notes) == 1:
        (note,) = notes
        payload = encode_tba_execute(
            config.hypermap_address,
            0,
            encode_set_note(note.key, note.value),
            ExecuteMode.CALL,
        )
        return payload, None

    payload = encode_notes_batch(
        notes.pairs(), config.hypermap_address, config.multicall_address
    )
    return payload, config.update_multicall_gas


def _fail(
    state: UpdateState, detail: str, kind: ErrorKind
) -> tuple[UpdateState, list[Command]]:
    message = f"Update failed: {detail}"
    idle = UpdateState(
        attempt_id=state.attempt_id,
        last_error=message,
        error_kind=kind,
        account_address=state.account_address,
    )
    return idle, [NotifyError(message, kind)]


def _start(
    state: UpdateState, event: StartUpdate, config: RegistryConfig
) -> tuple[UpdateState, list[Command]]:
    if state.phase is not UpdatePhase.IDLE:
        return state, []
    if not event.notes:
        return state, [NotifyComplete(True)]
    if not event.signer:
        return state, [NotifyError(str(NotConnected()), ErrorKind.NOT_CONNECTED)]

    address = AddressValidator.validate(event.account_address, "Account address")
    try:
        if not address.is_valid:
            raise ValidationError(address.error_message or "Invalid account address")
        payload, gas_hint = update_call(event.notes, config)
    except ValidationError as e:
        return state, [NotifyError(str(e), ErrorKind.VALIDATION)]

    attempt_id = state.attempt_id + 1
    new_state = UpdateState(
        phase=UpdatePhase.UPDATING,
        attempt_id=attempt_id,
        account_address=address.normalized_value,
    )
    return new_state, [
        SubmitTransaction(
            attempt_id=attempt_id,
            stage=Stage.UPDATE,
            payload=payload,
            target=address.normalized_value,
            signer=event.signer,
            gas_hint=gas_hint,
        )
    ]


def _current(state: UpdateState, attempt_id: int) -> bool:
    return attempt_id == state.attempt_id and state.phase is UpdatePhase.UPDATING


def reduce_update(
    state: UpdateState, event: object, config: RegistryConfig
) -> tuple[UpdateState, list[Command]]:
    if isinstance(event, StartUpdate):
        return _start(state, event, config)

    if isinstance(event, SubmissionStarted):
        if not _current(state, event.attempt_id) or state.submitting or state.tx_hash:
            return state, []
        return replace(state, submitting=True), []

    if isinstance(event, TransactionSubmitted):
        if not _current(state, event.attempt_id) or state.tx_hash:
            return state, []
        return replace(state, tx_hash=event.tx_hash, submitting=False), [
            AwaitReceipt(event.attempt_id, event.stage, event.tx_hash)
        ]

    if isinstance(event, ReceiptReceived):
        if not _current(state, event.attempt_id):
            return state, []
        if not event.receipt.success:
            return _fail(state, str(OnChainRevert()), ErrorKind.ON_CHAIN_REVERT)
        complete = replace(
            state, phase=UpdatePhase.COMPLETE, tx_hash=None, last_error=None, error_kind=None
        )
        return complete, [
            NotifyComplete(True),
            ScheduleReset(state.attempt_id, config.reset_delay),
        ]

    if isinstance(event, TransactionFailed):
        if not _current(state, event.attempt_id):
            return state, []
        return _fail(state, event.message, event.kind)

    if isinstance(event, ResetRequested):
        if event.attempt_id != state.attempt_id or state.phase is not UpdatePhase.COMPLETE:
            return state, []
        return UpdateState(attempt_id=state.attempt_id), []

    if isinstance(event, CancelRequested):
        if state.in_flight or state.phase is UpdatePhase.IDLE:
            return state, []
        return UpdateState(attempt_id=state.attempt_id + 1), []

    return state, []
