"""Event/command dispatch for the on-chain orchestrators.

A reducer turns ``(state, event)`` into ``(new_state, commands)``. The
dispatcher applies the reducer under a lock and then executes the commands:
network calls go to a single-worker executor, callbacks are invoked in place,
and delayed resets go to a scheduler. Both the executor and the scheduler can
be replaced, which lets tests drive the whole flow synchronously.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, TypeVar

from provider_registry.receipts import Receipt
from provider_registry.shared.errors import ErrorKind, RegistryError
from provider_registry.shared.logging import format_error_for_user, get_logger
from provider_registry.shared.protocols import (
    ExecutorProtocol,
    SchedulerProtocol,
    TransactionAdapterProtocol,
)

logger = get_logger(__name__)

S = TypeVar("S")


class Stage(Enum):
    MINT = "mint"
    NOTES = "notes"
    UPDATE = "update"


# Events


@dataclass(frozen=True)
class SubmissionStarted:
    attempt_id: int
    stage: Stage


@dataclass(frozen=True)
class TransactionSubmitted:
    attempt_id: int
    stage: Stage
    tx_hash: str


@dataclass(frozen=True)
class ReceiptReceived:
    attempt_id: int
    stage: Stage
    receipt: Receipt


@dataclass(frozen=True)
class TransactionFailed:
    attempt_id: int
    stage: Stage
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class ResetRequested:
    attempt_id: int


@dataclass(frozen=True)
class CancelRequested:
    pass


# Commands


@dataclass(frozen=True)
class SubmitTransaction:
    attempt_id: int
    stage: Stage
    payload: bytes
    target: str
    signer: str
    value: int = 0
    gas_hint: int | None = None


@dataclass(frozen=True)
class AwaitReceipt:
    attempt_id: int
    stage: Stage
    tx_hash: str


@dataclass(frozen=True)
class NotifyComplete:
    value: Any


@dataclass(frozen=True)
class NotifyError:
    message: str
    kind: ErrorKind


@dataclass(frozen=True)
class ScheduleReset:
    attempt_id: int
    delay: float


Command = SubmitTransaction | AwaitReceipt | NotifyComplete | NotifyError | ScheduleReset


def timer_scheduler(delay: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class TransactionDispatcher(Generic[S]):
    COMPLETE_CALLBACK = "on_complete"
    ERROR_CALLBACK = "on_error"

    def __init__(
        self,
        adapter: TransactionAdapterProtocol,
        initial_state: S,
        executor: ExecutorProtocol | None = None,
        scheduler: SchedulerProtocol | None = None,
    ):
        self.adapter = adapter
        self._state = initial_state
        self._lock = threading.Lock()
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=type(self).__name__
        )
        self._scheduler = scheduler or timer_scheduler
        self._callbacks: dict[str, list[Callable[[Any], None]]] = {
            self.COMPLETE_CALLBACK: [],
            self.ERROR_CALLBACK: [],
        }

    def _reduce(self, state: S, event: Any) -> tuple[S, list[Command]]:
        raise NotImplementedError

    @property
    def state(self) -> S:
        with self._lock:
            return self._state

    def add_callback(self, event_type: str, callback: Callable[[Any], None]) -> None:
        if event_type not in self._callbacks:
            self._callbacks[event_type] = []
        self._callbacks[event_type].append(callback)

    def remove_callback(self, event_type: str, callback: Callable[[Any], None]) -> None:
        if event_type in self._callbacks:
            try:
                self._callbacks[event_type].remove(callback)
            except ValueError:
                pass

    def _invoke_callbacks(self, event_type: str, data: Any) -> None:
        callbacks = self._callbacks.get(event_type, [])
        for callback in list(callbacks):
            if callback is None:
                continue
            try:
                callback(data)
            except Exception as e:
                logger.error("Error in callback for %s: %s", event_type, e)

    def dispatch(self, event: Any) -> tuple[S, list[Command]]:
        with self._lock:
            previous = self._state
            new_state, commands = self._reduce(previous, event)
            self._state = new_state

        if new_state is previous and not commands:
            logger.debug("Ignored %s in state %s", type(event).__name__, previous)

        for command in commands:
            self._execute(command)
        return new_state, commands

    def _execute(self, command: Command) -> None:
        if isinstance(command, SubmitTransaction):
            self._executor.submit(self._run_submit, command)
        elif isinstance(command, AwaitReceipt):
            self._executor.submit(self._run_await, command)
        elif isinstance(command, NotifyComplete):
            self._invoke_callbacks(self.COMPLETE_CALLBACK, command.value)
        elif isinstance(command, NotifyError):
            self._invoke_callbacks(self.ERROR_CALLBACK, command.message)
        elif isinstance(command, ScheduleReset):
            self._scheduler(
                command.delay,
                lambda: self.dispatch(ResetRequested(command.attempt_id)),
            )
        else:
            raise TypeError(f"Unknown command: {command!r}")

    def _claim_submission(self, command: SubmitTransaction) -> bool:
        """Mark the attempt as submitting. False if it was cancelled or replaced.

        The reducer accepts the claim under the lock, so a cancel either wins
        before it or is refused after it.
        """
        state, _ = self.dispatch(SubmissionStarted(command.attempt_id, command.stage))
        return getattr(state, "attempt_id", None) == command.attempt_id and getattr(
            state, "submitting", False
        )

    def _run_submit(self, command: SubmitTransaction) -> None:
        log = logger.with_context(attempt_id=command.attempt_id, stage=command.stage.value)
        if not self._claim_submission(command):
            log.info("Attempt was cancelled before submission; not sending")
            return
        log.info("Submitting %s transaction to %s", command.stage.value, command.target)
        try:
            tx_hash = self.adapter.submit(
                command.payload,
                command.target,
                command.signer,
                value=command.value,
                gas_hint=command.gas_hint,
            )
        except RegistryError as e:
            log.error("%s submission failed: %s", command.stage.value, e)
            self.dispatch(
                TransactionFailed(command.attempt_id, command.stage, ErrorKind.SUBMISSION, format_error_for_user(e))
            )
            return
        except Exception as e:
            log.exception("Unexpected error submitting %s transaction", command.stage.value)
            self.dispatch(
                TransactionFailed(command.attempt_id, command.stage, ErrorKind.SUBMISSION, format_error_for_user(e))
            )
            return

        self.dispatch(TransactionSubmitted(command.attempt_id, command.stage, tx_hash))

    def _run_await(self, command: AwaitReceipt) -> None:
        log = logger.with_context(attempt_id=command.attempt_id, stage=command.stage.value)
        try:
            receipt = self.adapter.await_receipt(command.tx_hash)
        except RegistryError as e:
            log.error("Confirmation of %s failed: %s", command.tx_hash, e)
            self.dispatch(
                TransactionFailed(command.attempt_id, command.stage, ErrorKind.CONFIRMATION, format_error_for_user(e))
            )
            return
        except Exception as e:
            log.exception("Unexpected error awaiting receipt for %s", command.tx_hash)
            self.dispatch(
                TransactionFailed(command.attempt_id, command.stage, ErrorKind.CONFIRMATION, format_error_for_user(e))
            )
            return

        if not receipt.success:
            log.warning("Transaction %s reverted", command.tx_hash)
        self.dispatch(ReceiptReceived(command.attempt_id, command.stage, receipt))

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
