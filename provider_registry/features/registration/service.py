"""Provider registration orchestration for Provider Registry."""

from __future__ import annotations

from typing import Any, Callable

from provider_registry.config import DEFAULT_CONFIG, RegistryConfig
from provider_registry.features.registration.machine import (
    RegistrationPhase,
    RegistrationState,
    ResumeRegistration,
    StartRegistration,
    reduce_registration,
    registration_step_text,
)
from provider_registry.provider import ProviderRecord
from provider_registry.shared.dispatch import (
    CancelRequested,
    Command,
    SubmitTransaction,
    TransactionDispatcher,
)
from provider_registry.shared.logging import get_logger
from provider_registry.shared.protocols import (
    ExecutorProtocol,
    SchedulerProtocol,
    TransactionAdapterProtocol,
)

logger = get_logger(__name__)


class RegistrationOrchestrator(TransactionDispatcher[RegistrationState]):
    """Mints a provider entry and then writes its notes.

    Results are reported through ``on_complete(account_address)`` and
    ``on_error(message)``. No public method raises for a failed registration.
    """

    COMPLETE_CALLBACK = "on_complete"
    ERROR_CALLBACK = "on_error"

    def __init__(
        self,
        adapter: TransactionAdapterProtocol,
        config: RegistryConfig | None = None,
        on_complete: Callable[[str], None] | None = None,
        on_error: Callable[[str], None] | None = None,
        executor: ExecutorProtocol | None = None,
        scheduler: SchedulerProtocol | None = None,
    ):
        super().__init__(
            adapter,
            RegistrationState(),
            executor=executor,
            scheduler=scheduler,
        )
        self.config = config or DEFAULT_CONFIG
        if on_complete:
            self.add_callback(self.COMPLETE_CALLBACK, on_complete)
        if on_error:
            self.add_callback(self.ERROR_CALLBACK, on_error)

    def _reduce(
        self, state: RegistrationState, event: Any
    ) -> tuple[RegistrationState, list[Command]]:
        return reduce_registration(state, event, self.config)

    @property
    def step_text(self) -> str:
        return registration_step_text(self.state)

    def start_registration(self, record: ProviderRecord) -> bool:
        """Begin minting ``record``. Returns False if the attempt was not started."""
        previous = self.state
        if previous.phase is not RegistrationPhase.IDLE:
            logger.warning(
                "Registration already in progress (phase=%s); rejecting new attempt",
                previous.phase.value,
            )
            return False

        new_state, commands = self.dispatch(
            StartRegistration(record=record, signer=self.adapter.signer_address)
        )
        started = _submits(commands)
        if started:
            logger.info(
                "Started registration of %s (attempt %d)",
                record.name,
                new_state.attempt_id,
            )
        return started

    def resume_registration(
        self, record: ProviderRecord, account_address: str | None = None
    ) -> bool:
        """Write notes for an account minted earlier without minting again.

        ``account_address`` defaults to the account left behind by the last
        failed notes step in this process.
        """
        previous = self.state
        if previous.phase is not RegistrationPhase.IDLE:
            logger.warning(
                "Registration already in progress (phase=%s); rejecting resume",
                previous.phase.value,
            )
            return False

        address = account_address or previous.orphaned_account_address
        if not address:
            self._invoke_callbacks(
                self.ERROR_CALLBACK, "No minted account to resume registration for"
            )
            return False

        _, commands = self.dispatch(
            ResumeRegistration(
                record=record,
                account_address=address,
                signer=self.adapter.signer_address,
            )
        )
        resumed = _submits(commands)
        if resumed:
            logger.info("Resumed registration of %s at %s", record.name, address)
        return resumed

    def cancel(self) -> bool:
        """Return to idle. Refused once the wallet has started submitting."""
        new_state, _ = self.dispatch(CancelRequested())
        if new_state.phase is RegistrationPhase.IDLE:
            logger.info("Registration cancelled")
            return True
        logger.warning(
            "Cannot cancel registration while transaction %s is in flight",
            new_state.tx_hash or "(submitting)",
        )
        return False


def _submits(commands: list[Command]) -> bool:
    return any(isinstance(command, SubmitTransaction) for command in commands)
