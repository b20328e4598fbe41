"""Provider note updates for Provider Registry."""

from __future__ import annotations

from typing import Any, Callable

from provider_registry.config import DEFAULT_CONFIG, RegistryConfig
from provider_registry.features.update.machine import (
    StartUpdate,
    UpdatePhase,
    UpdateState,
    reduce_update,
)
from provider_registry.features.update.planner import UpdatePlan, create_update_plan
from provider_registry.provider import NoteSet, ProviderRecord
from provider_registry.shared.dispatch import (
    CancelRequested,
    Command,
    NotifyComplete,
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


class UpdateOrchestrator(TransactionDispatcher[UpdateState]):
    COMPLETE_CALLBACK = "on_update_complete"
    ERROR_CALLBACK = "on_update_error"

    def __init__(
        self,
        adapter: TransactionAdapterProtocol,
        config: RegistryConfig | None = None,
        on_update_complete: Callable[[bool], None] | None = None,
        on_update_error: Callable[[str], None] | None = None,
        executor: ExecutorProtocol | None = None,
        scheduler: SchedulerProtocol | None = None,
    ):
        super().__init__(
            adapter,
            UpdateState(),
            executor=executor,
            scheduler=scheduler,
        )
        self.config = config or DEFAULT_CONFIG
        if on_update_complete:
            self.add_callback(self.COMPLETE_CALLBACK, on_update_complete)
        if on_update_error:
            self.add_callback(self.ERROR_CALLBACK, on_update_error)

    def _reduce(
        self, state: UpdateState, event: Any
    ) -> tuple[UpdateState, list[Command]]:
        return reduce_update(state, event, self.config)

    def update_notes(self, account_address: str, notes: NoteSet) -> bool:
        """Rewrite ``notes`` on ``account_address``. Returns False if rejected."""
        previous = self.state
        if previous.phase is not UpdatePhase.IDLE:
            logger.warning(
                "Update already in progress (phase=%s); rejecting new update",
                previous.phase.value,
            )
            return False

        if not notes:
            logger.info("No notes to update for %s", account_address)

        _, commands = self.dispatch(
            StartUpdate(
                account_address=account_address,
                notes=notes,
                signer=self.adapter.signer_address,
            )
        )
        if any(isinstance(command, SubmitTransaction) for command in commands):
            logger.info(
                "Updating %d note(s) on %s: %s",
                len(notes),
                account_address,
                ", ".join(notes.keys()),
            )
            return True
        return any(isinstance(command, NotifyComplete) for command in commands)

    def update_provider(
        self,
        account_address: str,
        original: ProviderRecord,
        updated: ProviderRecord,
    ) -> UpdatePlan:
        plan = create_update_plan(original, updated)
        if plan.off_chain_fields:
            logger.info(
                "Fields without on-chain notes changed: %s",
                ", ".join(plan.off_chain_fields),
            )
        self.update_notes(account_address, plan.notes)
        return plan

    def cancel(self) -> bool:
        new_state, _ = self.dispatch(CancelRequested())
        return new_state.phase is UpdatePhase.IDLE
