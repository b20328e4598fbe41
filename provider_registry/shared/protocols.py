"""Protocols shared across feature services."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from provider_registry.receipts import Receipt


@runtime_checkable
class TransactionAdapterProtocol(Protocol):
    """Submits signed transactions and waits for their receipts.

    ``submit`` raises ``SubmissionError``; ``await_receipt`` raises
    ``ConfirmationError``. A receipt with ``success=False`` is a revert and is
    returned, not raised.
    """

    @property
    def signer_address(self) -> str | None: ...

    def submit(
        self,
        payload: bytes,
        target: str,
        signer: str,
        value: int = 0,
        gas_hint: int | None = None,
    ) -> str: ...

    def await_receipt(self, tx_hash: str) -> Receipt: ...


class ExecutorProtocol(Protocol):
    def submit(self, fn, /, *args, **kwargs): ...

    def shutdown(self, wait: bool = True) -> None: ...


class SchedulerProtocol(Protocol):
    def __call__(self, delay: float, callback) -> object: ...
