"""Provider Registry - on-chain registration of providers on Hypermap.

This package is organized into feature-based modules:
- features.registration: Mint a provider entry, then write its notes
- features.update: Rewrite notes on an existing entry
- features.lookup: Resolve provider names to token-bound accounts
- shared: Shared utilities (errors, logging, network, validation, dispatch)
"""

from provider_registry.config import RegistryConfig
from provider_registry.encoding import (
    ExecuteMode,
    encode_mint,
    encode_multicall,
    encode_set_note,
    encode_tba_execute,
)
from provider_registry.features.lookup import AccountLookupService
from provider_registry.features.registration import (
    RegistrationOrchestrator,
    RegistrationPhase,
    RegistrationState,
)
from provider_registry.features.update import (
    UpdateOrchestrator,
    UpdatePhase,
    UpdateState,
)
from provider_registry.provider import Note, NoteSet, ProviderRecord
from provider_registry.receipts import LogEntry, Receipt, extract_created_account
from provider_registry.transaction import TransactionManager

__version__ = "0.1.0"

__all__ = [
    "AccountLookupService",
    "ExecuteMode",
    "LogEntry",
    "Note",
    "NoteSet",
    "ProviderRecord",
    "Receipt",
    "RegistrationOrchestrator",
    "RegistrationPhase",
    "RegistrationState",
    "RegistryConfig",
    "TransactionManager",
    "UpdateOrchestrator",
    "UpdatePhase",
    "UpdateState",
    "encode_mint",
    "encode_multicall",
    "encode_set_note",
    "encode_tba_execute",
    "extract_created_account",
]
