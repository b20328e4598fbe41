"""Lookup feature module for Provider Registry.

Resolves a provider name to its Hypermap namehash and token-bound account.
"""

from provider_registry.features.lookup.service import (
    AccountInfo,
    AccountLookupService,
    namehash,
)

__all__ = ["AccountInfo", "AccountLookupService", "namehash"]
