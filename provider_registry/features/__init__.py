"""Feature modules for Provider Registry.

This package contains self-contained feature modules organized by functionality:

- registration: Mint a provider entry and write its notes
- update: Rewrite notes on a registered entry
- lookup: Resolve provider names to their token-bound accounts
"""

from provider_registry.features import lookup
from provider_registry.features import registration
from provider_registry.features import update

__all__ = ["lookup", "registration", "update"]
