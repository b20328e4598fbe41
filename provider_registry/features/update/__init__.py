"""Update feature module for Provider Registry.

This module rewrites notes on an already registered provider entry, either
as a single registry call or batched through multicall.
"""

from provider_registry.features.update.machine import (
    StartUpdate,
    UpdatePhase,
    UpdateState,
    reduce_update,
    update_call,
)
from provider_registry.features.update.planner import (
    NoteChange,
    UpdatePlan,
    create_update_plan,
    detect_provider_changes,
)
from provider_registry.features.update.service import UpdateOrchestrator

__all__ = [
    "NoteChange",
    "StartUpdate",
    "UpdateOrchestrator",
    "UpdatePhase",
    "UpdatePlan",
    "UpdateState",
    "create_update_plan",
    "detect_provider_changes",
    "reduce_update",
    "update_call",
]
