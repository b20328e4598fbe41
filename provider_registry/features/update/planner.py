"""Diffing of provider records into the on-chain notes that need rewriting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from provider_registry.provider import (
    PROVIDER_NOTE_KEYS,
    Note,
    NoteSet,
    ProviderRecord,
)


@dataclass(frozen=True)
class NoteChange:
    key: str
    old_value: str
    new_value: str


@dataclass(frozen=True)
class UpdatePlan:
    changes: tuple[NoteChange, ...] = field(default_factory=tuple)
    off_chain_fields: tuple[str, ...] = field(default_factory=tuple)

    @property
    def needs_on_chain_update(self) -> bool:
        return bool(self.changes)

    @property
    def notes(self) -> NoteSet:
        return NoteSet(tuple(Note(change.key, change.new_value) for change in self.changes))

    def to_dict(self) -> dict[str, Any]:
        return {
            "needs_on_chain_update": self.needs_on_chain_update,
            "on_chain_changes": [
                {"key": c.key, "old_value": c.old_value, "new_value": c.new_value}
                for c in self.changes
            ],
            "off_chain_fields": list(self.off_chain_fields),
        }


def detect_provider_changes(
    original: ProviderRecord, updated: ProviderRecord
) -> list[NoteChange]:
    changes = []
    for field_name, key in PROVIDER_NOTE_KEYS.items():
        old_value = getattr(original, field_name)
        new_value = getattr(updated, field_name)
        if old_value != new_value:
            changes.append(NoteChange(key=key, old_value=old_value, new_value=new_value))
    return changes


def create_update_plan(original: ProviderRecord, updated: ProviderRecord) -> UpdatePlan:
    off_chain = ("name",) if original.name != updated.name else ()
    return UpdatePlan(
        changes=tuple(detect_provider_changes(original, updated)),
        off_chain_fields=off_chain,
    )
