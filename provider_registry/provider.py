"""Provider records and the on-chain notes derived from them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

PROVIDER_ID_KEY = "~provider-id"
WALLET_KEY = "~wallet"
DESCRIPTION_KEY = "~description"
INSTRUCTIONS_KEY = "~instructions"
PRICE_KEY = "~price"

# Canonical order of the notes written for a provider, keyed by record field.
PROVIDER_NOTE_KEYS: dict[str, str] = {
    "id": PROVIDER_ID_KEY,
    "wallet": WALLET_KEY,
    "description": DESCRIPTION_KEY,
    "instructions": INSTRUCTIONS_KEY,
    "price": PRICE_KEY,
}


@dataclass(frozen=True)
class ProviderRecord:
    name: str
    id: str
    wallet: str
    description: str = ""
    instructions: str = ""
    price: str = "0"

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider_name": self.name,
            "provider_id": self.id,
            "registered_provider_wallet": self.wallet,
            "description": self.description,
            "instructions": self.instructions,
            "price": self.price,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProviderRecord":
        price = data.get("price", "0")
        return cls(
            name=str(data.get("provider_name", data.get("name", ""))),
            id=str(data.get("provider_id", data.get("id", ""))),
            wallet=str(
                data.get("registered_provider_wallet", data.get("wallet", ""))
            ).strip(),
            description=str(data.get("description") or ""),
            instructions=str(data.get("instructions") or ""),
            price=str(price if price is not None else "0"),
        )


@dataclass(frozen=True)
class Note:
    key: str
    value: str


@dataclass(frozen=True)
class NoteSet:
    notes: tuple[Note, ...] = ()

    def __iter__(self) -> Iterator[Note]:
        return iter(self.notes)

    def __len__(self) -> int:
        return len(self.notes)

    def __bool__(self) -> bool:
        return bool(self.notes)

    def pairs(self) -> list[tuple[str, str]]:
        return [(note.key, note.value) for note in self.notes]

    def keys(self) -> list[str]:
        return [note.key for note in self.notes]

    @classmethod
    def of(cls, *pairs: tuple[str, str]) -> "NoteSet":
        return cls(tuple(Note(key, value) for key, value in pairs))


def note_set_from_record(record: ProviderRecord) -> NoteSet:
    return NoteSet(
        tuple(
            Note(key, getattr(record, field_name))
            for field_name, key in PROVIDER_NOTE_KEYS.items()
        )
    )
