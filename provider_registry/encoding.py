"""ABI call encoding for the namespace minter, the registry, multicall and TBAs.

Every function here is pure: structured arguments in, calldata bytes out.
Malformed input raises ``ValidationError`` before anything is encoded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Sequence

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from provider_registry.shared.errors import ValidationError
from provider_registry.shared.validation import AddressValidator

MINT_SIGNATURE = "mint(address,bytes)"
NOTE_SIGNATURE = "note(bytes,bytes)"
AGGREGATE_SIGNATURE = "aggregate((address,bytes)[])"
EXECUTE_SIGNATURE = "execute(address,uint256,bytes,uint8)"
TBA_OF_SIGNATURE = "tbaOf(bytes32)"

MINT_SELECTOR = function_signature_to_4byte_selector(MINT_SIGNATURE)
NOTE_SELECTOR = function_signature_to_4byte_selector(NOTE_SIGNATURE)
AGGREGATE_SELECTOR = function_signature_to_4byte_selector(AGGREGATE_SIGNATURE)
EXECUTE_SELECTOR = function_signature_to_4byte_selector(EXECUTE_SIGNATURE)
TBA_OF_SELECTOR = function_signature_to_4byte_selector(TBA_OF_SIGNATURE)

NOTE_KEY_PREFIX = "~"
UINT256_MAX = 2**256 - 1

_WHITESPACE = re.compile(r"\s")


class ExecuteMode(IntEnum):
    CALL = 0
    DELEGATE_CALL = 1


@dataclass(frozen=True)
class Call:
    """One ``(target, payload)`` entry of a multicall batch."""

    target: str
    payload: bytes


def _require_address(value: str, field_name: str) -> str:
    result = AddressValidator.validate(value, field_name)
    if not result.is_valid:
        raise ValidationError(result.error_message or f"Invalid {field_name}")
    return result.normalized_value


def _label_bytes(label: str | bytes) -> bytes:
    text = label.decode("utf-8") if isinstance(label, bytes) else label
    if not text:
        raise ValidationError("Label cannot be empty")
    if "." in text:
        raise ValidationError("Label cannot contain '.'")
    if _WHITESPACE.search(text):
        raise ValidationError("Label cannot contain whitespace")
    return text.encode("utf-8")


def encode_mint(owner: str, label: str | bytes) -> bytes:
    owner_address = _require_address(owner, "Owner address")
    return MINT_SELECTOR + encode(
        ["address", "bytes"], [owner_address, _label_bytes(label)]
    )


def encode_set_note(key: str, value: str) -> bytes:
    if not key:
        raise ValidationError("Note key cannot be empty")
    if not key.startswith(NOTE_KEY_PREFIX):
        raise ValidationError(f"Note key must start with '{NOTE_KEY_PREFIX}': {key}")
    if value is None:
        raise ValidationError(f"Note value for {key} cannot be None")
    return NOTE_SELECTOR + encode(
        ["bytes", "bytes"], [key.encode("utf-8"), value.encode("utf-8")]
    )


def encode_multicall(calls: Sequence[Call]) -> bytes:
    if not calls:
        raise ValidationError("Multicall requires at least one call")
    entries = [
        (_require_address(call.target, "Call target"), bytes(call.payload))
        for call in calls
    ]
    return AGGREGATE_SELECTOR + encode(["(address,bytes)[]"], [entries])


def encode_tba_execute(
    target: str,
    value: int,
    payload: bytes,
    mode: ExecuteMode | int,
) -> bytes:
    target_address = _require_address(target, "Execute target")
    if value < 0 or value > UINT256_MAX:
        raise ValidationError("Execute value must fit in uint256")
    try:
        operation = ExecuteMode(mode)
    except ValueError:
        raise ValidationError(f"Unknown execute mode: {mode}") from None
    return EXECUTE_SELECTOR + encode(
        ["address", "uint256", "bytes", "uint8"],
        [target_address, value, bytes(payload), int(operation)],
    )


def encode_tba_of(node: bytes) -> bytes:
    if len(node) != 32:
        raise ValidationError("Namehash must be 32 bytes")
    return TBA_OF_SELECTOR + encode(["bytes32"], [node])


def note_calls_for(notes: Iterable[tuple[str, str]], registry: str) -> list[Call]:
    """Map ``(key, value)`` pairs to multicall entries targeting ``registry``."""
    return [Call(target=registry, payload=encode_set_note(key, value)) for key, value in notes]


def encode_notes_batch(
    notes: Iterable[tuple[str, str]], registry: str, multicall: str
) -> bytes:
    """Wrap note writes in a multicall that the account runs as a delegate call.

    Delegate mode makes each ``note`` call originate from the account itself,
    which is what the registry checks when authorising the write.
    """
    return encode_tba_execute(
        multicall,
        0,
        encode_multicall(note_calls_for(notes, registry)),
        ExecuteMode.DELEGATE_CALL,
    )


def decode_multicall(payload: bytes) -> list[Call]:
    if payload[:4] != AGGREGATE_SELECTOR:
        raise ValidationError("Payload is not an aggregate call")
    (entries,) = decode(["(address,bytes)[]"], payload[4:])
    return [Call(target=to_checksum_address(target), payload=data) for target, data in entries]


def decode_tba_execute(payload: bytes) -> tuple[str, int, bytes, ExecuteMode]:
    if payload[:4] != EXECUTE_SELECTOR:
        raise ValidationError("Payload is not an execute call")
    target, value, data, operation = decode(
        ["address", "uint256", "bytes", "uint8"], payload[4:]
    )
    return to_checksum_address(target), value, data, ExecuteMode(operation)


def decode_set_note(payload: bytes) -> tuple[str, str]:
    if payload[:4] != NOTE_SELECTOR:
        raise ValidationError("Payload is not a note call")
    key, value = decode(["bytes", "bytes"], payload[4:])
    return key.decode("utf-8"), value.decode("utf-8")
