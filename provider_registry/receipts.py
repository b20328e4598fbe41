"""Receipt and event-log decoding for Provider Registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from eth_utils import encode_hex, to_checksum_address
from hexbytes import HexBytes

from provider_registry.config import ACCOUNT_CREATED_TOPIC

logger = logging.getLogger(__name__)

WORD_SIZE = 32
ADDRESS_SIZE = 20


def _to_bytes(value: Any) -> bytes:
    if value is None:
        return b""
    return bytes(HexBytes(value))


@dataclass(frozen=True)
class LogEntry:
    address: str
    topics: tuple[bytes, ...] = ()
    data: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "topics", tuple(_to_bytes(t) for t in self.topics))
        object.__setattr__(self, "data", _to_bytes(self.data))

    @property
    def topic0(self) -> bytes | None:
        return self.topics[0] if self.topics else None

    @classmethod
    def from_rpc(cls, log: Mapping[str, Any]) -> "LogEntry":
        """Build from a JSON-RPC log object or a web3 ``AttributeDict`` log."""
        return cls(
            address=str(log.get("address") or ""),
            topics=tuple(log.get("topics") or ()),
            data=log.get("data") or b"",
        )


@dataclass(frozen=True)
class Receipt:
    success: bool
    logs: tuple[LogEntry, ...] = field(default_factory=tuple)
    tx_hash: str | None = None
    block_number: int | None = None

    @classmethod
    def from_rpc(cls, receipt: Mapping[str, Any]) -> "Receipt":
        status = receipt.get("status")
        if isinstance(status, str):
            status = int(status, 16)

        tx_hash = receipt.get("transactionHash")
        if tx_hash is not None and not isinstance(tx_hash, str):
            tx_hash = encode_hex(bytes(HexBytes(tx_hash)))

        block_number = receipt.get("blockNumber")
        if isinstance(block_number, str):
            block_number = int(block_number, 16)

        return cls(
            success=status == 1,
            logs=tuple(LogEntry.from_rpc(log) for log in receipt.get("logs") or ()),
            tx_hash=tx_hash,
            block_number=block_number,
        )


def extract_created_account(
    logs: Iterable[LogEntry],
    topic: str | bytes = ACCOUNT_CREATED_TOPIC,
) -> str | None:
    """Return the account address carried by the first usable account-created log.

    The event data is three 32-byte words (account, salt, chainId). The account
    is the low 20 bytes of the first word. Matching entries whose data is too
    short to hold that word are skipped. Returns ``None`` when no entry yields
    an address. The emitting contract is not checked.
    """
    wanted = _to_bytes(topic)

    for index, log in enumerate(logs):
        if log.topic0 != wanted:
            continue

        if len(log.data) < WORD_SIZE:
            logger.warning(
                "Account-created log %d has %d bytes of data, expected at least %d; skipping",
                index,
                len(log.data),
                WORD_SIZE,
            )
            continue

        account_word = log.data[:WORD_SIZE]
        return to_checksum_address("0x" + account_word[WORD_SIZE - ADDRESS_SIZE :].hex())

    return None
