"""Hypermap entry resolution for Provider Registry."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from eth_abi import decode
from eth_utils import keccak, to_bytes, to_checksum_address

from provider_registry.config import DEFAULT_CONFIG, RegistryConfig
from provider_registry.encoding import encode_tba_of
from provider_registry.shared.errors import ValidationError
from provider_registry.shared.network import NetworkError, RpcClient

logger = logging.getLogger(__name__)

ROOT_NODE = b"\x00" * 32
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def namehash(name: str) -> bytes:
    """Hypermap namehash of a dotted entry path, e.g. ``weather-api.grid.hypr``."""
    node = ROOT_NODE
    if not name:
        return node
    for label in reversed(name.split(".")):
        if not label:
            raise ValidationError(f"Entry path has an empty label: {name!r}")
        node = keccak(node + keccak(to_bytes(text=label)))
    return node


@dataclass
class AccountInfo:
    name: str
    entry_path: str
    namehash: str
    account_address: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "entry_path": self.entry_path,
            "namehash": self.namehash,
            "account_address": self.account_address,
        }


class AccountLookupService:
    def __init__(
        self,
        rpc_client: RpcClient | None = None,
        config: RegistryConfig | None = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.rpc_client = rpc_client or RpcClient(
            rpc_url=self.config.rpc_url,
            timeout_config=self.config.timeout_config,
            retry_config=self.config.retry_config,
        )

    def entry_path(self, name: str) -> str:
        name = name.strip()
        if "." in name:
            return name
        return f"{name}.{self.config.provider_namespace}"

    def fetch_account(self, name: str) -> AccountInfo | None:
        path = self.entry_path(name)
        node = namehash(path)
        calldata = "0x" + encode_tba_of(node).hex()

        try:
            result = self.rpc_client.eth_call(self.config.hypermap_address, calldata)
        except NetworkError as e:
            logger.error("Failed to look up account for %s: %s", path, e.message)
            raise

        if not result or result == "0x":
            return None

        (address,) = decode(["address"], bytes.fromhex(result[2:]))
        address = to_checksum_address(address)
        if address == ZERO_ADDRESS:
            logger.info("No account registered for %s", path)
            return None

        return AccountInfo(
            name=name,
            entry_path=path,
            namehash="0x" + node.hex(),
            account_address=address,
        )

    def lookup_account(self, name: str) -> str | None:
        info = self.fetch_account(name)
        return info.account_address if info else None
