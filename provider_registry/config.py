"""Chain constants and tunables for Provider Registry."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace

from provider_registry.shared.network import RetryConfig, TimeoutConfig

HYPERMAP_ADDRESS = "0x000000000044C6B8Cb4d8f0F889a3E47664EAeda"
HYPERGRID_NAMESPACE_MINTER_ADDRESS = "0x44a8Bd4f9370b248c91d54773Ac4a457B3454b50"
MULTICALL_ADDRESS = "0xcA11bde05977b3631167028862bE2a173976CA11"

# keccak256("ERC6551AccountCreated(address,address,bytes32,uint256,address,uint256)")
ACCOUNT_CREATED_TOPIC = (
    "0x79f19b3655ee38b1ce526556b7731a20c8f218fbda4a3990b6cc4172fdf88722"
)

BASE_CHAIN_ID = 8453
DEFAULT_RPC_URL = "https://mainnet.base.org"
DEFAULT_PROVIDER_NAMESPACE = "grid.hypr"

ENV_PREFIX = "PROVIDER_REGISTRY"


@dataclass(frozen=True)
class RegistryConfig:
    hypermap_address: str = HYPERMAP_ADDRESS
    minter_address: str = HYPERGRID_NAMESPACE_MINTER_ADDRESS
    multicall_address: str = MULTICALL_ADDRESS
    account_created_topic: str = ACCOUNT_CREATED_TOPIC
    chain_id: int = BASE_CHAIN_ID
    rpc_url: str = DEFAULT_RPC_URL
    provider_namespace: str = DEFAULT_PROVIDER_NAMESPACE
    registration_notes_gas: int = 1_000_000
    update_multicall_gas: int = 1_500_000
    reset_delay: float = 3.0
    receipt_timeout: float = 180.0
    receipt_poll_latency: float = 2.0
    timeout_config: TimeoutConfig = field(default_factory=TimeoutConfig)
    retry_config: RetryConfig = field(default_factory=RetryConfig)

    @classmethod
    def from_environment(cls) -> "RegistryConfig":
        defaults = cls()
        return cls(
            hypermap_address=os.getenv(
                f"{ENV_PREFIX}_HYPERMAP_ADDRESS", defaults.hypermap_address
            ),
            minter_address=os.getenv(
                f"{ENV_PREFIX}_MINTER_ADDRESS", defaults.minter_address
            ),
            multicall_address=os.getenv(
                f"{ENV_PREFIX}_MULTICALL_ADDRESS", defaults.multicall_address
            ),
            account_created_topic=os.getenv(
                f"{ENV_PREFIX}_ACCOUNT_CREATED_TOPIC", defaults.account_created_topic
            ),
            chain_id=int(os.getenv(f"{ENV_PREFIX}_CHAIN_ID", defaults.chain_id)),
            rpc_url=os.getenv(f"{ENV_PREFIX}_RPC_URL", defaults.rpc_url),
            provider_namespace=os.getenv(
                f"{ENV_PREFIX}_PROVIDER_NAMESPACE", defaults.provider_namespace
            ),
            reset_delay=float(
                os.getenv(f"{ENV_PREFIX}_RESET_DELAY", defaults.reset_delay)
            ),
            receipt_timeout=float(
                os.getenv(f"{ENV_PREFIX}_RECEIPT_TIMEOUT", defaults.receipt_timeout)
            ),
        )

    def with_overrides(self, **kwargs) -> "RegistryConfig":
        return replace(self, **kwargs)


DEFAULT_CONFIG = RegistryConfig()
