from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.exceptions import TimeExhausted

from provider_registry.config import DEFAULT_CONFIG, RegistryConfig
from provider_registry.receipts import Receipt
from provider_registry.shared.errors import ConfirmationError, SubmissionError
from provider_registry.shared.network import NetworkError, RpcClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TransactionManager:
    """Signs with a local key and talks to the configured chain through web3."""

    def __init__(
        self,
        account: LocalAccount | None,
        config: RegistryConfig | None = None,
        web3: Web3 | None = None,
        rpc_client: RpcClient | None = None,
    ):
        self.account = account
        self.config = config or DEFAULT_CONFIG
        self.w3 = web3 or Web3(
            Web3.HTTPProvider(
                self.config.rpc_url,
                request_kwargs={"timeout": self.config.timeout_config.request_timeout},
            )
        )
        self._rpc_client = rpc_client or RpcClient(
            rpc_url=self.config.rpc_url,
            timeout_config=self.config.timeout_config,
            retry_config=self.config.retry_config,
        )
        self._chain_verified = False

    @classmethod
    def from_private_key(
        cls,
        private_key: str,
        config: RegistryConfig | None = None,
        web3: Web3 | None = None,
    ) -> "TransactionManager":
        try:
            account = Account.from_key(private_key)
        except (ValueError, TypeError) as e:
            raise ValueError("Invalid private key") from e
        return cls(account, config=config, web3=web3)

    @property
    def signer_address(self) -> str | None:
        if self.account is None:
            return None
        return self.account.address

    def _read(self, operation: Callable[[], T], context: str) -> T:
        return self._rpc_client.execute_with_retry(operation, context)

    def _ensure_chain(self) -> None:
        if self._chain_verified:
            return
        chain_id = self._read(lambda: self.w3.eth.chain_id, "Chain id fetch")
        if chain_id != self.config.chain_id:
            raise SubmissionError(
                f"Connected to chain {chain_id}, expected chain {self.config.chain_id}"
            )
        self._chain_verified = True

    def build_transaction(
        self,
        payload: bytes,
        target: str,
        signer: str,
        value: int = 0,
        gas_hint: int | None = None,
    ) -> dict[str, Any]:
        self._ensure_chain()

        sender = Web3.to_checksum_address(signer)
        tx: dict[str, Any] = {
            "from": sender,
            "to": Web3.to_checksum_address(target),
            "value": value,
            "data": Web3.to_hex(payload),
            "chainId": self.config.chain_id,
        }
        tx["nonce"] = self._read(
            lambda: self.w3.eth.get_transaction_count(sender, "pending"),
            "Nonce fetch",
        )
        tx["gasPrice"] = self._read(lambda: self.w3.eth.gas_price, "Gas price fetch")
        if gas_hint is None:
            tx["gas"] = self._read(lambda: self.w3.eth.estimate_gas(tx), "Gas estimation")
        else:
            tx["gas"] = gas_hint
        return tx

    def submit(
        self,
        payload: bytes,
        target: str,
        signer: str,
        value: int = 0,
        gas_hint: int | None = None,
    ) -> str:
        if self.account is None:
            raise SubmissionError("Wallet not connected")
        if signer.lower() != self.account.address.lower():
            raise SubmissionError(
                f"Signer {signer} does not match the connected wallet {self.account.address}"
            )

        try:
            tx = self.build_transaction(payload, target, signer, value, gas_hint)
            signed = self.account.sign_transaction(tx)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except SubmissionError:
            raise
        except NetworkError as e:
            logger.error("Failed to prepare transaction to %s: %s", target, e.message)
            raise SubmissionError(e.message, e) from e
        except Exception as e:
            logger.error("Failed to submit transaction to %s: %s", target, e)
            raise SubmissionError(str(e), e) from e

        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.info(
            "Transaction submitted: %s (to=%s, gas=%s)", tx_hash_hex, target, tx["gas"]
        )
        return tx_hash_hex

    def await_receipt(self, tx_hash: str) -> Receipt:
        try:
            raw_receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self.config.receipt_timeout,
                poll_latency=self.config.receipt_poll_latency,
            )
        except TimeExhausted as e:
            logger.warning("Receipt wait timed out for %s", tx_hash)
            raise ConfirmationError(
                f"Transaction {tx_hash} was not confirmed within "
                f"{self.config.receipt_timeout:.0f} seconds",
                e,
            ) from e
        except Exception as e:
            logger.error("Failed to fetch receipt for %s: %s", tx_hash, e)
            raise ConfirmationError(f"Could not confirm transaction {tx_hash}: {e}", e) from e

        receipt = Receipt.from_rpc(raw_receipt)
        if receipt.tx_hash is None:
            receipt = Receipt(
                success=receipt.success,
                logs=receipt.logs,
                tx_hash=tx_hash,
                block_number=receipt.block_number,
            )
        logger.info(
            "Transaction %s confirmed in block %s (success=%s)",
            tx_hash,
            receipt.block_number,
            receipt.success,
        )
        return receipt
