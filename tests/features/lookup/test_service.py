"""Tests for resolving provider names to token-bound accounts."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from eth_abi import encode
from eth_utils import keccak

from provider_registry.encoding import TBA_OF_SELECTOR
from provider_registry.features.lookup.service import (
    AccountLookupService,
    namehash,
)
from provider_registry.shared.errors import ValidationError
from provider_registry.shared.network import NetworkError, NetworkErrorType


def encoded_address(address: str) -> str:
    return "0x" + encode(["address"], [address]).hex()


@pytest.fixture
def rpc_client():
    return MagicMock()


@pytest.fixture
def lookup(rpc_client, config):
    return AccountLookupService(rpc_client=rpc_client, config=config)


class TestNamehash:
    @pytest.mark.unit
    def test_root(self):
        assert namehash("") == b"\x00" * 32

    @pytest.mark.unit
    def test_single_label(self):
        expected = bytes.fromhex(
            "93cdeb708b7545dc668eb9280176169d1c33cfd8ed6f04690a0bcc88a93fc4ae"
        )
        assert namehash("eth") == expected

    @pytest.mark.unit
    def test_nested_labels(self):
        parent = namehash("grid.hypr")
        assert namehash("weather.grid.hypr") == keccak(parent + keccak(text="weather"))

    @pytest.mark.unit
    def test_empty_label(self):
        with pytest.raises(ValidationError):
            namehash("weather..hypr")


class TestEntryPath:
    @pytest.mark.unit
    def test_appends_namespace(self, lookup):
        assert lookup.entry_path("weather-api") == "weather-api.grid.hypr"

    @pytest.mark.unit
    def test_keeps_full_path(self, lookup):
        assert lookup.entry_path(" weather.other.hypr ") == "weather.other.hypr"


class TestFetchAccount:
    @pytest.mark.unit
    def test_resolves_account(self, lookup, rpc_client, config, minted_address):
        rpc_client.eth_call.return_value = encoded_address(minted_address)

        info = lookup.fetch_account("weather-api")

        assert info.account_address == minted_address
        assert info.entry_path == "weather-api.grid.hypr"
        assert info.namehash == "0x" + namehash("weather-api.grid.hypr").hex()
        to, data = rpc_client.eth_call.call_args.args
        assert to == config.hypermap_address
        assert data == "0x" + (TBA_OF_SELECTOR + namehash("weather-api.grid.hypr")).hex()

    @pytest.mark.unit
    def test_zero_address_means_unregistered(self, lookup, rpc_client):
        rpc_client.eth_call.return_value = encoded_address("0x" + "00" * 20)

        assert lookup.fetch_account("missing") is None
        assert lookup.lookup_account("missing") is None

    @pytest.mark.unit
    def test_empty_result(self, lookup, rpc_client):
        rpc_client.eth_call.return_value = "0x"
        assert lookup.fetch_account("weather-api") is None

    @pytest.mark.unit
    def test_lookup_returns_address(self, lookup, rpc_client, minted_address):
        rpc_client.eth_call.return_value = encoded_address(minted_address)
        assert lookup.lookup_account("weather-api") == minted_address

    @pytest.mark.unit
    def test_network_errors_propagate(self, lookup, rpc_client):
        rpc_client.eth_call.side_effect = NetworkError(
            error_type=NetworkErrorType.TIMEOUT, message="eth_call: Connection timeout"
        )

        with pytest.raises(NetworkError):
            lookup.fetch_account("weather-api")

    @pytest.mark.unit
    def test_to_dict(self, lookup, rpc_client, minted_address):
        rpc_client.eth_call.return_value = encoded_address(minted_address)

        data = lookup.fetch_account("weather-api").to_dict()

        assert data["name"] == "weather-api"
        assert data["account_address"] == minted_address
