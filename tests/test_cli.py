"""Tests for the command line entry point."""

import json
from unittest.mock import patch

import pytest

from provider_registry.__main__ import build_parser, main
from provider_registry.encoding import EXECUTE_SELECTOR
from provider_registry.features.lookup import AccountInfo
from provider_registry.shared.network import NetworkError, NetworkErrorType


@pytest.fixture
def record_file(tmp_path, provider_record):
    path = tmp_path / "provider.json"
    path.write_text(json.dumps(provider_record.to_dict()), encoding="utf-8")
    return path


class TestParser:
    @pytest.mark.unit
    def test_update_options(self):
        args = build_parser().parse_args(
            ["--rpc-url", "http://node", "update", "weather-api", "--price", "0.02"]
        )
        assert args.command == "update"
        assert args.rpc_url == "http://node"
        assert args.price == "0.02"
        assert args.wallet is None

    @pytest.mark.unit
    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestEncodeNotes:
    @pytest.mark.unit
    def test_prints_calldata(self, record_file, capsys):
        assert main(["encode-notes", "--record", str(record_file)]) == 0

        output = capsys.readouterr().out.strip()
        assert output.startswith("0x" + EXECUTE_SELECTOR.hex())


class TestLookup:
    @pytest.mark.unit
    def test_prints_account(self, capsys, minted_address):
        info = AccountInfo(
            name="weather-api",
            entry_path="weather-api.grid.hypr",
            namehash="0x" + "00" * 32,
            account_address=minted_address,
        )
        with patch("provider_registry.__main__.AccountLookupService") as service_cls:
            service_cls.return_value.fetch_account.return_value = info

            assert main(["lookup", "weather-api"]) == 0

        assert json.loads(capsys.readouterr().out)["account_address"] == minted_address

    @pytest.mark.unit
    def test_missing_account(self, capsys):
        with patch("provider_registry.__main__.AccountLookupService") as service_cls:
            service_cls.return_value.fetch_account.return_value = None
            service_cls.return_value.entry_path.return_value = "missing.grid.hypr"

            assert main(["lookup", "missing"]) == 1

        assert "missing.grid.hypr" in capsys.readouterr().out

    @pytest.mark.unit
    def test_network_error_is_readable(self, capsys):
        error = NetworkError(
            NetworkErrorType.CONNECTION_ERROR,
            "eth_call: Cannot connect to RPC node: http://node. Check your network connection.",
        )
        with patch("provider_registry.__main__.AccountLookupService") as service_cls:
            service_cls.return_value.fetch_account.side_effect = error

            assert main(["lookup", "weather-api"]) == 1

        assert capsys.readouterr().out.strip() == (
            "Error: Unable to connect to the RPC node. Check your internet connection and RPC URL."
        )


class TestRegister:
    @pytest.mark.unit
    def test_requires_private_key(self, record_file):
        with pytest.raises(SystemExit) as exc_info:
            main(["register", "--record", str(record_file)])
        assert exc_info.value.code == 1
