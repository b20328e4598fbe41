"""Unit tests for ABI call encoding."""

import pytest
from eth_abi import decode
from eth_utils import keccak, to_checksum_address

from provider_registry.config import HYPERMAP_ADDRESS as _HYPERMAP
from provider_registry.config import MULTICALL_ADDRESS as _MULTICALL
from provider_registry.encoding import (
    AGGREGATE_SELECTOR,
    EXECUTE_SELECTOR,
    MINT_SELECTOR,
    NOTE_SELECTOR,
    TBA_OF_SELECTOR,
    Call,
    ExecuteMode,
    decode_multicall,
    decode_set_note,
    decode_tba_execute,
    encode_mint,
    encode_multicall,
    encode_notes_batch,
    encode_set_note,
    encode_tba_execute,
    encode_tba_of,
    note_calls_for,
)
from provider_registry.shared.errors import ValidationError

HYPERMAP_ADDRESS = to_checksum_address(_HYPERMAP)
MULTICALL_ADDRESS = to_checksum_address(_MULTICALL)

OWNER = "0x1111111111111111111111111111111111111111"
ACCOUNT = "0x2222222222222222222222222222222222222222"


class TestSelectors:
    @pytest.mark.unit
    def test_selectors_match_keccak_of_signature(self):
        assert MINT_SELECTOR == keccak(text="mint(address,bytes)")[:4]
        assert NOTE_SELECTOR == keccak(text="note(bytes,bytes)")[:4]
        assert AGGREGATE_SELECTOR == keccak(text="aggregate((address,bytes)[])")[:4]
        assert EXECUTE_SELECTOR == keccak(text="execute(address,uint256,bytes,uint8)")[:4]
        assert TBA_OF_SELECTOR == keccak(text="tbaOf(bytes32)")[:4]


class TestEncodeMint:
    @pytest.mark.unit
    def test_encodes_owner_and_raw_label_bytes(self):
        payload = encode_mint(OWNER, "weather-api")

        assert payload[:4] == MINT_SELECTOR
        owner, label = decode(["address", "bytes"], payload[4:])
        assert owner == to_checksum_address(OWNER)
        assert label == b"weather-api"

    @pytest.mark.unit
    def test_accepts_label_bytes(self):
        assert encode_mint(OWNER, b"weather-api") == encode_mint(OWNER, "weather-api")

    @pytest.mark.unit
    def test_label_is_not_hashed(self):
        payload = encode_mint(OWNER, "abc")
        assert keccak(text="abc") not in payload

    @pytest.mark.unit
    @pytest.mark.parametrize("label", ["", "weather.api", "weather api", "tab\tname"])
    def test_rejects_malformed_labels(self, label):
        with pytest.raises(ValidationError):
            encode_mint(OWNER, label)

    @pytest.mark.unit
    def test_rejects_malformed_owner(self):
        with pytest.raises(ValidationError):
            encode_mint("0x1234", "weather-api")


class TestEncodeSetNote:
    @pytest.mark.unit
    def test_is_deterministic(self):
        assert encode_set_note("~price", "0.01") == encode_set_note("~price", "0.01")

    @pytest.mark.unit
    def test_encodes_key_and_value_as_utf8(self):
        payload = encode_set_note("~description", "Météo")

        assert payload[:4] == NOTE_SELECTOR
        key, value = decode(["bytes", "bytes"], payload[4:])
        assert key == b"~description"
        assert value == "Météo".encode("utf-8")

    @pytest.mark.unit
    def test_allows_empty_value(self):
        assert decode_set_note(encode_set_note("~instructions", "")) == ("~instructions", "")

    @pytest.mark.unit
    def test_rejects_empty_key(self):
        with pytest.raises(ValidationError):
            encode_set_note("", "value")

    @pytest.mark.unit
    def test_rejects_key_without_tilde(self):
        with pytest.raises(ValidationError, match="must start with '~'"):
            encode_set_note("price", "0.01")


class TestEncodeMulticall:
    @pytest.mark.unit
    def test_reference_decoder_reproduces_calls_in_order(self):
        calls = [
            Call(HYPERMAP_ADDRESS, encode_set_note("~provider-id", "p-1")),
            Call(HYPERMAP_ADDRESS, encode_set_note("~wallet", OWNER)),
            Call(HYPERMAP_ADDRESS, encode_set_note("~price", "0.01")),
        ]

        payload = encode_multicall(calls)

        assert payload[:4] == AGGREGATE_SELECTOR
        assert decode_multicall(payload) == calls

    @pytest.mark.unit
    def test_rejects_empty_batch(self):
        with pytest.raises(ValidationError, match="at least one call"):
            encode_multicall([])

    @pytest.mark.unit
    def test_rejects_bad_target(self):
        with pytest.raises(ValidationError):
            encode_multicall([Call("not-an-address", b"\x00")])


class TestEncodeTbaExecute:
    @pytest.mark.unit
    def test_call_mode(self):
        inner = encode_set_note("~price", "0.02")
        payload = encode_tba_execute(HYPERMAP_ADDRESS, 0, inner, ExecuteMode.CALL)

        assert payload[:4] == EXECUTE_SELECTOR
        target, value, data, mode = decode_tba_execute(payload)
        assert target == HYPERMAP_ADDRESS
        assert value == 0
        assert data == inner
        assert mode is ExecuteMode.CALL

    @pytest.mark.unit
    def test_delegate_call_mode_is_encoded_as_one(self):
        payload = encode_tba_execute(MULTICALL_ADDRESS, 0, b"\x01\x02", ExecuteMode.DELEGATE_CALL)
        _, _, _, operation = decode(
            ["address", "uint256", "bytes", "uint8"], payload[4:]
        )
        assert operation == 1

    @pytest.mark.unit
    def test_accepts_integer_mode(self):
        assert encode_tba_execute(HYPERMAP_ADDRESS, 0, b"", 0) == encode_tba_execute(
            HYPERMAP_ADDRESS, 0, b"", ExecuteMode.CALL
        )

    @pytest.mark.unit
    def test_rejects_unknown_mode(self):
        with pytest.raises(ValidationError, match="Unknown execute mode"):
            encode_tba_execute(HYPERMAP_ADDRESS, 0, b"", 2)

    @pytest.mark.unit
    def test_rejects_negative_value(self):
        with pytest.raises(ValidationError):
            encode_tba_execute(HYPERMAP_ADDRESS, -1, b"", ExecuteMode.CALL)


class TestNotesBatch:
    @pytest.mark.unit
    def test_wraps_registry_notes_in_delegated_multicall(self):
        notes = [("~price", "0.02"), ("~description", "new")]

        payload = encode_notes_batch(notes, HYPERMAP_ADDRESS, MULTICALL_ADDRESS)

        target, value, inner, mode = decode_tba_execute(payload)
        assert target == MULTICALL_ADDRESS
        assert value == 0
        assert mode is ExecuteMode.DELEGATE_CALL
        decoded = decode_multicall(inner)
        assert [call.target for call in decoded] == [HYPERMAP_ADDRESS, HYPERMAP_ADDRESS]
        assert [decode_set_note(call.payload) for call in decoded] == notes

    @pytest.mark.unit
    def test_note_calls_for_targets_registry(self):
        calls = note_calls_for([("~wallet", OWNER)], HYPERMAP_ADDRESS)
        assert calls == [Call(HYPERMAP_ADDRESS, encode_set_note("~wallet", OWNER))]


class TestEncodeTbaOf:
    @pytest.mark.unit
    def test_encodes_namehash(self):
        node = keccak(text="node")
        assert encode_tba_of(node) == TBA_OF_SELECTOR + node

    @pytest.mark.unit
    def test_rejects_short_hash(self):
        with pytest.raises(ValidationError):
            encode_tba_of(b"\x00" * 31)
