"""Unit tests for address and price validation."""

from decimal import Decimal

import pytest

from provider_registry.shared.validation import (
    AddressValidator,
    PriceValidator,
    ValidationResult,
)


class TestValidationResult:
    @pytest.mark.unit
    def test_valid_result(self):
        result = ValidationResult(is_valid=True, normalized_value="x")
        assert result.is_valid
        assert result.error_message is None

    @pytest.mark.unit
    def test_invalid_result(self):
        result = ValidationResult(is_valid=False, error_message="nope")
        assert not result.is_valid
        assert result.normalized_value is None


class TestAddressValidator:
    @pytest.mark.unit
    def test_lowercase_is_checksummed(self):
        result = AddressValidator.validate("0x" + "ab" * 20)
        assert result.is_valid
        assert result.normalized_value.lower() == "0x" + "ab" * 20
        assert result.normalized_value != "0x" + "ab" * 20

    @pytest.mark.unit
    def test_strips_whitespace(self):
        result = AddressValidator.validate("  0x" + "11" * 20 + " ")
        assert result.normalized_value == "0x" + "11" * 20

    @pytest.mark.unit
    def test_required(self):
        result = AddressValidator.validate("", "Provider wallet")
        assert result.error_message == "Provider wallet is required"

    @pytest.mark.unit
    def test_prefix(self):
        result = AddressValidator.validate("11" * 21)
        assert result.error_message == "Address must start with '0x'"

    @pytest.mark.unit
    def test_length(self):
        result = AddressValidator.validate("0x1234")
        assert not result.is_valid
        assert "42 characters" in result.error_message

    @pytest.mark.unit
    def test_characters(self):
        result = AddressValidator.validate("0x" + "zz" * 20)
        assert result.error_message == "Address contains invalid characters"


class TestPriceValidatorParse:
    @pytest.mark.unit
    def test_decimal(self):
        assert PriceValidator.parse_price("0.01").normalized_value == Decimal("0.01")

    @pytest.mark.unit
    def test_commas(self):
        assert PriceValidator.parse_price("1,000.5").normalized_value == Decimal("1000.5")

    @pytest.mark.unit
    def test_zero_is_allowed(self):
        assert PriceValidator.parse_price("0").is_valid

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value,message",
        [
            ("", "Price is required"),
            ("-1", "Price must be a non-negative number"),
            ("abc", "Price must be a valid number"),
            ("1.2.3", "Price must be a valid number"),
            ("NaN", "Invalid numeric format (special value detected)"),
        ],
    )
    def test_rejections(self, value, message):
        result = PriceValidator.parse_price(value)
        assert not result.is_valid
        assert result.error_message == message

    @pytest.mark.unit
    def test_too_many_decimals(self):
        result = PriceValidator.parse_price("0." + "1" * 19)
        assert result.error_message == "Too many decimal places. Maximum 18 allowed"


class TestPriceValidatorValidate:
    @pytest.mark.unit
    def test_normalizes_to_plain_string(self):
        assert PriceValidator.validate("1E-3").normalized_value == "0.001"

    @pytest.mark.unit
    def test_passes_through_errors(self):
        assert PriceValidator.validate("x").error_message == "Price must be a valid number"
