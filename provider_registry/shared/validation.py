"""Input validation utilities for addresses, prices and other user inputs."""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from eth_utils import to_checksum_address


@dataclass
class ValidationResult:
    is_valid: bool
    error_message: str | None = None
    normalized_value: Any = None


HEX_ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


class AddressValidator:
    ADDRESS_LENGTH = 42

    @staticmethod
    def validate(value: str, field_name: str = "Address") -> ValidationResult:
        if not value or not value.strip():
            return ValidationResult(
                is_valid=False,
                error_message=f"{field_name} is required",
            )

        normalized = value.strip()

        if not normalized.lower().startswith("0x"):
            return ValidationResult(
                is_valid=False,
                error_message=f"{field_name} must start with '0x'",
            )

        if len(normalized) != AddressValidator.ADDRESS_LENGTH:
            return ValidationResult(
                is_valid=False,
                error_message=f"{field_name} must be {AddressValidator.ADDRESS_LENGTH} characters (0x + 40 hex digits)",
            )

        if not HEX_ADDRESS_PATTERN.match(normalized):
            return ValidationResult(
                is_valid=False,
                error_message=f"{field_name} contains invalid characters",
            )

        return ValidationResult(
            is_valid=True,
            normalized_value=to_checksum_address(normalized),
        )


class PriceValidator:
    MAX_DECIMAL_PLACES = 18

    @staticmethod
    def parse_price(value: str) -> ValidationResult:
        if value is None or not str(value).strip():
            return ValidationResult(
                is_valid=False,
                error_message="Price is required",
            )

        raw_price = str(value).strip().replace(",", "").replace(" ", "")

        if raw_price.startswith("-") or raw_price.startswith("+"):
            return ValidationResult(
                is_valid=False,
                error_message="Price must be a non-negative number",
            )

        try:
            price_decimal = Decimal(raw_price)
        except (InvalidOperation, ValueError):
            return ValidationResult(
                is_valid=False,
                error_message="Price must be a valid number",
            )

        exponent = price_decimal.as_tuple().exponent
        if not isinstance(exponent, int):
            return ValidationResult(
                is_valid=False,
                error_message="Invalid numeric format (special value detected)",
            )

        if max(0, -exponent) > PriceValidator.MAX_DECIMAL_PLACES:
            return ValidationResult(
                is_valid=False,
                error_message=f"Too many decimal places. Maximum {PriceValidator.MAX_DECIMAL_PLACES} allowed",
            )

        return ValidationResult(
            is_valid=True,
            normalized_value=price_decimal,
        )

    @classmethod
    def validate(cls, value: str) -> ValidationResult:
        """Validate a price and normalise it to a plain decimal string."""
        result = cls.parse_price(value)
        if not result.is_valid:
            return result

        return ValidationResult(
            is_valid=True,
            normalized_value=format(result.normalized_value, "f"),
        )
