"""Provider validation utilities for Provider Registry."""

import re

from provider_registry.provider import ProviderRecord
from provider_registry.shared.validation import (
    AddressValidator,
    PriceValidator,
    ValidationResult,
)

PROVIDER_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9-]+$")
MIN_PROVIDER_NAME_LENGTH = 3
MAX_PROVIDER_NAME_LENGTH = 32


class ProviderValidator:
    @classmethod
    def validate_name(cls, name: str) -> ValidationResult:
        if not name or not name.strip():
            return ValidationResult(
                is_valid=False, error_message="Provider name is required"
            )

        normalized = name.strip()

        if len(normalized) < MIN_PROVIDER_NAME_LENGTH:
            return ValidationResult(
                is_valid=False,
                error_message=f"Provider name must be at least {MIN_PROVIDER_NAME_LENGTH} characters",
            )

        if len(normalized) > MAX_PROVIDER_NAME_LENGTH:
            return ValidationResult(
                is_valid=False,
                error_message=f"Provider name must be {MAX_PROVIDER_NAME_LENGTH} characters or less",
            )

        if not PROVIDER_NAME_PATTERN.match(normalized):
            return ValidationResult(
                is_valid=False,
                error_message="Provider name can only contain letters, numbers, and hyphens",
            )

        return ValidationResult(is_valid=True, normalized_value=normalized)

    @classmethod
    def validate_wallet(cls, wallet: str) -> ValidationResult:
        return AddressValidator.validate(wallet, "Provider wallet")

    @classmethod
    def validate_price(cls, price: str) -> ValidationResult:
        return PriceValidator.validate(price)

    @classmethod
    def validate_record(cls, record: ProviderRecord) -> ValidationResult:
        for result in (
            cls.validate_name(record.name),
            cls.validate_wallet(record.wallet),
            cls.validate_price(record.price),
        ):
            if not result.is_valid:
                return result

        return ValidationResult(is_valid=True, normalized_value=record)
