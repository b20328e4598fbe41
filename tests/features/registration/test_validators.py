"""Tests for provider record validation."""

from __future__ import annotations

from dataclasses import replace

import pytest

from provider_registry.features.registration.validators import ProviderValidator


class TestProviderNameValidation:
    @pytest.mark.unit
    @pytest.mark.parametrize("name", ["abc", "weather-api", "A1-b2-C3", "x" * 32])
    def test_valid_names(self, name):
        result = ProviderValidator.validate_name(name)
        assert result.is_valid
        assert result.normalized_value == name

    @pytest.mark.unit
    def test_strips_whitespace(self):
        assert ProviderValidator.validate_name("  weather  ").normalized_value == "weather"

    @pytest.mark.unit
    def test_empty_name(self):
        result = ProviderValidator.validate_name("   ")
        assert not result.is_valid
        assert result.error_message == "Provider name is required"

    @pytest.mark.unit
    def test_too_short(self):
        result = ProviderValidator.validate_name("ab")
        assert result.error_message == "Provider name must be at least 3 characters"

    @pytest.mark.unit
    def test_too_long(self):
        result = ProviderValidator.validate_name("x" * 33)
        assert result.error_message == "Provider name must be 32 characters or less"

    @pytest.mark.unit
    @pytest.mark.parametrize("name", ["weather.api", "weather api", "weather_api", "wëather"])
    def test_invalid_characters(self, name):
        result = ProviderValidator.validate_name(name)
        assert not result.is_valid
        assert "letters, numbers, and hyphens" in result.error_message


class TestRecordValidation:
    @pytest.mark.unit
    def test_valid_record(self, provider_record):
        result = ProviderValidator.validate_record(provider_record)
        assert result.is_valid
        assert result.normalized_value is provider_record

    @pytest.mark.unit
    def test_reports_first_problem(self, provider_record):
        record = replace(provider_record, name="", wallet="nope", price="abc")
        result = ProviderValidator.validate_record(record)
        assert result.error_message == "Provider name is required"

    @pytest.mark.unit
    def test_bad_wallet(self, provider_record):
        result = ProviderValidator.validate_record(replace(provider_record, wallet="nope"))
        assert not result.is_valid
        assert result.error_message.startswith("Provider wallet")

    @pytest.mark.unit
    def test_bad_price(self, provider_record):
        result = ProviderValidator.validate_record(replace(provider_record, price="abc"))
        assert result.error_message == "Price must be a valid number"
