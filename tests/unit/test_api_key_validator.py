"""Unit tests for staff API key validation."""

import pytest

from restaurant_ordering_service.auth.api_key_validator import APIKeyValidator


@pytest.mark.unit
class TestAPIKeyValidator:
    """Test suite for APIKeyValidator."""

    def test_validator_initialization_with_multiple_keys(self) -> None:
        validator = APIKeyValidator(api_keys=["key1", "key2", "key1"])
        assert validator.api_keys == frozenset({"key1", "key2"})

    def test_validator_initialization_with_empty_list_raises_error(self) -> None:
        """Test that initializing with empty key list raises ValueError."""
        with pytest.raises(ValueError, match="At least one staff API key must be provided"):
            APIKeyValidator(api_keys=[])

    def test_validate_returns_true_for_valid_key(self) -> None:
        validator = APIKeyValidator(api_keys=["valid-key"])
        assert validator.validate("valid-key") is True

    def test_validate_returns_false_for_invalid_key(self) -> None:
        validator = APIKeyValidator(api_keys=["valid-key"])
        assert validator.validate("invalid-key") is False

    def test_validate_returns_false_for_empty_key(self) -> None:
        validator = APIKeyValidator(api_keys=["valid-key"])
        assert validator.validate("") is False

    def test_validate_works_with_multiple_valid_keys(self) -> None:
        """Test that validate accepts any of multiple valid keys."""
        validator = APIKeyValidator(api_keys=["counter", "kitchen"])
        assert validator.validate("counter") is True
        assert validator.validate("kitchen") is True
        assert validator.validate("customer") is False

    def test_validate_is_case_sensitive_and_does_not_strip(self) -> None:
        validator = APIKeyValidator(api_keys=["StaffKey"])
        assert validator.validate("staffkey") is False
        assert validator.validate(" StaffKey") is False
        assert validator.validate("StaffKey ") is False
