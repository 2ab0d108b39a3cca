"""Unit tests for the environment-driven dependency factory."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from restaurant_ordering_service.adapters.paymongo_adapter import DEFAULT_BASE_URL, PayMongoAdapter
from restaurant_ordering_service.dependencies import (
    create_bestseller_service,
    create_payment_gateway,
    get_cors_origins,
    get_data_dir,
    get_staff_api_keys,
)


@pytest.mark.unit
class TestGetDataDir:
    """Tests for get_data_dir function."""

    def test_explicit_directory_is_created(self, tmp_path: Path) -> None:
        result = get_data_dir(tmp_path / "nested" / "data")

        assert result == (tmp_path / "nested" / "data").resolve()
        assert result.is_dir()

    @patch.dict(os.environ, {}, clear=True)
    def test_falls_back_to_data_dir_env(self, tmp_path: Path) -> None:
        os.environ["DATA_DIR"] = str(tmp_path / "from-env")

        assert get_data_dir() == (tmp_path / "from-env").resolve()


@pytest.mark.unit
class TestCreateBestsellerService:
    """Tests for create_bestseller_service function."""

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self, tmp_path: Path) -> None:
        service = create_bestseller_service(tmp_path)

        assert service.limit == 5
        assert service.excluded_category == "Drinks"
        assert service.order_repository.completed_orders_path == tmp_path / "completedOrders.json"

    @patch.dict(
        os.environ,
        {"BESTSELLER_LIMIT": "3", "BESTSELLER_EXCLUDED_CATEGORY": ""},
        clear=True,
    )
    def test_overrides_from_environment(self, tmp_path: Path) -> None:
        service = create_bestseller_service(tmp_path)

        assert service.limit == 3
        assert service.excluded_category is None


@pytest.mark.unit
class TestCreatePaymentGateway:
    """Tests for create_payment_gateway function."""

    @patch.dict(os.environ, {}, clear=True)
    def test_returns_none_without_secret_key(self) -> None:
        assert create_payment_gateway() is None

    @patch.dict(
        os.environ,
        {"PAYMONGO_SECRET_KEY": "sk_test", "PAYMONGO_PUBLIC_KEY": "pk_test"},
        clear=True,
    )
    def test_creates_paymongo_adapter(self) -> None:
        gateway = create_payment_gateway()

        assert isinstance(gateway, PayMongoAdapter)
        assert gateway.secret_key == "sk_test"
        assert gateway.public_key == "pk_test"
        assert gateway.base_url == DEFAULT_BASE_URL


@pytest.mark.unit
class TestEnvironmentLists:
    """Tests for comma-separated settings."""

    @patch.dict(os.environ, {"STAFF_API_KEYS": " a , b ,,"}, clear=True)
    def test_staff_keys_are_trimmed(self) -> None:
        assert get_staff_api_keys() == ["a", "b"]

    @patch.dict(os.environ, {}, clear=True)
    def test_development_key_when_unset(self) -> None:
        assert get_staff_api_keys() == ["dev-staff-key"]

    @patch.dict(
        os.environ, {"CORS_ORIGINS": "http://localhost:3000, https://order.example.com"}, clear=True
    )
    def test_cors_origins(self) -> None:
        assert get_cors_origins() == ["http://localhost:3000", "https://order.example.com"]

    @patch.dict(os.environ, {}, clear=True)
    def test_no_cors_origins(self) -> None:
        assert get_cors_origins() == []
