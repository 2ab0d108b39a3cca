"""Shared pytest fixtures and configuration for all tests."""

import json
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

# main.py only builds the real application outside of tests
os.environ.setdefault("ENVIRONMENT", "test")

from restaurant_ordering_service.repositories.bestseller_repository import (  # noqa: E402
    BestsellerRepository,
)
from restaurant_ordering_service.repositories.menu_repository import MenuRepository  # noqa: E402
from restaurant_ordering_service.repositories.order_repository import OrderRepository  # noqa: E402
from restaurant_ordering_service.services.bestseller_service import (  # noqa: E402
    BestsellerService,
)


@pytest.fixture
def staff_key() -> str:
    """Fixture providing the staff API key configured in test apps."""
    return "test-staff-key"


@pytest.fixture
def sample_menu() -> dict:
    """Fixture providing a small menu document with a Drinks category."""
    return {
        "items": [
            {"id": "item_adobo", "name": "Adobo", "price": 120, "category": "BEEF", "itemOrder": 0},
            {"id": "item_tapa", "name": "Tapa", "price": 110, "category": "BEEF", "itemOrder": 1},
            {"id": "item_sisig", "name": "Sisig", "price": 150, "category": "PORK", "itemOrder": 0},
            {"id": "item_lechon", "name": "Lechon", "price": 200, "category": "PORK", "itemOrder": 1},
            {"id": "item_pancit", "name": "Pancit", "price": 90, "category": "NOODLES", "itemOrder": 0},
            {"id": "item_lumpia", "name": "Lumpia", "price": 60, "category": "SIDES", "itemOrder": 0},
            {"id": "item_halo", "name": "Halo-Halo", "price": 80, "category": "Drinks", "itemOrder": 0},
        ],
        "categories": [
            {"id": "cat_beef", "name": "BEEF", "order": 0},
            {"id": "cat_pork", "name": "PORK", "order": 1},
            {"id": "cat_noodles", "name": "NOODLES", "order": 2},
            {"id": "cat_sides", "name": "SIDES", "order": 3},
            {"id": "cat_drinks", "name": "Drinks", "order": 4},
        ],
        "lastUpdated": "2024-01-15T10:30:00Z",
    }


@pytest.fixture
def data_dir(tmp_path: Path, sample_menu: dict) -> Path:
    """Fixture providing a data directory seeded with the sample menu."""
    (tmp_path / "menu.json").write_text(json.dumps(sample_menu), encoding="utf-8")
    return tmp_path


@pytest.fixture
def menu_repository(data_dir: Path) -> MenuRepository:
    return MenuRepository(data_dir)


@pytest.fixture
def order_repository(data_dir: Path) -> OrderRepository:
    return OrderRepository(data_dir)


@pytest.fixture
def bestseller_repository(data_dir: Path) -> BestsellerRepository:
    return BestsellerRepository(data_dir)


@pytest.fixture
def bestseller_service(
    menu_repository: MenuRepository,
    order_repository: OrderRepository,
    bestseller_repository: BestsellerRepository,
) -> BestsellerService:
    """Fixture providing a BestsellerService over the seeded data directory."""
    return BestsellerService(
        menu_repository=menu_repository,
        order_repository=order_repository,
        bestseller_repository=bestseller_repository,
    )


@pytest.fixture
def write_completed_orders(data_dir: Path) -> Callable[[list[Any]], None]:
    """Fixture returning a helper that writes a raw completedOrders.json."""

    def write(orders: list[Any]) -> None:
        (data_dir / "completedOrders.json").write_text(
            json.dumps({"completedOrders": orders}), encoding="utf-8"
        )

    return write
