"""Unit tests for bestseller aggregation and BestsellerService."""

import json
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from restaurant_ordering_service.errors import NotFoundError, StorageError
from restaurant_ordering_service.models.bestseller_models import BestsellerData, BestsellerEntry
from restaurant_ordering_service.models.menu_models import MenuItem
from restaurant_ordering_service.models.order_models import Order
from restaurant_ordering_service.services.bestseller_service import (
    BestsellerService,
    compute_bestsellers,
    select_top_bestsellers,
)


def completed_order(order_id: str, items: list) -> dict:
    return {
        "id": order_id,
        "orderType": "dine-in",
        "table": "1",
        "timeOfOrder": "2024-01-15T10:30:00Z",
        "timeCompleted": "2024-01-15T11:30:00Z",
        "status": "completed",
        "items": items,
    }


def menu_item(item_id: str, name: str, category: str) -> MenuItem:
    return MenuItem(id=item_id, name=name, price=100, category=category)


@pytest.mark.unit
class TestComputeBestsellers:
    """Test suite for the aggregation step."""

    def test_all_item_shapes_are_counted(self) -> None:
        menu = [menu_item("item_adobo", "Adobo", "BEEF")]
        orders = [
            Order.model_validate(completed_order("ORD001", ["Adobo"])),
            Order.model_validate(completed_order("ORD002", [{"name": "Adobo", "quantity": 2}])),
            Order.model_validate(completed_order("ORD003", [{"id": "item_adobo", "quantity": 3}])),
        ]

        result = compute_bestsellers(menu, orders)

        assert result.entries[0].quantity == 6
        assert result.processed_items == 3

    def test_unknown_items_are_skipped(self) -> None:
        menu = [menu_item("item_adobo", "Adobo", "BEEF")]
        orders = [
            Order.model_validate(
                completed_order("ORD001", ["Discontinued", {"id": "item_gone"}, "Adobo"])
            )
        ]

        result = compute_bestsellers(menu, orders)

        assert [(e.id, e.quantity) for e in result.entries] == [("item_adobo", 1)]
        assert result.processed_items == 1

    def test_every_menu_item_gets_an_entry(self) -> None:
        menu = [menu_item("a", "A", "X"), menu_item("b", "B", "X")]

        result = compute_bestsellers(menu, [])

        assert [(e.id, e.quantity) for e in result.entries] == [("a", 0), ("b", 0)]

    def test_ties_keep_menu_order(self) -> None:
        menu = [menu_item("a", "A", "X"), menu_item("b", "B", "X"), menu_item("c", "C", "X")]
        orders = [Order.model_validate(completed_order("ORD001", ["C", "B", "A", "C"]))]

        result = compute_bestsellers(menu, orders)

        assert [e.id for e in result.entries] == ["c", "a", "b"]

    def test_duplicate_names_credit_last_item(self) -> None:
        menu = [menu_item("first", "Adobo", "BEEF"), menu_item("second", "Adobo", "PORK")]
        orders = [Order.model_validate(completed_order("ORD001", ["Adobo"]))]

        result = compute_bestsellers(menu, orders)

        quantities = {e.id: e.quantity for e in result.entries}
        assert quantities == {"first": 0, "second": 1}


@pytest.mark.unit
class TestSelectTopBestsellers:
    """Test suite for picking the tagged items."""

    @staticmethod
    def entry(item_id: str, quantity: int, category: str = "FOOD") -> BestsellerEntry:
        return BestsellerEntry(id=item_id, name=item_id, quantity=quantity, category=category)

    def test_limits_to_five(self) -> None:
        entries = [self.entry(f"item_{i}", 10 - i) for i in range(8)]

        top = select_top_bestsellers(entries)

        assert [e.id for e in top] == [f"item_{i}" for i in range(5)]

    def test_drinks_are_excluded(self) -> None:
        entries = [self.entry("halo", 50, "Drinks"), self.entry("adobo", 3)]

        assert [e.id for e in select_top_bestsellers(entries)] == ["adobo"]

    def test_unsold_items_do_not_qualify(self) -> None:
        entries = [self.entry("adobo", 3), self.entry("tapa", 0)]

        assert [e.id for e in select_top_bestsellers(entries)] == ["adobo"]

    def test_no_exclusion(self) -> None:
        entries = [self.entry("halo", 50, "Drinks")]

        assert len(select_top_bestsellers(entries, excluded_category=None)) == 1


@pytest.mark.unit
class TestBestsellerService:
    """Test suite for BestsellerService over real data files."""

    def read_menu(self, data_dir: Path) -> dict:
        document = json.loads((data_dir / "menu.json").read_text(encoding="utf-8"))
        return {item["name"]: item["isBestseller"] for item in document["items"]}

    def test_recompute_tags_top_five_excluding_drinks(
        self, bestseller_service: BestsellerService, data_dir: Path, write_completed_orders
    ) -> None:
        write_completed_orders(
            [
                completed_order(
                    "ORD001",
                    [
                        {"name": "Halo-Halo", "quantity": 20},
                        {"name": "Adobo", "quantity": 6},
                        {"name": "Sisig", "quantity": 5},
                        {"name": "Tapa", "quantity": 4},
                        {"name": "Lechon", "quantity": 3},
                        {"name": "Pancit", "quantity": 2},
                        {"name": "Lumpia", "quantity": 1},
                    ],
                )
            ]
        )

        result = bestseller_service.recompute()

        assert result.success is True
        assert result.processed_items == 7
        assert [e.name for e in result.top_items] == ["Adobo", "Sisig", "Tapa", "Lechon", "Pancit"]
        assert self.read_menu(data_dir) == {
            "Adobo": True,
            "Tapa": True,
            "Sisig": True,
            "Lechon": True,
            "Pancit": True,
            "Lumpia": False,
            "Halo-Halo": False,
        }

    def test_recompute_with_fewer_qualifying_items(
        self, bestseller_service: BestsellerService, data_dir: Path, write_completed_orders
    ) -> None:
        write_completed_orders([completed_order("ORD001", ["Adobo", "Halo-Halo"])])

        result = bestseller_service.recompute()

        assert [e.name for e in result.top_items] == ["Adobo"]
        assert [name for name, tagged in self.read_menu(data_dir).items() if tagged] == ["Adobo"]

    def test_recompute_clears_stale_tags(
        self, bestseller_service: BestsellerService, data_dir: Path, sample_menu: dict
    ) -> None:
        sample_menu["items"][6]["isBestseller"] = True
        (data_dir / "menu.json").write_text(json.dumps(sample_menu), encoding="utf-8")

        bestseller_service.recompute()

        assert not any(self.read_menu(data_dir).values())

    def test_recompute_message_and_ranking_file(
        self, bestseller_service: BestsellerService, data_dir: Path, write_completed_orders
    ) -> None:
        write_completed_orders([completed_order("ORD001", ["Adobo", "Adobo", "Sisig"])])

        result = bestseller_service.recompute()

        assert result.message == "Bestseller data updated successfully. Processed 3 items."
        ranking = json.loads((data_dir / "bestseller.json").read_text(encoding="utf-8"))
        assert ranking["items"][0] == {
            "id": "item_adobo",
            "name": "Adobo",
            "quantity": 2,
            "category": "BEEF",
        }
        assert len(ranking["items"]) == 7
        assert "lastUpdated" in ranking

    def test_recompute_is_idempotent(
        self, bestseller_service: BestsellerService, data_dir: Path, write_completed_orders
    ) -> None:
        write_completed_orders([completed_order("ORD001", ["Sisig"])])

        bestseller_service.recompute()
        first = self.read_menu(data_dir)
        bestseller_service.recompute()

        assert self.read_menu(data_dir) == first

    def test_recompute_records_metric(
        self, bestseller_service: BestsellerService
    ) -> None:
        with patch(
            "restaurant_ordering_service.services.bestseller_service.record_bestseller_recompute"
        ) as mock_record:
            bestseller_service.recompute(trigger="file_watch")

        assert mock_record.call_args.args[0] == "file_watch"

    def test_recompute_propagates_storage_errors(
        self, bestseller_service: BestsellerService, data_dir: Path
    ) -> None:
        (data_dir / "completedOrders.json").write_text("{broken", encoding="utf-8")

        with pytest.raises(StorageError):
            bestseller_service.recompute()

    @pytest.mark.asyncio
    async def test_get_bestsellers_before_first_run(
        self, bestseller_service: BestsellerService
    ) -> None:
        with pytest.raises(NotFoundError, match="Bestseller data not found"):
            await bestseller_service.get_bestsellers()

    @pytest.mark.asyncio
    async def test_is_bestseller(
        self, bestseller_service: BestsellerService, write_completed_orders
    ) -> None:
        write_completed_orders([completed_order("ORD001", ["Adobo", "Halo-Halo", "Halo-Halo"])])
        bestseller_service.recompute()

        assert await bestseller_service.is_bestseller("item_adobo") is True
        assert await bestseller_service.is_bestseller("item_halo") is False
        assert await bestseller_service.is_bestseller("item_tapa") is False

    @pytest.mark.asyncio
    async def test_save_bestsellers_overwrites_ranking(
        self, bestseller_service: BestsellerService
    ) -> None:
        ranking = BestsellerData(
            items=[BestsellerEntry(id="item_tapa", name="Tapa", quantity=9, category="BEEF")],
            last_updated=datetime(2024, 2, 1, tzinfo=UTC),
        )

        await bestseller_service.save_bestsellers(ranking)
        stored = await bestseller_service.get_bestsellers()

        assert [e.id for e in stored.items] == ["item_tapa"]
        assert await bestseller_service.is_bestseller("item_tapa") is True
