"""Bestseller aggregation and menu tagging.

The ranking is rebuilt from scratch on every run: per-item sold quantities are
summed over all completed orders, items are ranked by quantity, and the top
qualifying items get the ``isBestseller`` tag on the menu.
"""

import logging
import threading
import time
from dataclasses import dataclass
from datetime import UTC, datetime

from restaurant_ordering_service.errors import NotFoundError
from restaurant_ordering_service.models.bestseller_models import (
    BestsellerData,
    BestsellerEntry,
    BestsellerUpdateResult,
)
from restaurant_ordering_service.models.menu_models import MenuItem
from restaurant_ordering_service.models.order_models import Order
from restaurant_ordering_service.observability import traced
from restaurant_ordering_service.observability.metrics import record_bestseller_recompute
from restaurant_ordering_service.repositories.bestseller_repository import BestsellerRepository
from restaurant_ordering_service.repositories.menu_repository import MenuRepository
from restaurant_ordering_service.repositories.order_repository import COMPLETED, OrderRepository

logger = logging.getLogger(__name__)

DEFAULT_BESTSELLER_LIMIT = 5
DEFAULT_EXCLUDED_CATEGORY = "Drinks"


@dataclass
class AggregationResult:
    """Ranked sales aggregates.

    Attributes:
        entries: One entry per menu item, sorted by quantity descending
        processed_items: Number of order item entries matched to a menu item
    """

    entries: list[BestsellerEntry]
    processed_items: int


def compute_bestsellers(menu_items: list[MenuItem], completed_orders: list[Order]) -> AggregationResult:
    """Sum sold quantities per menu item over completed orders.

    Order items are matched by name when they carry one and by id otherwise.
    Names are not scoped by category, so when two menu items share a name the
    one listed last receives the sales. Entries that match no menu item are
    skipped.

    Args:
        menu_items: Current menu items, in menu order
        completed_orders: Full completed order history

    Returns:
        AggregationResult with a stable ranking (ties keep menu order)
    """
    name_to_id = {item.name: item.id for item in menu_items}
    entries = {
        item.id: BestsellerEntry(id=item.id, name=item.name, quantity=0, category=item.category)
        for item in menu_items
    }

    processed = 0
    for order in completed_orders:
        for order_item in order.items:
            if order_item.name is not None:
                item_id = name_to_id.get(order_item.name)
            else:
                item_id = order_item.id

            entry = entries.get(item_id) if item_id is not None else None
            if entry is None:
                logger.debug(f"Skipping unknown item {order_item.name or order_item.id} in order {order.id}")
                continue

            entry.quantity += order_item.quantity
            processed += 1

    # sorted() is stable, so equal quantities keep menu order
    ranked = sorted(entries.values(), key=lambda entry: entry.quantity, reverse=True)
    return AggregationResult(entries=ranked, processed_items=processed)


def select_top_bestsellers(
    entries: list[BestsellerEntry],
    limit: int = DEFAULT_BESTSELLER_LIMIT,
    excluded_category: str | None = DEFAULT_EXCLUDED_CATEGORY,
) -> list[BestsellerEntry]:
    """Pick the first ``limit`` ranked entries that sold and are not excluded.

    Fewer than ``limit`` entries are returned when fewer qualify.
    """
    qualifying = [
        entry
        for entry in entries
        if entry.quantity > 0 and (excluded_category is None or entry.category != excluded_category)
    ]
    return qualifying[:limit]


class BestsellerService:
    """Service that keeps the bestseller ranking and menu tags up to date.

    Recomputations are serialized with a lock, so triggers that fire close
    together (order completion, manual refresh, file watcher) run one after
    another instead of interleaving their writes.
    """

    def __init__(
        self,
        menu_repository: MenuRepository,
        order_repository: OrderRepository,
        bestseller_repository: BestsellerRepository,
        limit: int = DEFAULT_BESTSELLER_LIMIT,
        excluded_category: str | None = DEFAULT_EXCLUDED_CATEGORY,
    ) -> None:
        """Initialize the BestsellerService.

        Args:
            menu_repository: Repository for the menu document
            order_repository: Repository for order collections
            bestseller_repository: Repository for the stored ranking
            limit: Number of items to tag as bestsellers
            excluded_category: Category never tagged (None to allow all)
        """
        self.menu_repository = menu_repository
        self.order_repository = order_repository
        self.bestseller_repository = bestseller_repository
        self.limit = limit
        self.excluded_category = excluded_category
        self._recompute_lock = threading.Lock()

    @traced("bestsellers.recompute")
    def recompute(self, trigger: str = "manual") -> BestsellerUpdateResult:
        """Rebuild the ranking from completed orders and retag the menu.

        Args:
            trigger: Label for what caused the recomputation (for metrics/logs)

        Returns:
            BestsellerUpdateResult with the processed count and tagged items

        Raises:
            StorageError: If any data file cannot be read or written
        """
        started = time.perf_counter()
        with self._recompute_lock:
            completed_orders = self.order_repository.list_orders(COMPLETED)

            with self.menu_repository.lock:
                menu = self.menu_repository.get_menu()
                logger.info(
                    f"Recomputing bestsellers ({trigger}): {len(menu.items)} menu items, "
                    f"{len(completed_orders)} completed orders"
                )

                aggregation = compute_bestsellers(menu.items, completed_orders)
                self.bestseller_repository.save_ranking(
                    BestsellerData(items=aggregation.entries, last_updated=datetime.now(UTC))
                )

                top_items = select_top_bestsellers(aggregation.entries, self.limit, self.excluded_category)
                top_ids = {entry.id for entry in top_items}
                for item in menu.items:
                    item.is_bestseller = item.id in top_ids
                self.menu_repository.save_menu(menu)

        for rank, entry in enumerate(top_items, start=1):
            logger.info(f"Bestseller #{rank}: {entry.name} - {entry.quantity} sold ({entry.category})")

        record_bestseller_recompute(trigger, time.perf_counter() - started)

        return BestsellerUpdateResult(
            success=True,
            message=f"Bestseller data updated successfully. Processed {aggregation.processed_items} items.",
            processed_items=aggregation.processed_items,
            top_items=top_items,
        )

    async def get_bestsellers(self) -> BestsellerData:
        """Get the stored ranking.

        Raises:
            NotFoundError: If no ranking has been computed or saved yet
        """
        ranking = self.bestseller_repository.get_ranking()
        if ranking is None:
            raise NotFoundError("Bestseller data not found")
        return ranking

    async def save_bestsellers(self, ranking: BestsellerData) -> BestsellerData:
        """Overwrite the stored ranking with externally supplied data."""
        logger.info(f"Saving externally supplied bestseller ranking ({len(ranking.items)} items)")
        return self.bestseller_repository.save_ranking(ranking)

    async def is_bestseller(self, item_id: str) -> bool:
        """Check whether an item is among the top items of the stored ranking.

        Raises:
            NotFoundError: If no ranking has been computed yet
        """
        ranking = await self.get_bestsellers()
        top_items = select_top_bestsellers(ranking.items, self.limit, self.excluded_category)
        return any(entry.id == item_id for entry in top_items)
