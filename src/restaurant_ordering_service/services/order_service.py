"""Order lifecycle service.

Orders move ``open -> paid -> completed``. A paid order can be sent back to
open, an open order can be cancelled, and a completed order can be purged.
There is no direct ``open -> completed`` edge: an order must be marked paid
before it can be completed.
"""

import asyncio
import logging
from collections import Counter
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from restaurant_ordering_service.errors import NotFoundError, StorageError
from restaurant_ordering_service.models.order_models import (
    Order,
    OrderCollections,
    OrderCreateRequest,
    SalesSummary,
)
from restaurant_ordering_service.observability import traced
from restaurant_ordering_service.observability.metrics import record_order_transition
from restaurant_ordering_service.repositories.order_repository import (
    COMPLETED,
    OPEN,
    PAID,
    OrderRepository,
)
from restaurant_ordering_service.services.bestseller_service import BestsellerService

logger = logging.getLogger(__name__)


class OrderService:
    """Service for creating orders and moving them through their lifecycle.

    Completing an order or deleting a completed one changes sales history, so
    both trigger a bestseller recomputation once the move is stored. A failed
    recomputation is logged and does not fail the transition.
    """

    def __init__(
        self,
        order_repository: OrderRepository,
        bestseller_service: BestsellerService,
    ) -> None:
        """Initialize the OrderService.

        Args:
            order_repository: Repository for the three order collections
            bestseller_service: Service recomputing bestseller tags
        """
        self.order_repository = order_repository
        self.bestseller_service = bestseller_service

    @traced("orders.create")
    async def create_order(self, request: OrderCreateRequest) -> Order:
        """Store a new open order.

        Args:
            request: Checkout payload with normalized items

        Returns:
            The stored order with its assigned id and ``timeOfOrder``
        """
        fields = request.model_dump(exclude_none=True)
        time_of_order = datetime.now(UTC)

        order = self.order_repository.create_order(
            lambda order_id: Order(id=order_id, time_of_order=time_of_order, **fields)
        )

        logger.info(
            f"Created {order.order_type.value} order {order.id} with {len(order.items)} items"
        )
        record_order_transition("created")
        return order

    async def list_orders(self) -> OrderCollections:
        """Get every order grouped by lifecycle stage."""
        return OrderCollections(
            orders=self.order_repository.list_orders(OPEN),
            paid_orders=self.order_repository.list_orders(PAID),
            completed_orders=self.order_repository.list_orders(COMPLETED),
        )

    @traced("orders.mark_paid")
    async def mark_paid(self, order_id: str) -> Order:
        """Move an open order to the paid collection.

        Raises:
            NotFoundError: If the order is not open
        """
        paid_at = datetime.now(UTC)
        order = self.order_repository.move_order(
            order_id, OPEN, PAID, lambda o: o.mark_paid(paid_at)
        )
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")

        record_order_transition("paid")
        return order

    @traced("orders.mark_unpaid")
    async def mark_unpaid(self, order_id: str) -> Order:
        """Move a paid order back to the open collection without payment fields.

        Raises:
            NotFoundError: If the order is not in the paid collection
        """
        order = self.order_repository.move_order(order_id, PAID, OPEN, lambda o: o.mark_unpaid())
        if order is None:
            raise NotFoundError(f"Paid order {order_id} not found")

        record_order_transition("unpaid")
        return order

    @traced("orders.complete")
    async def complete_order(self, order_id: str) -> Order:
        """Move a paid order to the completed collection.

        Raises:
            NotFoundError: If the order is not in the paid collection
        """
        completed_at = datetime.now(UTC)
        order = self.order_repository.move_order(
            order_id, PAID, COMPLETED, lambda o: o.mark_completed(completed_at)
        )
        if order is None:
            raise NotFoundError(f"Paid order {order_id} not found")

        record_order_transition("completed")
        await self._refresh_bestsellers("order_completed")
        return order

    @traced("orders.cancel")
    async def cancel_order(self, order_id: str) -> Order:
        """Permanently remove an open order.

        Raises:
            NotFoundError: If the order is not open
        """
        order = self.order_repository.delete_order(OPEN, order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")

        record_order_transition("cancelled")
        return order

    @traced("orders.delete_completed")
    async def delete_completed_order(self, order_id: str) -> Order:
        """Purge a completed order and drop its contribution to sales counts.

        Raises:
            NotFoundError: If the order is not in the completed collection
        """
        order = self.order_repository.delete_order(COMPLETED, order_id)
        if order is None:
            raise NotFoundError(f"Completed order {order_id} not found")

        record_order_transition("purged")
        await self._refresh_bestsellers("completed_order_deleted")
        return order

    async def get_sales_summary(self) -> SalesSummary:
        """Summarize sales over the completed order history."""
        completed = self.order_repository.list_orders(COMPLETED)
        if not completed:
            return SalesSummary()

        total = sum((order.price for order in completed), Decimal("0"))
        average = (total / len(completed)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        finished_at = [order.completed_at or order.time_completed for order in completed]

        return SalesSummary(
            total_sales=total,
            total_orders=len(completed),
            average_order_value=average,
            orders_by_type=dict(Counter(order.order_type.value for order in completed)),
            last_order_completed_at=max((t for t in finished_at if t is not None), default=None),
        )

    async def _refresh_bestsellers(self, trigger: str) -> None:
        """Recompute bestsellers after a committed move.

        Runs in a worker thread; the recompute lock is shared with the file
        watcher.
        """
        try:
            await asyncio.to_thread(self.bestseller_service.recompute, trigger=trigger)
        except StorageError as e:
            logger.error(f"Bestseller recompute after {trigger} failed: {e}")
