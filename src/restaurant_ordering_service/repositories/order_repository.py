"""Repository for the three order collections.

Open, paid and completed orders are stored in separate JSON files. Moving an
order between collections happens under a single lock, and the destination is
written before the source so an interrupted move can leave a duplicate but
never drops the order.
"""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from restaurant_ordering_service.errors import StorageError
from restaurant_ordering_service.models.order_models import (
    Order,
    format_order_id,
    parse_order_number,
)
from restaurant_ordering_service.repositories.json_store import JsonDocumentStore

logger = logging.getLogger(__name__)

OPEN = "orders"
PAID = "paidOrders"
COMPLETED = "completedOrders"

COLLECTION_FILES = {
    OPEN: "orders.json",
    PAID: "paidorders.json",
    COMPLETED: "completedOrders.json",
}

# Persisted in orders.json so numbers are never reused within a data directory
COUNTER_KEY = "lastOrderNumber"


class OrderRepository:
    """Repository for order lifecycle storage.

    Methods return None when the referenced order is not in the expected
    collection and raise StorageError when a file cannot be read or written.
    """

    def __init__(self, data_dir: Path) -> None:
        """Initialize repository.

        Args:
            data_dir: Directory holding the JSON data files
        """
        self.data_dir = Path(data_dir)
        self.stores: dict[str, JsonDocumentStore] = {
            name: JsonDocumentStore(self.data_dir / filename, {name: []})
            for name, filename in COLLECTION_FILES.items()
        }
        # One lock for every collection: moves touch two files at once
        self.lock = self.stores[OPEN].lock
        for store in self.stores.values():
            store.lock = self.lock

    @property
    def completed_orders_store(self) -> JsonDocumentStore:
        return self.stores[COMPLETED]

    @property
    def completed_orders_path(self) -> Path:
        return self.stores[COMPLETED].path

    def list_orders(self, collection: str) -> list[Order]:
        """List all orders in a collection.

        Args:
            collection: One of ``orders``, ``paidOrders``, ``completedOrders``

        Returns:
            list: Orders in stored order (empty list if none)
        """
        with self.lock:
            document = self.stores[collection].read()
            return self._parse_orders(collection, document[collection])

    def get_order(self, collection: str, order_id: str) -> Order | None:
        """Retrieve one order from a collection.

        Returns:
            Order if found, None otherwise
        """
        for order in self.list_orders(collection):
            if order.id == order_id:
                return order
        return None

    def create_order(self, build: Callable[[str], Order]) -> Order:
        """Assign the next order id and append the built order to Open.

        Args:
            build: Callable receiving the new id and returning the order to store

        Returns:
            Order: The stored order
        """
        with self.lock:
            document = self.stores[OPEN].read()
            number = self._next_order_number(document)
            order = build(format_order_id(number))

            document[OPEN].append(order.to_document())
            document[COUNTER_KEY] = number
            self.stores[OPEN].write(document)

            logger.info(f"Stored order {order.id} in {OPEN}")
            return order

    def move_order(
        self,
        order_id: str,
        source: str,
        destination: str,
        transform: Callable[[Order], Order],
    ) -> Order | None:
        """Move an order from one collection to another.

        Args:
            order_id: Order identifier
            source: Collection the order must currently be in
            destination: Collection to move it to
            transform: Produces the destination record from the source record

        Returns:
            Order: The record as stored in the destination, or None if the
            order is not in the source collection
        """
        with self.lock:
            source_doc = self.stores[source].read()
            index = _find_index(source_doc[source], order_id)
            if index is None:
                return None

            order = self._parse_order(source, source_doc[source][index])
            moved = transform(order)

            destination_doc = self.stores[destination].read()
            destination_doc[destination].append(moved.to_document())
            self.stores[destination].write(destination_doc)

            del source_doc[source][index]
            self.stores[source].write(source_doc)

            logger.info(f"Moved order {order_id} from {source} to {destination}")
            return moved

    def delete_order(self, collection: str, order_id: str) -> Order | None:
        """Remove an order from a collection.

        Returns:
            Order: The removed record, or None if it was not in the collection
        """
        with self.lock:
            document = self.stores[collection].read()
            index = _find_index(document[collection], order_id)
            if index is None:
                return None

            removed = self._parse_order(collection, document[collection].pop(index))
            self.stores[collection].write(document)

            logger.info(f"Deleted order {order_id} from {collection}")
            return removed

    def _next_order_number(self, open_document: dict[str, Any]) -> int:
        last = open_document.get(COUNTER_KEY)
        if not isinstance(last, int):
            # Older data files carry no counter; derive it from existing ids
            last = 0
            for name, store in self.stores.items():
                records = open_document[OPEN] if name == OPEN else store.read()[name]
                for record in records:
                    number = parse_order_number(str(record.get("id", "")))
                    if number is not None:
                        last = max(last, number)
        return last + 1

    def _parse_orders(self, collection: str, records: list[dict[str, Any]]) -> list[Order]:
        return [self._parse_order(collection, record) for record in records]

    def _parse_order(self, collection: str, record: dict[str, Any]) -> Order:
        try:
            return Order.model_validate(record)
        except ValidationError as e:
            logger.error(f"Invalid order record in {collection}: {e}")
            raise StorageError(f"Invalid order record in {collection}") from e


def _find_index(records: list[dict[str, Any]], order_id: str) -> int | None:
    for index, record in enumerate(records):
        if record.get("id") == order_id:
            return index
    return None
