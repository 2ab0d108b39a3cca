"""Order lifecycle models.

An order moves through three collections: open, paid and completed. The
record itself carries stage-specific fields (``isPaid``, ``paidAt``,
``timeCompleted``) that are added or stripped as it moves.
"""

import logging
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import ConfigDict, Field, field_serializer, field_validator, model_validator

from restaurant_ordering_service.models.menu_models import CamelModel

logger = logging.getLogger(__name__)

ORDER_ID_PREFIX = "ORD"

# Fields that only exist while an order sits in the paid collection
PAYMENT_FIELDS = ("is_paid", "status", "paid_at")


def format_order_id(number: int) -> str:
    """Format a sequential order number as ``ORD001``."""
    return f"{ORDER_ID_PREFIX}{number:03d}"


def parse_order_number(order_id: str) -> int | None:
    """Extract the sequential number from an order id, or None if malformed."""
    if not order_id.startswith(ORDER_ID_PREFIX):
        return None
    suffix = order_id[len(ORDER_ID_PREFIX) :]
    return int(suffix) if suffix.isdigit() else None


class OrderType(str, Enum):
    """How the customer receives the order."""

    DINE_IN = "dine-in"
    PICK_UP = "pick-up"


class OrderStatus(str, Enum):
    """Stage-specific status written onto paid and completed records."""

    PAID = "paid"
    COMPLETED = "completed"


class OrderItem(CamelModel):
    """A single line of an order.

    ``name`` is the canonical reference to a menu item. ``id`` is only set on
    records imported from the legacy ``{id, quantity}`` shape.
    """

    name: str | None = None
    id: str | None = None
    quantity: int = Field(default=1, ge=1)

    @classmethod
    def from_legacy(cls, raw: Any) -> "OrderItem":
        """Normalize any historical item encoding into an OrderItem.

        Accepted shapes are a bare item name, ``{name, quantity?}`` and
        ``{id, quantity?}``. A missing or zero quantity counts as 1.

        Raises:
            ValueError: If the entry matches none of the known shapes
        """
        if isinstance(raw, OrderItem):
            return raw
        if isinstance(raw, str):
            return cls(name=raw, quantity=1)
        if isinstance(raw, dict):
            quantity = raw.get("quantity") or 1
            if raw.get("name") is not None:
                return cls(name=raw["name"], quantity=quantity)
            if raw.get("id") is not None:
                return cls(id=str(raw["id"]), quantity=quantity)
        raise ValueError(f"Unrecognized order item: {raw!r}")


def normalize_items(raw_items: Any, skip_unreadable: bool = False) -> list[OrderItem]:
    """Normalize a raw item list; a missing list means no items.

    Args:
        raw_items: Item entries in any of the legacy shapes
        skip_unreadable: Drop entries that fit no shape (``{quantity}`` only,
            null, non-positive quantity) instead of raising. Stored records
            are read this way; checkout payloads are not.
    """
    if not raw_items:
        return []

    items = []
    for raw in raw_items:
        try:
            items.append(OrderItem.from_legacy(raw))
        except ValueError:
            if not skip_unreadable:
                raise
            logger.warning(f"Skipping unreadable order item {raw!r}")
    return items


def coerce_optional_string(v: Any) -> str | None:
    """Tables and phone numbers are sometimes submitted as numbers."""
    if v is None or v == "":
        return None
    return str(v)


class Order(CamelModel):
    """An order in any stage of its lifecycle.

    Unknown keys on stored records are carried along when the order moves.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Sequential identifier, e.g. ORD001")
    order_type: OrderType = Field(..., description="dine-in or pick-up")
    customer_name: str = Field(default="", description="Name given at checkout")
    table: str | None = Field(None, description="Table number for dine-in orders")
    contact_number: str | None = Field(None, description="Phone number for pick-up orders")
    time_of_order: datetime = Field(..., description="When the order was placed")
    price: Decimal = Field(default=Decimal("0"), description="Order total", ge=0)
    items: list[OrderItem] = Field(default_factory=list)
    additional_info: str | None = None
    payment_method: str | None = None
    gcash_reference_number: str | None = None

    # Paid stage
    is_paid: bool | None = None
    status: OrderStatus | None = None
    paid_at: datetime | None = None

    # Completed stage
    time_completed: datetime | None = None
    completed_at: datetime | None = None

    @field_validator("items", mode="before")
    @classmethod
    def validate_items(cls, v: Any) -> list[OrderItem]:
        return normalize_items(v, skip_unreadable=True)

    @field_validator("table", "contact_number", mode="before")
    @classmethod
    def validate_destination_fields(cls, v: Any) -> str | None:
        return coerce_optional_string(v)

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float | int:
        return int(price) if price == price.to_integral_value() else float(price)

    def mark_paid(self, paid_at: datetime | None = None) -> "Order":
        """Return a copy of this order with payment fields set."""
        return self.model_copy(
            deep=True,
            update={
                "is_paid": True,
                "status": OrderStatus.PAID,
                "paid_at": paid_at or datetime.now(UTC),
            },
        )

    def mark_unpaid(self) -> "Order":
        """Return a copy of this order with payment fields removed."""
        return self.model_copy(deep=True, update={field: None for field in PAYMENT_FIELDS})

    def mark_completed(self, completed_at: datetime | None = None) -> "Order":
        """Return a copy of this order stamped as completed."""
        now = completed_at or datetime.now(UTC)
        return self.model_copy(
            deep=True,
            update={
                "status": OrderStatus.COMPLETED,
                "time_completed": now,
                "completed_at": now,
            },
        )


class OrderCreateRequest(CamelModel):
    """Checkout payload for a new open order."""

    order_type: OrderType
    customer_name: str = ""
    table: str | None = None
    contact_number: str | None = None
    price: Decimal = Field(default=Decimal("0"), ge=0)
    items: list[OrderItem] = Field(default_factory=list)
    additional_info: str | None = None
    payment_method: str | None = None
    gcash_reference_number: str | None = None

    @field_validator("items", mode="before")
    @classmethod
    def validate_items(cls, v: Any) -> list[OrderItem]:
        return normalize_items(v)

    @field_validator("table", "contact_number", mode="before")
    @classmethod
    def validate_destination_fields(cls, v: Any) -> str | None:
        return coerce_optional_string(v)

    @model_validator(mode="after")
    def validate_destination(self) -> "OrderCreateRequest":
        """Dine-in orders need a table, pick-up orders need a contact number."""
        if self.order_type == OrderType.DINE_IN:
            if not self.table:
                raise ValueError("table is required for dine-in orders")
            self.contact_number = None
        else:
            if not self.contact_number:
                raise ValueError("contactNumber is required for pick-up orders")
            self.table = None
        return self


class OrderActionRequest(CamelModel):
    """Body for lifecycle transitions: ``{"orderId": "ORD001"}``."""

    order_id: str = Field(..., min_length=1)


class OrderCollections(CamelModel):
    """All three order collections, as returned by ``GET /api/orders``."""

    orders: list[Order] = Field(default_factory=list)
    paid_orders: list[Order] = Field(default_factory=list)
    completed_orders: list[Order] = Field(default_factory=list)


class SalesSummary(CamelModel):
    """Sales figures derived from completed orders."""

    total_sales: Decimal = Decimal("0")
    total_orders: int = 0
    average_order_value: Decimal = Decimal("0")
    orders_by_type: dict[str, int] = Field(default_factory=dict)
    last_order_completed_at: datetime | None = None

    @field_serializer("total_sales", "average_order_value")
    def serialize_amount(self, amount: Decimal) -> float:
        return float(amount)
