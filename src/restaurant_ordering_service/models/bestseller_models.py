"""Bestseller ranking models.

The ranking is fully derived from completed orders and is overwritten
wholesale on every recomputation.
"""

from datetime import UTC, datetime

from pydantic import Field

from restaurant_ordering_service.models.menu_models import CamelModel


class BestsellerEntry(CamelModel):
    """Aggregate sold quantity for one menu item."""

    id: str = Field(..., description="Menu item identifier")
    name: str = Field(..., description="Menu item name at time of computation")
    quantity: int = Field(default=0, description="Total quantity sold", ge=0)
    category: str | None = Field(None, description="Menu item category name")


class BestsellerData(CamelModel):
    """Ranked bestseller document stored in ``bestseller.json``."""

    items: list[BestsellerEntry] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))


class BestsellerUpdateResult(CamelModel):
    """Outcome of a bestseller recomputation."""

    success: bool
    message: str
    processed_items: int = Field(default=0, description="Order item entries matched to the menu")
    top_items: list[BestsellerEntry] = Field(default_factory=list)


class BestsellerCheckResponse(CamelModel):
    """Response for ``GET /api/bestseller/check/{item_id}``."""

    item_id: str
    is_bestseller: bool
