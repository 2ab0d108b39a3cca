"""Menu data models.

Persisted and wire field names are camelCase (``isAvailable``, ``itemOrder``);
Python attributes are snake_case. Items reference their category by name.
"""

from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        """Serialize to the JSON-compatible shape stored on disk."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class MenuItem(CamelModel):
    """Menu item model."""

    # Keys written by other clients (e.g. categoryOrder) are kept on save
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Unique identifier for the menu item")
    name: str = Field(..., description="Item name")
    price: Decimal = Field(..., description="Item price", ge=0)
    category: str = Field(..., description="Name of the category this item belongs to")
    description: str = Field(default="", description="Item description")
    image: str | None = Field(None, description="Image path or URL")
    is_available: bool = Field(default=True, description="Whether item can be ordered")
    item_order: int = Field(default=0, description="Display position within the category")
    is_bestseller: bool = Field(default=False, description="Derived bestseller tag")

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float | int:
        """Write prices as JSON numbers."""
        return int(price) if price == price.to_integral_value() else float(price)


class Category(CamelModel):
    """Menu category model."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Unique identifier for the category")
    name: str = Field(..., description="Display label, referenced by menu items")
    order: int = Field(default=0, description="Display position among categories")


class MenuData(CamelModel):
    """Complete menu document."""

    model_config = ConfigDict(extra="allow")

    items: list[MenuItem] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def find_item(self, item_id: str) -> MenuItem | None:
        return next((item for item in self.items if item.id == item_id), None)

    def find_category(self, category_id: str) -> Category | None:
        return next((cat for cat in self.categories if cat.id == category_id), None)

    def items_in_category(self, category_name: str) -> list[MenuItem]:
        return [item for item in self.items if item.category == category_name]


class MenuItemCreate(CamelModel):
    """Payload for adding a menu item."""

    name: str
    price: Decimal = Field(..., ge=0)
    category: str
    description: str = ""
    image: str | None = None
    is_available: bool = True


class MenuItemUpdate(CamelModel):
    """Partial update for a menu item; unset fields are left unchanged."""

    name: str | None = None
    price: Decimal | None = Field(None, ge=0)
    category: str | None = None
    description: str | None = None
    image: str | None = None
    is_available: bool | None = None
    item_order: int | None = None


class CategoryCreate(CamelModel):
    """Payload for adding a category."""

    name: str = Field(..., min_length=1)


class CategoryUpdate(CamelModel):
    """Partial update for a category."""

    name: str | None = Field(None, min_length=1)
    order: int | None = None


class MenuReplaceRequest(CamelModel):
    """Wholesale replacement of items and/or categories."""

    items: list[MenuItem] | None = None
    categories: list[Category] | None = None


class ItemReorderRequest(CamelModel):
    """New display order for the items of one category."""

    category: str
    item_ids: list[str]


class CategoryReorderRequest(CamelModel):
    """New display order for categories."""

    category_ids: list[str]
