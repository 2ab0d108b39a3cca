"""Menu management service."""

import logging
import uuid

from restaurant_ordering_service.errors import ConflictError, NotFoundError, ValidationError
from restaurant_ordering_service.models.menu_models import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    MenuData,
    MenuItem,
    MenuItemCreate,
    MenuItemUpdate,
)
from restaurant_ordering_service.observability import traced
from restaurant_ordering_service.repositories.menu_repository import MenuRepository

logger = logging.getLogger(__name__)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def _require_category(menu: MenuData, name: str) -> None:
    if not any(cat.name == name for cat in menu.categories):
        raise ValidationError(f"Category '{name}' does not exist")


def _apply_positions(records: list, ordered_ids: list[str], attribute: str) -> None:
    """Assign sequential positions: listed ids first, then the rest in current order."""
    by_id = {record.id: record for record in records}
    unknown = [record_id for record_id in ordered_ids if record_id not in by_id]
    if unknown:
        raise ValidationError(f"Unknown ids in reorder request: {', '.join(unknown)}")

    listed = [by_id[record_id] for record_id in dict.fromkeys(ordered_ids)]
    listed_ids = {record.id for record in listed}
    remaining = sorted(
        (record for record in records if record.id not in listed_ids),
        key=lambda record: getattr(record, attribute),
    )
    for position, record in enumerate(listed + remaining):
        setattr(record, attribute, position)


class MenuService:
    """Service for menu items, categories and their display order.

    Items reference categories by name, so renaming a category rewrites every
    item that pointed at the old name. A category that still has items cannot
    be deleted.
    """

    def __init__(self, menu_repository: MenuRepository) -> None:
        self.menu_repository = menu_repository

    async def get_menu(self) -> MenuData:
        return self.menu_repository.get_menu()

    @traced("menu.replace")
    async def replace_menu(
        self,
        items: list[MenuItem] | None = None,
        categories: list[Category] | None = None,
    ) -> MenuData:
        """Replace items and/or categories wholesale (last writer wins)."""
        with self.menu_repository.lock:
            menu = self.menu_repository.get_menu()
            if items is not None:
                menu.items = items
            if categories is not None:
                menu.categories = categories
            logger.info(f"Replacing menu: {len(menu.items)} items, {len(menu.categories)} categories")
            return self.menu_repository.save_menu(menu)

    @traced("menu.add_item")
    async def add_item(self, request: MenuItemCreate) -> MenuItem:
        """Add an item at the end of its category.

        Raises:
            ValidationError: If the category does not exist
        """
        with self.menu_repository.lock:
            menu = self.menu_repository.get_menu()
            _require_category(menu, request.category)
            item = MenuItem(
                id=_new_id("item"),
                item_order=len(menu.items_in_category(request.category)),
                is_bestseller=False,
                **request.model_dump(),
            )
            menu.items.append(item)
            self.menu_repository.save_menu(menu)

        logger.info(f"Added menu item {item.id} ({item.name}) to {item.category}")
        return item

    @traced("menu.update_item")
    async def update_item(self, item_id: str, changes: MenuItemUpdate) -> MenuItem:
        """Merge changes into an item.

        ``itemOrder`` is kept unless given, except that an item moved to another
        category goes to the end of it.

        Raises:
            NotFoundError: If the item does not exist
            ValidationError: If the new category does not exist
        """
        with self.menu_repository.lock:
            menu = self.menu_repository.get_menu()
            item = menu.find_item(item_id)
            if item is None:
                raise NotFoundError(f"Item {item_id} not found")

            updates = changes.model_dump(exclude_none=True)
            if changes.category is not None and changes.category != item.category:
                _require_category(menu, changes.category)
                updates.setdefault("item_order", len(menu.items_in_category(changes.category)))

            for field, value in updates.items():
                setattr(item, field, value)
            self.menu_repository.save_menu(menu)

        logger.info(f"Updated menu item {item_id}")
        return item

    @traced("menu.delete_item")
    async def delete_item(self, item_id: str) -> MenuItem:
        """Remove an item from the menu.

        Raises:
            NotFoundError: If the item does not exist
        """
        with self.menu_repository.lock:
            menu = self.menu_repository.get_menu()
            item = menu.find_item(item_id)
            if item is None:
                raise NotFoundError(f"Item {item_id} not found")

            menu.items.remove(item)
            self.menu_repository.save_menu(menu)

        logger.info(f"Deleted menu item {item_id} ({item.name})")
        return item

    @traced("menu.add_category")
    async def add_category(self, request: CategoryCreate) -> Category:
        """Add a category after the existing ones.

        Raises:
            ValidationError: If a category with the same name exists
        """
        with self.menu_repository.lock:
            menu = self.menu_repository.get_menu()
            if any(cat.name == request.name for cat in menu.categories):
                raise ValidationError(f"Category '{request.name}' already exists")

            category = Category(id=_new_id("cat"), name=request.name, order=len(menu.categories))
            menu.categories.append(category)
            self.menu_repository.save_menu(menu)

        logger.info(f"Added category {category.id} ({category.name})")
        return category

    @traced("menu.update_category")
    async def update_category(self, category_id: str, changes: CategoryUpdate) -> Category:
        """Update a category, cascading a rename to every item in it.

        Raises:
            NotFoundError: If the category does not exist
            ValidationError: If the new name is already used by another category
        """
        with self.menu_repository.lock:
            menu = self.menu_repository.get_menu()
            category = menu.find_category(category_id)
            if category is None:
                raise NotFoundError(f"Category {category_id} not found")

            old_name = category.name
            if changes.name is not None and changes.name != old_name:
                if any(cat.name == changes.name for cat in menu.categories):
                    raise ValidationError(f"Category '{changes.name}' already exists")

                renamed = 0
                for item in menu.items_in_category(old_name):
                    item.category = changes.name
                    renamed += 1
                category.name = changes.name
                logger.info(f"Renamed category '{old_name}' to '{changes.name}', {renamed} items updated")

            if changes.order is not None:
                category.order = changes.order

            self.menu_repository.save_menu(menu)
        return category

    @traced("menu.delete_category")
    async def delete_category(self, category_id: str) -> Category:
        """Delete an empty category.

        Raises:
            NotFoundError: If the category does not exist
            ConflictError: If items still reference the category
        """
        with self.menu_repository.lock:
            menu = self.menu_repository.get_menu()
            category = menu.find_category(category_id)
            if category is None:
                raise NotFoundError(f"Category {category_id} not found")

            remaining = menu.items_in_category(category.name)
            if remaining:
                raise ConflictError(
                    f"Category '{category.name}' still has {len(remaining)} items; "
                    "move or delete them first"
                )

            menu.categories.remove(category)
            self.menu_repository.save_menu(menu)

        logger.info(f"Deleted category {category_id} ({category.name})")
        return category

    @traced("menu.reorder_items")
    async def reorder_items(self, category: str, item_ids: list[str]) -> list[MenuItem]:
        """Set ``itemOrder`` within a category to match the given id order.

        Raises:
            ValidationError: If an id does not belong to the category
        """
        with self.menu_repository.lock:
            menu = self.menu_repository.get_menu()
            items = menu.items_in_category(category)
            _apply_positions(items, item_ids, "item_order")
            self.menu_repository.save_menu(menu)

        return sorted(items, key=lambda item: item.item_order)

    @traced("menu.reorder_categories")
    async def reorder_categories(self, category_ids: list[str]) -> list[Category]:
        """Set category ``order`` to match the given id order.

        Raises:
            ValidationError: If an id does not exist
        """
        with self.menu_repository.lock:
            menu = self.menu_repository.get_menu()
            _apply_positions(menu.categories, category_ids, "order")
            self.menu_repository.save_menu(menu)

        return sorted(menu.categories, key=lambda cat: cat.order)
