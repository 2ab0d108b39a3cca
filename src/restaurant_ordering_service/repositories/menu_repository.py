"""Repository for the menu document (``menu.json``)."""

import logging
import threading
from pathlib import Path

from pydantic import ValidationError

from restaurant_ordering_service.errors import StorageError
from restaurant_ordering_service.models.menu_models import MenuData
from restaurant_ordering_service.repositories.json_store import JsonDocumentStore

logger = logging.getLogger(__name__)

MENU_FILE = "menu.json"


class MenuRepository:
    """Repository for menu items and categories.

    The whole menu is one document; callers that read, modify and save it
    should hold ``lock`` for the duration so concurrent edits are not lost.
    """

    def __init__(self, data_dir: Path) -> None:
        """Initialize repository.

        Args:
            data_dir: Directory holding the JSON data files
        """
        self.store = JsonDocumentStore(
            Path(data_dir) / MENU_FILE, {"items": [], "categories": []}
        )

    @property
    def lock(self) -> threading.RLock:
        return self.store.lock

    def get_menu(self) -> MenuData:
        """Load the full menu.

        Returns:
            MenuData: Items and categories

        Raises:
            StorageError: If the file cannot be read or parsed
        """
        document = self.store.read()
        try:
            return MenuData.model_validate(document)
        except ValidationError as e:
            logger.error(f"Menu document is invalid: {e}")
            raise StorageError("Menu data is invalid") from e

    def save_menu(self, menu: MenuData) -> MenuData:
        """Persist the full menu, refreshing its ``lastUpdated`` timestamp.

        Returns:
            MenuData: The menu as stored
        """
        document = menu.to_document()
        self.store.write(document)
        return MenuData.model_validate(document)
