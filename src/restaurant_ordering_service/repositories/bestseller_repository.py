"""Repository for the bestseller ranking (``bestseller.json``)."""

import logging
from pathlib import Path

from pydantic import ValidationError

from restaurant_ordering_service.errors import StorageError
from restaurant_ordering_service.models.bestseller_models import BestsellerData
from restaurant_ordering_service.repositories.json_store import JsonDocumentStore

logger = logging.getLogger(__name__)

BESTSELLER_FILE = "bestseller.json"


class BestsellerRepository:
    """Repository for the derived bestseller ranking."""

    def __init__(self, data_dir: Path) -> None:
        self.store = JsonDocumentStore(Path(data_dir) / BESTSELLER_FILE, {"items": []})

    def get_ranking(self) -> BestsellerData | None:
        """Load the stored ranking.

        Returns:
            BestsellerData if a ranking has been computed, None otherwise
        """
        if self.store.modified_time() is None:
            return None

        document = self.store.read()
        try:
            return BestsellerData.model_validate(document)
        except ValidationError as e:
            logger.error(f"Bestseller document is invalid: {e}")
            raise StorageError("Bestseller data is invalid") from e

    def save_ranking(self, ranking: BestsellerData) -> BestsellerData:
        """Overwrite the stored ranking wholesale.

        The ranking's own ``lastUpdated`` is kept as the computation time.
        """
        self.store.write(ranking.to_document(), touch=False)
        return ranking
