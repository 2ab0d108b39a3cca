"""JSON document storage.

Every collection lives in its own JSON file holding a single object. Writes go
to a temporary file in the same directory and are moved into place with
``os.replace`` so a reader never sees a half-written document.
"""

import json
import logging
import os
import tempfile
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from restaurant_ordering_service.errors import StorageError

logger = logging.getLogger(__name__)


class JsonDocumentStore:
    """Read and write one JSON document on local disk."""

    def __init__(self, path: Path, default_document: dict[str, Any]) -> None:
        """Initialize store.

        Args:
            path: Location of the JSON file
            default_document: Document written when the file does not exist yet
        """
        self.path = Path(path)
        self.default_document = default_document
        self.lock = threading.RLock()
        # Modification time left by this store's most recent write
        self.last_written_mtime: float | None = None

    def read(self) -> dict[str, Any]:
        """Load the document, creating it from the default if missing.

        Returns:
            dict: Parsed document

        Raises:
            StorageError: If the file cannot be read or is not a JSON object
        """
        with self.lock:
            if not self.path.exists():
                logger.info(f"Creating missing data file {self.path}")
                document = json.loads(json.dumps(self.default_document))
                document.setdefault("lastUpdated", _timestamp())
                self.write(document, touch=False)
                return document

            try:
                with self.path.open("r", encoding="utf-8") as f:
                    document = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to read {self.path}: {e}")
                raise StorageError(f"Failed to read {self.path.name}") from e

            if not isinstance(document, dict):
                raise StorageError(f"{self.path.name} does not contain a JSON object")

            for key, value in self.default_document.items():
                document.setdefault(key, json.loads(json.dumps(value)))
            return document

    def write(self, document: dict[str, Any], touch: bool = True) -> None:
        """Overwrite the document atomically.

        Args:
            document: Full document to persist
            touch: Whether to refresh the ``lastUpdated`` timestamp

        Raises:
            StorageError: If the file cannot be written
        """
        with self.lock:
            if touch:
                document["lastUpdated"] = _timestamp()

            tmp_name = None
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, indent=2)
                os.replace(tmp_name, self.path)
                self.last_written_mtime = self.modified_time()
            except (OSError, TypeError, ValueError) as e:
                logger.error(f"Failed to write {self.path}: {e}")
                if tmp_name and os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise StorageError(f"Failed to write {self.path.name}") from e

    def modified_time(self) -> float | None:
        """Return the file's modification time, or None if it does not exist."""
        try:
            return self.path.stat().st_mtime
        except FileNotFoundError:
            return None


def _timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")
