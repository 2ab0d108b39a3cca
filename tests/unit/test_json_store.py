"""Unit tests for JsonDocumentStore."""

import json
from pathlib import Path

import pytest

from restaurant_ordering_service.errors import StorageError
from restaurant_ordering_service.repositories.json_store import JsonDocumentStore


@pytest.mark.unit
class TestJsonDocumentStore:
    """Test suite for JsonDocumentStore."""

    @pytest.fixture
    def store(self, tmp_path: Path) -> JsonDocumentStore:
        return JsonDocumentStore(tmp_path / "orders.json", {"orders": []})

    def test_read_creates_missing_file_from_default(self, store: JsonDocumentStore) -> None:
        document = store.read()

        assert document["orders"] == []
        assert document["lastUpdated"].endswith("Z")
        assert store.path.exists()

    def test_default_is_not_shared_between_reads(self, store: JsonDocumentStore) -> None:
        first = store.read()
        first["orders"].append({"id": "ORD001"})

        assert store.default_document == {"orders": []}

    def test_write_then_read(self, store: JsonDocumentStore) -> None:
        store.write({"orders": [{"id": "ORD001"}]})

        document = store.read()

        assert document["orders"] == [{"id": "ORD001"}]
        assert "lastUpdated" in document

    def test_write_without_touch_keeps_timestamp(self, store: JsonDocumentStore) -> None:
        store.write({"orders": [], "lastUpdated": "2024-01-01T00:00:00Z"}, touch=False)

        assert store.read()["lastUpdated"] == "2024-01-01T00:00:00Z"

    def test_missing_default_keys_are_filled_in(self, store: JsonDocumentStore) -> None:
        store.path.write_text(json.dumps({"lastUpdated": "x"}), encoding="utf-8")

        assert store.read()["orders"] == []

    def test_write_leaves_no_temporary_files(self, store: JsonDocumentStore) -> None:
        store.write({"orders": []})
        store.write({"orders": [{"id": "ORD001"}]})

        assert [p.name for p in store.path.parent.iterdir()] == ["orders.json"]

    def test_corrupt_file_raises_storage_error(self, store: JsonDocumentStore) -> None:
        store.path.write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError, match="Failed to read orders.json"):
            store.read()

    def test_non_object_document_raises_storage_error(self, store: JsonDocumentStore) -> None:
        store.path.write_text("[]", encoding="utf-8")

        with pytest.raises(StorageError, match="does not contain a JSON object"):
            store.read()

    def test_unserializable_document_raises_storage_error(
        self, store: JsonDocumentStore
    ) -> None:
        with pytest.raises(StorageError, match="Failed to write orders.json"):
            store.write({"orders": [object()]})

        assert not store.path.exists()
        assert list(store.path.parent.iterdir()) == []

    def test_modified_time(self, store: JsonDocumentStore) -> None:
        assert store.modified_time() is None

        store.write({"orders": []})

        assert store.modified_time() is not None
