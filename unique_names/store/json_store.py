"""JSON file record store, one file holding any number of collections."""

import copy
import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from ..errors import StoreError
from .base import Record
from .memory import MemoryStore

logger = logging.getLogger("unique_names.store")


class JsonStore(MemoryStore):
    """A MemoryStore for one collection, saved to disk after every write.

    File layout:
        {"collections": {"items": [{"id": 1, "values": {...}, "trashed": false}]}}
    """

    def __init__(self, path: Path, collection: str = "default"):
        self._path = Path(path)
        self.collection = collection
        self._data = self._load()
        records = [
            Record(id=r["id"], values=r.get("values", {}), trashed=r.get("trashed", False))
            for r in self._data["collections"].get(collection, [])
        ]
        super().__init__(records)

    def _load(self) -> dict:
        if not self._path.exists():
            return {"collections": {}}
        try:
            data = json.loads(self._path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            raise StoreError(f"Cannot read store {self._path}: {e}") from e
        if not isinstance(data, dict) or not isinstance(data.get("collections"), dict):
            raise StoreError(f"Store {self._path} is not a unique_names store")
        return data

    def _save(self):
        """Write the whole file atomically."""
        data = {
            **self._data,
            "collections": {
                **self._data["collections"],
                self.collection: [{"id": r.id, "values": r.values, "trashed": r.trashed} for r in self._records],
            },
        }
        tmp = self._path.with_suffix(".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data, indent=2) + "\n")
            tmp.rename(self._path)
        except OSError as e:
            raise StoreError(f"Cannot write store {self._path}: {e}") from e
        self._data = data
        logger.debug("saved %d records to %s", len(self._records), self._path)

    @contextmanager
    def _saving(self):
        """Apply an in-memory change and save it, undoing the change if the write fails."""
        before = copy.deepcopy(self._records)
        yield
        try:
            self._save()
        except StoreError:
            self._records = before
            raise

    def insert(self, values: dict[str, Any]) -> Record:
        with self._saving():
            record = super().insert(values)
        return record

    def update(self, record_id: Any, values: dict[str, Any]) -> Record:
        with self._saving():
            record = super().update(record_id, values)
        return record

    def trash(self, record_id: Any):
        with self._saving():
            super().trash(record_id)

    def restore(self, record_id: Any):
        with self._saving():
            super().restore(record_id)
