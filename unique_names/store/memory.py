"""In-process record store."""

import itertools
import logging
from collections.abc import Mapping
from typing import Any

from .base import Record, RecordStore

logger = logging.getLogger("unique_names.store")


def _in_scope(record: Record, scope: Mapping[str, Any]) -> bool:
    # Missing keys read as None, so an unset constraint matches a None one
    return all(record.values.get(k) == v for k, v in scope.items())


class MemoryStore(RecordStore):
    """Records kept in a list. Ids are assigned sequentially from 1."""

    def __init__(self, records: list[Record] | None = None):
        self._records: list[Record] = list(records or [])
        start = max((r.id for r in self._records if isinstance(r.id, int)), default=0) + 1
        self._ids = itertools.count(start)

    def _visible(self, scope, exclude_id, include_trashed):
        for r in self._records:
            if r.trashed and not include_trashed:
                continue
            if exclude_id is not None and r.id == exclude_id:
                continue
            if _in_scope(r, scope):
                yield r

    def count_matching(self, field, value, scope, exclude_id=None, include_trashed=False) -> int:
        return sum(
            1 for r in self._visible(scope, exclude_id, include_trashed)
            if r.values.get(field) == value
        )

    def fetch_values(self, field, base, prefix, scope, exclude_id=None, include_trashed=False) -> list[str]:
        values = []
        for r in self._visible(scope, exclude_id, include_trashed):
            v = r.values.get(field)
            if isinstance(v, str) and (v == base or v.startswith(prefix)):
                values.append(v)
        return values

    # -- persistence helpers ------------------------------------------------

    def insert(self, values: dict[str, Any]) -> Record:
        record = Record(id=next(self._ids), values=dict(values))
        self._records.append(record)
        logger.debug("inserted record %s", record.id)
        return record

    def get(self, record_id: Any) -> Record | None:
        for r in self._records:
            if r.id == record_id:
                return r
        return None

    def _require(self, record_id: Any) -> Record:
        record = self.get(record_id)
        if record is None:
            raise KeyError(f"No record with id {record_id!r}")
        return record

    def update(self, record_id: Any, values: dict[str, Any]) -> Record:
        record = self._require(record_id)
        record.values.update(values)
        return record

    def trash(self, record_id: Any):
        self._require(record_id).trashed = True

    def restore(self, record_id: Any):
        self._require(record_id).trashed = False

    def all(self, include_trashed: bool = False) -> list[Record]:
        return [r for r in self._records if include_trashed or not r.trashed]
