"""SQLAlchemy-backed record store for a single table."""

import logging
from collections.abc import Mapping
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Table, func, or_, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from ..hooks import apply_unique_value
from .base import RecordStore

logger = logging.getLogger("unique_names.store")


class SqlStore(RecordStore):
    """Queries one table through SQLAlchemy Core.

    bind may be an Engine (each call checks out its own connection) or an
    open Connection (calls run inside the caller's transaction, each write in
    its own SAVEPOINT so a constraint violation can be retried). A record
    counts as trashed when deleted_column is non-NULL; pass
    deleted_column=None for tables without soft deletes.
    """

    def __init__(
        self,
        bind: Engine | Connection,
        table: Table,
        id_column: str = "id",
        deleted_column: str | None = "deleted_at",
    ):
        self.bind = bind
        self.table = table
        self.id_col = table.c[id_column]
        self.deleted_col = table.c[deleted_column] if deleted_column and deleted_column in table.c else None

    @contextmanager
    def _connect(self, write: bool = False):
        if isinstance(self.bind, Connection):
            if write:
                # A failed statement must not abort the caller's transaction
                with self.bind.begin_nested():
                    yield self.bind
            else:
                yield self.bind
        elif write:
            with self.bind.begin() as conn:
                yield conn
        else:
            with self.bind.connect() as conn:
                yield conn

    def _filters(self, scope: Mapping[str, Any], exclude_id: Any, include_trashed: bool) -> list:
        clauses = []
        for name, value in scope.items():
            col = self.table.c[name]
            # "= NULL" never matches in SQL; two NULLs share a scope
            clauses.append(col.is_(None) if value is None else col == value)
        if exclude_id is not None:
            clauses.append(self.id_col != exclude_id)
        if self.deleted_col is not None and not include_trashed:
            clauses.append(self.deleted_col.is_(None))
        return clauses

    def count_matching(self, field, value, scope, exclude_id=None, include_trashed=False) -> int:
        col = self.table.c[field]
        stmt = (
            select(func.count())
            .select_from(self.table)
            .where(col == value, *self._filters(scope, exclude_id, include_trashed))
        )
        with self._connect() as conn:
            return conn.execute(stmt).scalar_one()

    def fetch_values(self, field, base, prefix, scope, exclude_id=None, include_trashed=False) -> list[str]:
        col = self.table.c[field]
        stmt = select(col).where(
            or_(col == base, col.startswith(prefix, autoescape=True)),
            *self._filters(scope, exclude_id, include_trashed),
        )
        with self._connect() as conn:
            values = list(conn.execute(stmt).scalars())
        logger.debug("prefix scan for %r returned %d values", prefix, len(values))
        return values

    # -- write helpers ------------------------------------------------------

    def insert(self, values: dict[str, Any]) -> Any:
        """Insert a row and return its primary key."""
        with self._connect(write=True) as conn:
            result = conn.execute(self.table.insert().values(**values))
            return result.inserted_primary_key[0]

    def update(self, record_id: Any, values: dict[str, Any]):
        with self._connect(write=True) as conn:
            conn.execute(self.table.update().where(self.id_col == record_id).values(**values))

    def trash(self, record_id: Any):
        if self.deleted_col is None:
            raise ValueError(f"Table {self.table.name} has no soft-delete column")
        self.update(record_id, {self.deleted_col.name: datetime.now(timezone.utc)})

    def restore(self, record_id: Any):
        if self.deleted_col is None:
            raise ValueError(f"Table {self.table.name} has no soft-delete column")
        self.update(record_id, {self.deleted_col.name: None})

    def insert_unique(self, values: dict[str, Any], settings=None, generator=None, owner=None, retries: int = 3) -> Any:
        """Resolve the unique field, insert, and retry on a unique-index violation.

        Another writer can take the resolved value between resolution and
        insert. With a unique index on (scope..., field) the insert fails and
        the value is resolved again against the new state. The last
        IntegrityError is re-raised once retries are used up. On success
        values is updated with what was stored.
        """
        for attempt in range(retries + 1):
            record = dict(values)
            apply_unique_value(record, self, settings, generator=generator, owner=owner)
            try:
                record_id = self.insert(record)
            except IntegrityError:
                if attempt == retries:
                    raise
                logger.debug("insert of %r lost a race, retrying", record)
                continue
            values.update(record)
            return record_id
