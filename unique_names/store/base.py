"""Abstract record store interface."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Record:
    id: Any
    values: dict[str, Any] = field(default_factory=dict)
    trashed: bool = False  # soft-deleted: kept, but hidden unless asked for


class RecordStore(ABC):
    """What the resolver needs from the persistence layer.

    Scope is a conjunction of equality constraints, where None equals None.
    Trashed records are ignored unless include_trashed is set. Comparison
    is exact; the store decides what "exact" means for its backend.
    """

    @abstractmethod
    def count_matching(
        self,
        field: str,
        value: str,
        scope: Mapping[str, Any],
        exclude_id: Any = None,
        include_trashed: bool = False,
    ) -> int:
        """Count records in scope whose field equals value."""

    @abstractmethod
    def fetch_values(
        self,
        field: str,
        base: str,
        prefix: str,
        scope: Mapping[str, Any],
        exclude_id: Any = None,
        include_trashed: bool = False,
    ) -> list[str]:
        """Return field values in scope that equal base or start with prefix."""

    def exists(
        self,
        field: str,
        value: str,
        scope: Mapping[str, Any],
        exclude_id: Any = None,
        include_trashed: bool = False,
    ) -> bool:
        return self.count_matching(field, value, scope, exclude_id, include_trashed) > 0
