"""Record stores the resolver can query."""

from .base import Record, RecordStore
from .json_store import JsonStore
from .memory import MemoryStore

__all__ = ["JsonStore", "MemoryStore", "Record", "RecordStore"]
