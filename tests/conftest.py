"""Shared test fixtures for unique_names."""

import pytest

from unique_names.store.memory import MemoryStore


class MockStore(MemoryStore):
    """Memory store that records every query it answers."""

    def __init__(self, records=None):
        super().__init__(records)
        self.calls = []

    def count_matching(self, field, value, scope, exclude_id=None, include_trashed=False) -> int:
        self.calls.append(("count_matching", field, value, dict(scope), exclude_id, include_trashed))
        return super().count_matching(field, value, scope, exclude_id, include_trashed)

    def fetch_values(self, field, base, prefix, scope, exclude_id=None, include_trashed=False) -> list[str]:
        self.calls.append(("fetch_values", field, base, prefix, dict(scope), exclude_id, include_trashed))
        return super().fetch_values(field, base, prefix, scope, exclude_id, include_trashed)

    def queries(self, kind: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == kind]

    def add(self, *names, **values):
        """Insert one record per name, sharing the given extra values."""
        return [self.insert({"name": n, **values}) for n in names]


@pytest.fixture
def store():
    """Provide a fresh MockStore."""
    return MockStore()


@pytest.fixture
def tmp_data_dir(tmp_path, monkeypatch):
    """Redirect the unique_names data dir to a temp directory."""
    import unique_names.cli as cli
    import unique_names.config as config

    data_dir = tmp_path / "unique_names"
    data_dir.mkdir()
    config_file = data_dir / "config.toml"
    store_file = data_dir / "store.json"

    monkeypatch.setattr(config, "DATA_DIR", data_dir)
    monkeypatch.setattr(config, "CONFIG_FILE", config_file)
    monkeypatch.setattr(config, "STORE_FILE", store_file)

    # cli does `from .config import STORE_FILE` (separate binding)
    monkeypatch.setattr(cli, "STORE_FILE", store_file)

    return data_dir
