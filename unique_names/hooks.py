"""Save-time hooks that rewrite the unique field before a record is persisted."""

import inspect
from collections.abc import MutableMapping
from typing import Any

from .config import UniqueSettings
from .resolver import Resolver
from .store.base import RecordStore


def constraint_values(record: MutableMapping[str, Any], constraint_fields) -> dict[str, Any]:
    """Pick the scope out of a record. Missing fields read as None."""
    return {f: record.get(f) for f in constraint_fields}


def apply_unique_value(
    record: MutableMapping[str, Any],
    store: RecordStore,
    settings: UniqueSettings | None = None,
    record_id: Any = None,
    original: Any = None,
    generator=None,
    owner: Any = None,
) -> Any:
    """Make record's unique field unique within its scope, in place.

    With record_id unset the record is treated as new and always resolved.
    Otherwise it is an update: nothing happens unless the field differs from
    original, and the record's own row never counts as a conflict.
    Returns the (possibly rewritten) value.
    """
    settings = settings or UniqueSettings()
    field = settings.unique_field
    value = record.get(field)
    if value is None:
        return None
    if record_id is not None and value == original:
        return value

    resolver = Resolver(store, settings)
    record[field] = resolver.resolve(
        value,
        constraint_values(record, settings.constraint_fields),
        exclude_id=record_id,
        generator=generator,
        owner=owner,
    )
    return record[field]


class HasUniqueNames:
    """Mixin for attribute-style models.

    Subclasses can set any of these class attributes; unset ones fall back
    to the settings passed to make_unique():

        unique_field = "title"
        constraint_fields = ["organization_id"]
        unique_suffix_format = "-{n}"
        unique_value_generator = "generate_title"   # or a callable
        unique_with_trashed = True
    """

    id: Any = None
    unique_field: str | None = None
    constraint_fields: list[str] | None = None
    unique_suffix_format: str | None = None
    unique_value_generator: Any = None
    unique_with_trashed: bool | None = None

    def unique_settings(self, base: UniqueSettings | None = None) -> UniqueSettings:
        base = base or UniqueSettings()
        return UniqueSettings(
            unique_field=self.unique_field or base.unique_field,
            constraint_fields=tuple(
                self.constraint_fields if self.constraint_fields is not None else base.constraint_fields
            ),
            suffix_format=self.unique_suffix_format or base.suffix_format,
            max_attempts=base.max_attempts,
            with_trashed=(
                self.unique_with_trashed if self.unique_with_trashed is not None else base.with_trashed
            ),
            trim=base.trim,
        )

    def constraint_values(self, settings: UniqueSettings | None = None) -> dict[str, Any]:
        settings = self.unique_settings(settings)
        return {f: getattr(self, f, None) for f in settings.constraint_fields}

    def make_unique(
        self,
        store: RecordStore,
        settings: UniqueSettings | None = None,
        original: Any = None,
    ) -> Any:
        """Rewrite the unique attribute before saving.

        New models (id is None) are always resolved. Saved models are only
        resolved when the value differs from original, excluding their own id.
        """
        settings = self.unique_settings(settings)
        value = getattr(self, settings.unique_field, None)
        if value is None:
            return None
        if self.id is not None and value == original:
            return value

        # Read the raw attribute so a function set on the class stays unbound
        generator = inspect.getattr_static(self, "unique_value_generator")
        if isinstance(generator, staticmethod):
            generator = generator.__func__

        resolved = Resolver(store, settings).resolve(
            value,
            self.constraint_values(settings),
            exclude_id=self.id,
            generator=generator,
            owner=self,
        )
        setattr(self, settings.unique_field, resolved)
        return resolved
