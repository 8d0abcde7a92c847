"""Unique value resolution.

Given a candidate value and a scope, ask the store whether it is taken and,
if so, rewrite it until it isn't: either through a custom generator (bounded
retries) or by appending the next free suffix number.

Resolution is read-then-write. Two writers resolving the same base in the
same scope at the same time can both pick the same value; the store needs a
unique index as a backstop and the caller retries on a constraint violation
(see SqlStore.insert_unique).
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .config import UniqueSettings
from .errors import GeneratorError
from .generators import normalize_generator
from .store.base import RecordStore
from .suffix import DEFAULT_FORMAT, SuffixFormat

logger = logging.getLogger("unique_names.resolver")

# ASCII whitespace and NUL; other Unicode spaces such as NBSP are kept
TRIM_CHARS = " \t\n\r\0\x0b"


@dataclass(frozen=True)
class UniquenessRequest:
    field: str
    candidate_value: str
    scope: Mapping[str, Any] = field(default_factory=dict)
    exclude_id: Any = None
    include_trashed: bool = False

    def exists(self, store: RecordStore, value: str) -> bool:
        """Check value against the store under this request's scope and exclusion."""
        return store.exists(self.field, value, self.scope, self.exclude_id, self.include_trashed)


def resolve(
    request: UniquenessRequest,
    store: RecordStore,
    generator=None,
    suffix_format: str | SuffixFormat = DEFAULT_FORMAT,
    max_attempts: int = 10,
    owner: Any = None,
) -> str:
    """Return a value for request.field that no other record in scope holds.

    The candidate is returned unchanged if it is free. Otherwise the
    generator (a callable, or a method name looked up on owner) is tried,
    or the default suffix numbering is used when there is none.

    Raises ConfigError for a bad generator or suffix format and
    GeneratorError when the generator runs out of attempts. Store errors
    propagate unchanged.
    """
    gen = normalize_generator(generator, owner)
    if gen is None and not isinstance(suffix_format, SuffixFormat):
        suffix_format = SuffixFormat.parse(suffix_format)

    if not request.exists(store, request.candidate_value):
        return request.candidate_value

    if gen is not None:
        value = _resolve_with_generator(request, store, gen, max_attempts)
    else:
        value = _resolve_with_suffix(request, store, suffix_format)
    logger.debug("resolved %s=%r to %r in scope %r", request.field, request.candidate_value, value, dict(request.scope))
    return value


def _resolve_with_generator(request, store, gen, max_attempts: int) -> str:
    base = request.candidate_value
    for attempt in range(max_attempts):
        # Always pass the original base, never the previous attempt's output
        value = gen(base, request.scope, attempt)
        if not request.exists(store, value):
            return value
        logger.debug("generator attempt %d produced taken value %r", attempt, value)
    raise GeneratorError(f"Unable to generate a unique value after {max_attempts} attempts")


def _resolve_with_suffix(request, store, fmt: SuffixFormat) -> str:
    base = fmt.strip(request.candidate_value)

    existing = store.fetch_values(
        request.field,
        base,
        fmt.like_prefix(base),
        request.scope,
        request.exclude_id,
        request.include_trashed,
    )

    numbers = []
    for value in existing:
        if value == base:
            numbers.append(0)
            continue
        parsed = fmt.decode(value)
        # Prefix matches with another base or another suffix shape don't count
        if parsed and parsed[0] == base:
            numbers.append(parsed[1])

    # Continue from the highest number seen; gaps are never refilled
    next_n = max(numbers, default=0) + 1
    value = fmt.apply(base, next_n)
    while request.exists(store, value):
        next_n += 1
        value = fmt.apply(base, next_n)
    return value


class Resolver:
    """A store plus settings, for resolving values one call at a time.

    Examples:
        resolver = Resolver(store, settings_for("items"))
        resolver.resolve("Foo", {"organization_id": 1})  → "Foo (1)"
    """

    def __init__(self, store: RecordStore, settings: UniqueSettings | None = None):
        self.store = store
        self.settings = settings or UniqueSettings()

    def request(self, value: str, scope: Mapping[str, Any] | None = None, exclude_id: Any = None) -> UniquenessRequest:
        if self.settings.trim:
            value = value.strip(TRIM_CHARS)
        return UniquenessRequest(
            field=self.settings.unique_field,
            candidate_value=value,
            scope=dict(scope or {}),
            exclude_id=exclude_id,
            include_trashed=self.settings.with_trashed,
        )

    def resolve(
        self,
        value: str,
        scope: Mapping[str, Any] | None = None,
        exclude_id: Any = None,
        generator=None,
        owner: Any = None,
    ) -> str:
        return resolve(
            self.request(value, scope, exclude_id),
            self.store,
            generator=generator,
            suffix_format=self.settings.suffix_format,
            max_attempts=self.settings.max_attempts,
            owner=owner,
        )
