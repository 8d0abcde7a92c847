"""Custom value generators.

A generator takes (base, scope, attempt) and returns a candidate value. It
can be given as a callable, or as the name of a method on the owning model.
"""

import secrets
import string
from collections.abc import Callable, Mapping
from typing import Any

from .errors import ConfigError

Generator = Callable[[str, Mapping[str, Any], int], str]


def normalize_generator(spec: Any, owner: Any = None) -> Generator | None:
    """Turn a generator spec into a plain callable (or None for the default).

    Strings are looked up as bound methods on owner.
    """
    if spec is None:
        return None
    if isinstance(spec, str):
        method = getattr(owner, spec, None) if owner is not None else None
        if not callable(method):
            raise ConfigError(f"unique value generator method {spec!r} not found")
        return method
    if callable(spec):
        return spec
    raise ConfigError("unique value generator must be a method name or a callable")


def counter_suffix(separator: str = "-") -> Generator:
    """Generator producing base-1, base-2, ... from the attempt number."""

    def generate(base: str, scope: Mapping[str, Any], attempt: int) -> str:
        return f"{base}{separator}{attempt + 1}"

    return generate


def random_suffix(length: int = 5, separator: str = "-") -> Generator:
    """Generator appending a random alphanumeric token, e.g. Foo-a8K2z."""
    alphabet = string.ascii_letters + string.digits

    def generate(base: str, scope: Mapping[str, Any], attempt: int) -> str:
        token = "".join(secrets.choice(alphabet) for _ in range(length))
        return f"{base}{separator}{token}"

    return generate
