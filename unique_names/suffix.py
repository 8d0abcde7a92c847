"""Suffix format parsing: "Foo" → "Foo (1)" and back."""

import re
from dataclasses import dataclass
from functools import lru_cache

from .errors import ConfigError

PLACEHOLDER = "{n}"
DEFAULT_FORMAT = " ({n})"


@dataclass(frozen=True)
class SuffixFormat:
    """A suffix template with exactly one {n} placeholder.

    Examples:
        SuffixFormat.parse(" ({n})").separator → " ("
        SuffixFormat.parse("-{n}").render(3) → "-3"
    """

    template: str
    separator: str  # literal text before the placeholder

    @classmethod
    def parse(cls, template: str) -> "SuffixFormat":
        if not isinstance(template, str):
            raise ConfigError(f"suffix format must be a string, got {type(template).__name__}")
        pos = template.find(PLACEHOLDER)
        if pos == -1:
            raise ConfigError(f"suffix format must contain {PLACEHOLDER}: {template!r}")
        if template.count(PLACEHOLDER) > 1:
            raise ConfigError(f"suffix format must contain {PLACEHOLDER} only once: {template!r}")
        return cls(template=template, separator=template[:pos])

    def render(self, n: int) -> str:
        return encode(self.template, n)

    def apply(self, base: str, n: int) -> str:
        """Append the rendered suffix for n to base."""
        return base + self.render(n)

    def decode(self, value: str) -> tuple[str, int] | None:
        return decode(self.template, value)

    def strip(self, value: str) -> str:
        return strip_suffix(self.template, value)

    def like_prefix(self, base: str) -> str:
        """Prefix shared by every suffixed variant of base."""
        return base + self.separator


@lru_cache(maxsize=128)
def _compile(template: str) -> re.Pattern:
    # Escape everything, then swap the escaped placeholder for a digit group
    suffix_re = re.escape(template).replace(re.escape(PLACEHOLDER), r"(\d+)", 1)
    return re.compile(r"^(.*)" + suffix_re + r"$", re.DOTALL)


def encode(template: str, n: int) -> str:
    """Render the suffix for n, e.g. encode(" ({n})", 2) → " (2)"."""
    return template.replace(PLACEHOLDER, str(n), 1)


def decode(template: str, value: str) -> tuple[str, int] | None:
    """Split value into (base, number), or None if it carries no suffix.

    Examples:
        decode(" ({n})", "Foo (3)") → ("Foo", 3)
        decode(" ({n})", "Foo-3") → None
    """
    m = _compile(template).match(value)
    if not m:
        return None
    return m.group(1), int(m.group(2))


def strip_suffix(template: str, value: str) -> str:
    """Remove a recognized suffix, leaving the base value."""
    parsed = decode(template, value)
    return parsed[0] if parsed else value
