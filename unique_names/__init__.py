"""unique_names: keep a name field unique within a scope by suffixing collisions."""

__version__ = "0.1.0"

from .errors import ConfigError, GeneratorError, StoreError, UniqueNamesError  # noqa: E402
from .resolver import Resolver, UniquenessRequest, resolve  # noqa: E402
from .suffix import SuffixFormat  # noqa: E402

__all__ = [
    "ConfigError",
    "GeneratorError",
    "Resolver",
    "StoreError",
    "SuffixFormat",
    "UniqueNamesError",
    "UniquenessRequest",
    "resolve",
]
