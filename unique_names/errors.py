"""Exceptions raised while resolving unique values."""


class UniqueNamesError(Exception):
    """Base class for all unique_names errors."""


class ConfigError(UniqueNamesError):
    """Raised for invalid configuration (suffix format, generator, settings)."""


class GeneratorError(UniqueNamesError):
    """Raised when a custom generator cannot produce a free value."""


class StoreError(UniqueNamesError):
    """Raised by the bundled stores when their backing data can't be read."""
