"""Configuration management for unique_names."""

import copy
import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

from .errors import ConfigError
from .suffix import DEFAULT_FORMAT, SuffixFormat

# Override with UNIQUE_NAMES_HOME environment variable
DATA_DIR = Path(os.environ.get("UNIQUE_NAMES_HOME", Path.home() / ".unique_names"))
CONFIG_FILE = DATA_DIR / "config.toml"
STORE_FILE = DATA_DIR / "store.json"

DEFAULT_CONFIG = {
    "defaults": {
        "unique_field": "name",
        "constraint_fields": [],
        "suffix_format": DEFAULT_FORMAT,
        "max_attempts": 10,
        "with_trashed": False,
        "trim": True,
    },
    "entities": {},
}

# Older option names, still accepted in config files and overrides
ALIASES = {
    "max_tries": "max_attempts",
    "soft_delete": "with_trashed",
}


@dataclass(frozen=True)
class UniqueSettings:
    """Effective settings for one entity type."""

    unique_field: str = "name"
    constraint_fields: tuple[str, ...] = ()
    suffix_format: str = DEFAULT_FORMAT
    max_attempts: int = 10
    with_trashed: bool = False
    trim: bool = True

    @property
    def suffix(self) -> SuffixFormat:
        return SuffixFormat.parse(self.suffix_format)


def ensure_dirs():
    """Create the data directory if it doesn't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def load_config() -> dict:
    """Load config, creating default if it doesn't exist."""
    ensure_dirs()
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE, "rb") as f:
                user_config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file {CONFIG_FILE}: {e}") from e
        # Merge with defaults (user overrides)
        config = _deep_merge(copy.deepcopy(DEFAULT_CONFIG), user_config)
    else:
        config = copy.deepcopy(DEFAULT_CONFIG)
        save_config(config)
    return config


def save_config(config: dict):
    """Save config to disk."""
    ensure_dirs()
    with open(CONFIG_FILE, "wb") as f:
        tomli_w.dump(config, f)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dicts, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _canonical(options: dict) -> dict:
    """Rename aliased keys and drop unset ones."""
    out = {}
    for key, value in options.items():
        if value is None:
            continue
        out[ALIASES.get(key, key)] = value
    return out


def _check(options: dict) -> dict:
    known = {f.name for f in fields(UniqueSettings)}
    unknown = set(options) - known
    if unknown:
        raise ConfigError(f"Unknown option(s): {', '.join(sorted(unknown))}")

    if "unique_field" in options and not isinstance(options["unique_field"], str):
        raise ConfigError("unique_field must be a string")
    if "constraint_fields" in options:
        cf = options["constraint_fields"]
        if not isinstance(cf, (list, tuple)) or not all(isinstance(f, str) for f in cf):
            raise ConfigError("constraint_fields must be a list of field names")
        options["constraint_fields"] = tuple(cf)
    if "max_attempts" in options:
        n = options["max_attempts"]
        if isinstance(n, bool) or not isinstance(n, int) or n < 1:
            raise ConfigError("max_attempts must be a positive integer")
    for flag in ("with_trashed", "trim"):
        if flag in options and not isinstance(options[flag], bool):
            raise ConfigError(f"{flag} must be true or false")
    if "suffix_format" in options:
        SuffixFormat.parse(options["suffix_format"])
    return options


def settings_for(entity: str | None = None, config: dict | None = None, **overrides) -> UniqueSettings:
    """Build settings from defaults, the entity's section, then overrides.

    Examples:
        settings_for("items", constraint_fields=["organization_id"])
        settings_for(config={}, max_tries=3)
    """
    if config is None:
        config = load_config()
    options = _canonical(config.get("defaults", {}))
    if entity is not None:
        options.update(_canonical(config.get("entities", {}).get(entity, {})))
    options.update(_canonical(overrides))
    return UniqueSettings(**_check(options))
