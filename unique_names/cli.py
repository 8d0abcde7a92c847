"""CLI entry point for unique_names."""

import json
import logging
import sys
from pathlib import Path

import click
import tomli_w

from . import __version__
from .config import STORE_FILE, load_config, settings_for
from .errors import UniqueNamesError
from .hooks import apply_unique_value, constraint_values
from .resolver import Resolver
from .store.json_store import JsonStore

logger = logging.getLogger("unique_names")


def _setup_logging(verbose: bool):
    """Send debug output to stderr when --verbose is given."""
    if not verbose:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


def _parse_scope(pairs: tuple[str, ...]) -> dict:
    """Parse field=value pairs. Values are read as JSON when possible, so
    org=1 is the integer 1, org=null is None, and org=acme is a string."""
    scope = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"expected field=value, got {pair!r}", param_hint="--scope")
        key, raw = pair.split("=", 1)
        try:
            value = json.loads(raw) if raw else None
        except json.JSONDecodeError:
            value = raw
        scope[key.strip()] = value
    return scope


def _settings(collection: str, suffix_format: str | None, with_trashed: bool | None, scope: dict):
    overrides = {"suffix_format": suffix_format, "with_trashed": with_trashed}
    if scope:
        overrides["constraint_fields"] = list(scope)
    return settings_for(collection, **overrides)


def _fail(e: Exception):
    # KeyError quotes its message
    message = e.args[0] if isinstance(e, KeyError) and e.args else e
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


store_option = click.option(
    "--store", "store_path", type=click.Path(dir_okay=False, path_type=Path), default=None,
    help="JSON store file (default: ~/.unique_names/store.json)",
)
collection_option = click.option(
    "-c", "--collection", default="default", show_default=True, help="Collection (entity type) name",
)
scope_option = click.option(
    "-s", "--scope", "scope_pairs", multiple=True, metavar="FIELD=VALUE",
    help="Constraint field value; repeat for several",
)
format_option = click.option("--format", "suffix_format", default=None, help="Suffix format, e.g. '-{n}'")
trashed_option = click.option(
    "--with-trashed/--without-trashed", default=None, help="Count soft-deleted records as conflicts",
)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(__version__)
@click.option("-v", "--verbose", is_flag=True, help="Log resolution steps to stderr")
def main(verbose):
    """unique-names: keep names unique by suffixing duplicates.

    \b
    Examples:
      unique-names add "Foo" -s organization_id=1     Store "Foo"
      unique-names add "Foo" -s organization_id=1     Store "Foo (1)"
      unique-names resolve "Foo" --format '-{n}'      Preview "Foo-1"
    """
    _setup_logging(verbose)


@main.command("resolve")
@click.argument("name")
@store_option
@collection_option
@scope_option
@format_option
@trashed_option
@click.option("--exclude-id", type=int, default=None, help="Ignore this record (when renaming it)")
def resolve_cmd(name, store_path, collection, scope_pairs, suffix_format, with_trashed, exclude_id):
    """Print the unique value NAME would be stored as."""
    try:
        scope = _parse_scope(scope_pairs)
        settings = _settings(collection, suffix_format, with_trashed, scope)
        store = JsonStore(store_path or STORE_FILE, collection)
        scope = constraint_values(scope, settings.constraint_fields)
        click.echo(Resolver(store, settings).resolve(name, scope, exclude_id=exclude_id))
    except UniqueNamesError as e:
        _fail(e)


@main.command("add")
@click.argument("name")
@store_option
@collection_option
@scope_option
@format_option
@trashed_option
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def add_cmd(name, store_path, collection, scope_pairs, suffix_format, with_trashed, as_json):
    """Store a record named NAME, suffixed if the name is taken."""
    try:
        scope = _parse_scope(scope_pairs)
        settings = _settings(collection, suffix_format, with_trashed, scope)
        store = JsonStore(store_path or STORE_FILE, collection)
        values = {settings.unique_field: name, **scope}
        apply_unique_value(values, store, settings)
        record = store.insert(values)
    except UniqueNamesError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps({"id": record.id, **record.values}))
    else:
        click.echo(record.values[settings.unique_field])


@main.command("rename")
@click.argument("record_id", type=int)
@click.argument("name")
@store_option
@collection_option
@format_option
@trashed_option
def rename_cmd(record_id, name, store_path, collection, suffix_format, with_trashed):
    """Rename record RECORD_ID to NAME, suffixed if another record has it."""
    try:
        store = JsonStore(store_path or STORE_FILE, collection)
        record = store.get(record_id)
        if record is None:
            _fail(KeyError(f"No record with id {record_id} in '{collection}'"))
        settings = settings_for(collection, suffix_format=suffix_format, with_trashed=with_trashed)
        # Scope comes from the record itself; use its stored constraint fields
        if not settings.constraint_fields:
            fields = [k for k in record.values if k != settings.unique_field]
            settings = settings_for(
                collection, suffix_format=suffix_format, with_trashed=with_trashed, constraint_fields=fields,
            )
        values = dict(record.values)
        original = values.get(settings.unique_field)
        values[settings.unique_field] = name
        apply_unique_value(values, store, settings, record_id=record_id, original=original)
        store.update(record_id, values)
    except UniqueNamesError as e:
        _fail(e)
    click.echo(values[settings.unique_field])


@main.command("trash")
@click.argument("record_id", type=int)
@store_option
@collection_option
def trash_cmd(record_id, store_path, collection):
    """Soft-delete record RECORD_ID."""
    try:
        JsonStore(store_path or STORE_FILE, collection).trash(record_id)
    except (UniqueNamesError, KeyError) as e:
        _fail(e)


@main.command("restore")
@click.argument("record_id", type=int)
@store_option
@collection_option
def restore_cmd(record_id, store_path, collection):
    """Undo a soft delete."""
    try:
        JsonStore(store_path or STORE_FILE, collection).restore(record_id)
    except (UniqueNamesError, KeyError) as e:
        _fail(e)


@main.command("list")
@store_option
@collection_option
@click.option("-a", "--all", "show_all", is_flag=True, help="Include soft-deleted records")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_cmd(store_path, collection, show_all, as_json):
    """List records in a collection."""
    try:
        field = settings_for(collection).unique_field
        store = JsonStore(store_path or STORE_FILE, collection)
    except UniqueNamesError as e:
        _fail(e)

    records = store.all(include_trashed=show_all)
    if as_json:
        data = [{"id": r.id, "trashed": r.trashed, **r.values} for r in records]
        click.echo(json.dumps(data, indent=2))
        return

    if not records:
        click.echo("No records.")
        return
    for r in records:
        extras = ", ".join(f"{k}={v!r}" for k, v in r.values.items() if k != field)
        line = f"{r.id:>4}  {r.values.get(field, '')}"
        if extras:
            line += f"  ({extras})"
        if r.trashed:
            line += "  [trashed]"
        click.echo(line)


@main.command("config")
def config_cmd():
    """Show the effective configuration."""
    try:
        config = load_config()
    except UniqueNamesError as e:
        _fail(e)
    click.echo(tomli_w.dumps(config), nl=False)
