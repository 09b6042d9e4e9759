import json
from typing import Any

import click

from .config import Settings, build_sync
from .engine import SearchSync
from .errors import SearchSyncError
from .log import configure_logging


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _parse_criteria(pairs: tuple[str, ...]) -> dict[str, Any]:
    criteria: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{pair}'", param_hint="--where")
        criteria[key] = _parse_value(value)
    return criteria


@click.group()
@click.option("--qdrant-url", default=None)
@click.option("--database", default=None, help="SQLite database holding the records.")
@click.option("--types-file", default=None, type=click.Path(dir_okay=False))
@click.option("-v", "--verbose", is_flag=True, default=False)
@click.pass_context
def cli(ctx: click.Context, qdrant_url: str | None, database: str | None, types_file: str | None, verbose: bool) -> None:
    """Keep the search index in sync with the datastore."""
    if ctx.obj is not None:
        return
    try:
        settings = Settings.from_env()
    except SearchSyncError as e:
        raise click.ClickException(str(e))
    overrides = {"qdrant_url": qdrant_url, "database": database, "types_file": types_file}
    settings = settings.model_copy(update={k: v for k, v in overrides.items() if v})
    configure_logging(level="DEBUG" if verbose else settings.log_level)

    try:
        ctx.obj = build_sync(settings)
    except SearchSyncError as e:
        raise click.ClickException(str(e))
    except Exception as e:
        raise click.ClickException(f"Cannot connect to Qdrant at {settings.qdrant_url}: {e}")


@cli.command()
@click.pass_obj
def types(sync: SearchSync) -> None:
    """List registered record types."""
    for name in sync.registry.names():
        itype = sync.registry.get(name)
        click.echo(f"{name}\ttable={itype.table}\tprimary_key={itype.primary_key}")


@cli.command()
@click.argument("record_type")
@click.option("--batch-size", type=click.IntRange(min=1), default=None,
              help="Records per batch (default: SEARCHSYNC_BATCH_SIZE, else 500).")
@click.option("--no-batches", is_flag=True, default=False,
              help="Fetch and index every record in a single pass.")
@click.option("--include", "include", multiple=True,
              help="Eager-load hint passed to the datastore; repeatable.")
@click.option("--no-batch-commit", is_flag=True, default=False,
              help="Commit once at the end instead of after every batch.")
@click.pass_obj
def reindex(
    sync: SearchSync,
    record_type: str,
    batch_size: int | None,
    no_batches: bool,
    include: tuple[str, ...],
    no_batch_commit: bool,
) -> None:
    """Rebuild the index for RECORD_TYPE from the datastore."""
    fields: dict[str, Any] = {"batch_commit": not no_batch_commit}
    if no_batches:
        fields["batch_size"] = None
    elif batch_size is not None:
        fields["batch_size"] = batch_size
    if include:
        fields["include"] = list(include)

    try:
        result = sync.for_type(record_type).reindex(**fields)
    except SearchSyncError as e:
        raise click.ClickException(str(e))

    click.echo(
        f"Done. Indexed {result.records_indexed} {record_type} records "
        f"in {result.batches} batches, {result.commits} commits."
    )


@cli.command()
@click.argument("record_type")
@click.option("--clean", is_flag=True, default=False,
              help="Remove orphans from the index and commit.")
@click.pass_obj
def orphans(sync: SearchSync, record_type: str, clean: bool) -> None:
    """List index documents of RECORD_TYPE whose records no longer exist."""
    try:
        searchable = sync.for_type(record_type)
        if clean:
            found = searchable.clean_index_orphans()
            sync.commit()
        else:
            found = searchable.index_orphans()
    except SearchSyncError as e:
        raise click.ClickException(str(e))

    for record_id in found:
        click.echo(f"  {'Removed' if clean else 'Orphan'}: {record_id}")
    click.echo(f"{len(found)} orphans{' removed' if clean else ''}.")


@cli.command()
@click.argument("record_type")
@click.option("--where", "where", multiple=True, metavar="KEY=VALUE",
              help="Attribute equality criterion; repeatable.")
@click.option("--limit", type=click.IntRange(min=1), default=None)
@click.option("--ids", "ids_only", is_flag=True, default=False, help="Print ids only.")
@click.pass_obj
def search(sync: SearchSync, record_type: str, where: tuple[str, ...], limit: int | None, ids_only: bool) -> None:
    """Search indexed records of RECORD_TYPE."""
    criteria = _parse_criteria(where)
    try:
        searchable = sync.for_type(record_type)
        if ids_only:
            for record_id in searchable.search_ids(criteria, limit):
                click.echo(record_id)
            return
        for record in searchable.search(criteria, limit):
            click.echo(json.dumps(dict(record), default=str))
    except SearchSyncError as e:
        raise click.ClickException(str(e))


if __name__ == "__main__":
    cli()
