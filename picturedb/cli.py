"""CLI interface for picturedb."""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import click

from picturedb.catalog import CatalogStore
from picturedb.catalog.registry import Registry
from picturedb.config import Config
from picturedb.consistency import ConsistencyChecker, DriftState, purge_negative_favorites
from picturedb.database import (
    CatalogRecord,
    CombinedRecord,
    Database,
    QueryContext,
    QueryTarget,
    SortOrder,
)
from picturedb.errors import CatalogError
from picturedb.navigator import DirectoryNavigator, to_posix
from picturedb.stats import DerivedStatsManager

database_option = click.option(
    "--database", type=click.Path(path_type=Path), help="Path to database file"
)


@dataclass
class Components:
    """Catalog components wired to one database handle."""

    store: CatalogStore
    navigator: DirectoryNavigator
    stats: DerivedStatsManager
    checker: ConsistencyChecker
    registry: Registry


def build_components(db: Database, config: Config) -> Components:
    store = CatalogStore(db)
    navigator = DirectoryNavigator(config.navigator.image_extensions)
    stats = DerivedStatsManager(store, navigator, config.stats.progress_interval)
    checker = ConsistencyChecker(store, stats)
    return Components(
        store=store,
        navigator=navigator,
        stats=stats,
        checker=checker,
        registry=Registry(store, stats, checker),
    )


@click.group()
@click.option("-v", "--verbose", count=True, help="Log progress (-vv for debug output)")
@click.pass_context
def cli(ctx: click.Context, verbose: int) -> None:
    ctx.ensure_object(dict)
    ctx.obj["config"] = Config()
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def _db_path(ctx: click.Context, database: Path | None) -> Path:
    config: Config = ctx.obj["config"]
    return database or config.database_path


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@cli.command()
@click.argument("path", type=str)
@click.option("--title", default="", help="Record title")
@click.option("--creator", default="", help="Creator name")
@click.option("--media", default="", help="Media kind")
@click.option("--mark", default="", help="Free-form tag")
@click.option("--info", default="", help="Notes")
@database_option
@click.pass_context
def add(
    ctx: click.Context,
    path: str,
    title: str,
    creator: str,
    media: str,
    mark: str,
    info: str,
    database: Path | None,
) -> None:
    """Register a directory of images."""
    record = CatalogRecord(
        id=None, title=title, creator=creator, path=path, media=media, mark=mark, info=info
    )
    try:
        with Database(_db_path(ctx, database)) as db:
            parts = build_components(db, ctx.obj["config"])
            created = parts.registry.register(record)
            stats = parts.stats.get(created.id) if created.id is not None else None
    except CatalogError as e:
        _fail(str(e))
        return

    click.echo(f'id={created.id}: "{created.title}" added.')
    if stats is not None:
        click.echo(f"  {stats.file_count:,} images, {stats.total_size_mb:,} MB")


@cli.command()
@click.argument("record_id", type=int)
@click.option("--title", default=None, help="New title")
@click.option("--creator", default=None, help="New creator")
@click.option("--path", "new_path", default=None, help="New directory path")
@click.option("--media", default=None, help="New media kind")
@click.option("--mark", default=None, help="New tag")
@click.option("--fav", type=int, default=None, help="New favorite score")
@click.option("--info", default=None, help="New notes")
@database_option
@click.pass_context
def update(
    ctx: click.Context,
    record_id: int,
    title: str | None,
    creator: str | None,
    new_path: str | None,
    media: str | None,
    mark: str | None,
    fav: int | None,
    info: str | None,
    database: Path | None,
) -> None:
    """Edit a record; fields not given keep their value."""
    try:
        with Database(_db_path(ctx, database)) as db:
            parts = build_components(db, ctx.obj["config"])
            current = parts.store.require(record_id)
            changed = CatalogRecord(
                id=record_id,
                title=current.title if title is None else title,
                creator=current.creator if creator is None else creator,
                path=current.path if new_path is None else new_path,
                media=current.media if media is None else media,
                mark=current.mark if mark is None else mark,
                fav=current.fav if fav is None else fav,
                info=current.info if info is None else info,
            )
            parts.registry.update(record_id, changed)
    except CatalogError as e:
        _fail(str(e))
        return

    click.echo(f"id={record_id} updated.")


@cli.command()
@click.argument("record_id", type=int)
@database_option
@click.pass_context
def delete(ctx: click.Context, record_id: int, database: Path | None) -> None:
    """Remove a record and its statistics (the directory is kept)."""
    with Database(_db_path(ctx, database)) as db:
        parts = build_components(db, ctx.obj["config"])
        if not parts.checker.remove_record(record_id):
            _fail(f"No record with id={record_id}.")
            return
    click.echo(f"id={record_id} deleted.")


@cli.command()
@click.argument("record_id", type=int)
@database_option
@click.pass_context
def show(ctx: click.Context, record_id: int, database: Path | None) -> None:
    """Show one record and count the view."""
    with Database(_db_path(ctx, database)) as db:
        parts = build_components(db, ctx.obj["config"])
        record = parts.store.get_by_id(record_id, QueryTarget.COMBINED)
        if record is None:
            record = parts.store.get_by_id(record_id)
        if record is None:
            _fail(f"No record with id={record_id}.")
            return
        parts.registry.record_view(record_id)

    click.echo(f"id:      {record.id}")
    click.echo(f"title:   {record.title}")
    click.echo(f"creator: {record.creator}")
    click.echo(f"path:    {record.path}")
    click.echo(f"media:   {record.media}")
    click.echo(f"mark:    {record.mark}")
    click.echo(f"fav:     {record.fav}")
    click.echo(f"views:   {record.count + 1}")
    click.echo(f"date:    {record.date}")
    click.echo(f"info:    {record.info}")
    if isinstance(record, CombinedRecord):
        click.echo(f"files:   {record.file_count:,} ({record.total_size_mb:,} MB)")
    else:
        click.echo("files:   no statistics. Run 'picturedb refresh'.")


@cli.command("list")
@click.option("--mark", default="", help="Only records with this tag")
@click.option("--filter", "text", default="", help="Substring of title, path or info")
@click.option(
    "--order",
    type=click.Choice([o.value for o in SortOrder]),
    default=SortOrder.ASC.value,
    help="Sort by id ascending, descending, or by title",
)
@click.option("--creator", default=None, help="Only records by this creator")
@click.option("--favorites", is_flag=True, help="Records with fav > 0, best first")
@click.option("--popular", is_flag=True, help="Viewed records, most viewed first")
@click.option("--catalog", "catalog_only", is_flag=True, help="Read the catalog table, not the view")
@database_option
@click.pass_context
def list_records(
    ctx: click.Context,
    mark: str,
    text: str,
    order: str,
    creator: str | None,
    favorites: bool,
    popular: bool,
    catalog_only: bool,
    database: Path | None,
) -> None:
    """List records from the combined view."""
    target = QueryTarget.CATALOG if catalog_only else QueryTarget.COMBINED

    with Database(_db_path(ctx, database)) as db:
        parts = build_components(db, ctx.obj["config"])
        report = parts.checker.check_drift()
        if favorites:
            records = parts.store.query_by_fav(target)
        elif popular:
            records = parts.store.query_by_count(target)
        elif creator is not None:
            records = parts.store.query_by_creator(creator, target)
        else:
            context = QueryContext(mark=mark, filter=text, order=SortOrder(order))
            records = parts.store.query(context, target)

    if report.state is DriftState.DRIFTED:
        click.echo(f"Warning: {report.message}", err=True)

    if not records:
        click.echo("No records found.")
        return

    header = "ID".rjust(6) + "  " + "Title".ljust(30) + "Creator".ljust(16)
    header += "Mark".ljust(10) + "Fav".rjust(5) + "Files".rjust(8) + "MB".rjust(8)
    click.echo(header)
    click.echo("-" * 85)
    for record in records:
        files = f"{record.file_count:,}" if isinstance(record, CombinedRecord) else "-"
        size = f"{record.total_size_mb:,}" if isinstance(record, CombinedRecord) else "-"
        click.echo(
            f"{record.id:>6}  "
            f"{_truncate(record.title or '', 29):<30}"
            f"{_truncate(record.creator or '', 15):<16}"
            f"{_truncate(record.mark or '', 9):<10}"
            f"{record.fav:>5}"
            f"{files:>8}"
            f"{size:>8}"
        )


@cli.command()
@database_option
@click.pass_context
def marks(ctx: click.Context, database: Path | None) -> None:
    """List the distinct marks in use."""
    with Database(_db_path(ctx, database)) as db:
        names = CatalogStore(db).list_marks()
    for name in names:
        click.echo(name)


@cli.command()
@database_option
@click.pass_context
def creators(ctx: click.Context, database: Path | None) -> None:
    """List creators with their record count and best fav."""
    with Database(_db_path(ctx, database)) as db:
        summaries = CatalogStore(db).list_creators()

    click.echo("Creator".ljust(30) + "Records".rjust(8) + "Max fav".rjust(9))
    click.echo("-" * 47)
    for summary in summaries:
        name = _truncate(summary.creator or "(none)", 29)
        click.echo(f"{name:<30}{summary.record_count:>8,}{summary.max_fav:>9}")


@cli.command()
@click.argument("record_id", type=int)
@click.option("--down", is_flag=True, help="Unfavorite instead")
@database_option
@click.pass_context
def fav(ctx: click.Context, record_id: int, down: bool, database: Path | None) -> None:
    """Raise (or lower) a record's favorite score by one."""
    try:
        with Database(_db_path(ctx, database)) as db:
            parts = build_components(db, ctx.obj["config"])
            parts.store.require(record_id)
            if down:
                parts.registry.unfavorite(record_id)
            else:
                parts.registry.favorite(record_id)
            record = parts.store.require(record_id)
    except CatalogError as e:
        _fail(str(e))
        return

    click.echo(f"id={record_id} fav={record.fav}")


@cli.command()
@click.argument("record_id", type=int)
@click.option("--desc", is_flag=True, help="Reverse order")
@database_option
@click.pass_context
def images(ctx: click.Context, record_id: int, desc: bool, database: Path | None) -> None:
    """List a record's images in directory order and count the view."""
    try:
        with Database(_db_path(ctx, database)) as db:
            parts = build_components(db, ctx.obj["config"])
            record = parts.store.require(record_id)
            files = parts.navigator.list_images(record.path)
            parts.registry.record_view(record_id)
    except CatalogError as e:
        _fail(str(e))
        return

    if desc:
        files.reverse()
    click.echo(f"{record.title}: {len(files):,} images in {record.path}")
    for path in files:
        click.echo(path)


@cli.command()
@click.argument("file", type=str)
@click.option(
    "--move",
    type=click.Choice(["first", "last", "next", "prev"]),
    default=None,
    help="Where to go from FILE",
)
@database_option
@click.pass_context
def nav(ctx: click.Context, file: str, move: str | None, database: Path | None) -> None:
    """Step through the images of FILE's directory."""
    config: Config = ctx.obj["config"]
    navigator = DirectoryNavigator(config.navigator.image_extensions)
    try:
        result = navigator.navigate(file, move or "")
    except CatalogError as e:
        _fail(str(e))
        return

    title = ""
    db_path = _db_path(ctx, database)
    if db_path.exists():
        with Database(db_path) as db:
            parent = to_posix(str(Path(file).parent))
            record = CatalogStore(db).get_by_path(parent)
            title = record.title if record else ""

    if result.message:
        click.echo(result.message)
    if result.path is None:
        click.echo("No images in this directory.")
        return
    label = f"{title}: " if title else ""
    click.echo(f"{label}{result.position + 1}/{result.count} {result.path}")


@cli.command()
@database_option
@click.pass_context
def refresh(ctx: click.Context, database: Path | None) -> None:
    """Rebuild the statistics of every record."""
    with Database(_db_path(ctx, database)) as db:
        parts = build_components(db, ctx.obj["config"])
        rebuild, report = parts.checker.resolve_drift()

    click.echo(
        f"Statistics rebuilt for {rebuild.records_rebuilt:,} of {rebuild.total_records:,} records "
        f"({rebuild.total_files:,} images)."
    )
    for record_id, reason in rebuild.failures.items():
        click.echo(f"  id={record_id}: {reason}", err=True)
    if rebuild.failures:
        click.echo(
            "Records above have no statistics. Fix their paths or run "
            "'picturedb check --auto-delete'.",
            err=True,
        )
    click.echo(report.message)


@cli.command()
@click.option("--auto-delete", is_flag=True, help="Delete records whose directory is missing")
@database_option
@click.pass_context
def check(ctx: click.Context, auto_delete: bool, database: Path | None) -> None:
    """Report records whose directory no longer exists."""
    with Database(_db_path(ctx, database)) as db:
        parts = build_components(db, ctx.obj["config"])
        missing = parts.checker.sweep_missing(auto_delete=auto_delete)

    if not missing:
        click.echo("All directories exist.")
        return
    for path in missing:
        click.echo(path)
    action = "deleted" if auto_delete else "found"
    click.echo(f"{len(missing):,} missing directories {action}.")


@cli.command()
@database_option
@click.pass_context
def status(ctx: click.Context, database: Path | None) -> None:
    """Show record counts and whether statistics have drifted."""
    db_path = _db_path(ctx, database)
    if not db_path.exists():
        click.echo("No database found. Run 'picturedb add' first.")
        return

    with Database(db_path) as db:
        parts = build_components(db, ctx.obj["config"])
        report = parts.checker.check_drift()
        max_id = parts.store.get_max_id()

    click.echo(f"Database: {db_path}")
    click.echo(f"  Records: {report.catalog_count:,}")
    click.echo(f"  With statistics: {report.view_count:,}")
    click.echo(f"  Highest id: {max_id if max_id is not None else '-'}")
    click.echo(f"  State: {report.state.value}")
    click.echo(report.message)


@cli.command()
@click.option("--data-only", is_flag=True, help="Keep directories on disk")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@database_option
@click.pass_context
def purge(ctx: click.Context, data_only: bool, yes: bool, database: Path | None) -> None:
    """Delete records with a negative fav, and their directories."""
    with Database(_db_path(ctx, database)) as db:
        parts = build_components(db, ctx.obj["config"])
        candidates = parts.store.query_negative_fav()
        if not candidates:
            click.echo("No records with negative fav.")
            return

        where = "catalog only" if data_only else "catalog and disk"
        click.echo(f"{len(candidates):,} records with fav < 0 will be removed from the {where}:")
        for record in candidates:
            click.echo(f"  id={record.id} {record.path}")
        if not yes and not click.confirm("Proceed?", default=False):
            click.echo("Cancelled.")
            sys.exit(9)

        result = purge_negative_favorites(parts.store, parts.stats, data_only=data_only)

    for record_id, reason in result.failures.items():
        click.echo(f"  id={record_id} kept: {reason}", err=True)
    click.echo(f"Done ({result.removed_count:,} items removed).")


def _truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def main() -> None:
    """Entry point for the CLI."""
    cli(standalone_mode=True)  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":
    main()
