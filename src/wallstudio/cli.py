"""CLI interface for wallstudio."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Coroutine
from pathlib import Path
from typing import Annotated, Any, Optional, TypeVar

import pydantic
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from wallstudio.backends.base import PersistenceBackend, Session, create_backend
from wallstudio.categories import codec
from wallstudio.categories.codec import CategoryKind
from wallstudio.config import StudioConfig, load_config, merge_cli_overrides
from wallstudio.content import parallax
from wallstudio.content.assembler import submit
from wallstudio.content.models import ContentDraft, ContentVariant, ParallaxConfig
from wallstudio.content.slots import required_slots
from wallstudio.errors import ValidationError, WallstudioError
from wallstudio.membership.reconciler import apply, reconcile
from wallstudio.stats import dashboard_stats

T = TypeVar("T")
M = TypeVar("M", bound=pydantic.BaseModel)

app = typer.Typer(
    name="wallstudio",
    help="Author wallpaper records, categories and collections.",
)
category_app = typer.Typer(help="Encode, decode and manage categories.")
layers_app = typer.Typer(help="Edit the layers of a parallax config file.")
app.add_typer(category_app, name="category")
app.add_typer(layers_app, name="layers")

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from wallstudio import __version__

        console.print(f"wallstudio {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .wallstudio.toml file."),
    ] = None,
    api_url: Annotated[
        Optional[str],
        typer.Option("--api-url", help="Admin API base URL (uses the local store if unset)."),
    ] = None,
    store_path: Annotated[
        Optional[str],
        typer.Option("--store", help="Local JSON store file."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable debug logging."),
    ] = False,
) -> None:
    """wallstudio - wallpaper library authoring."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = load_config(config_path)
    ctx.obj = merge_cli_overrides(config, api_url=api_url, store_path=store_path)


def _config(ctx: typer.Context) -> StudioConfig:
    return ctx.obj if isinstance(ctx.obj, StudioConfig) else load_config()


def _session(config: StudioConfig) -> Session:
    """Session for the configured backend.

    The local store only needs some token; the API gets exactly the
    configured one, or none.
    """
    if config.api.is_configured:
        return Session(token=config.api.token, username="cli")
    return Session(token="local", username="cli")


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, turning library errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except ValidationError as exc:
        console.print("[red]Validation failed:[/red]")
        for problem in exc.problems:
            console.print(f"  - {problem}")
        raise typer.Exit(1)
    except WallstudioError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)


def _read_model(model: type[M], path: Path) -> M:
    """Parse a JSON input file, exiting with its problems listed if invalid."""
    try:
        return model.model_validate_json(path.read_text(encoding="utf-8"))
    except pydantic.ValidationError as exc:
        console.print(f"[red]Invalid {escape(path.name)}:[/red]")
        for error in exc.errors():
            where = ".".join(str(part) for part in error["loc"]) or "(file)"
            console.print(f"  - {where}: {error['msg']}", markup=False)
        raise typer.Exit(1)


async def _with_backend(config: StudioConfig, work) -> Any:
    backend: PersistenceBackend = create_backend(config)
    try:
        return await work(backend, _session(config))
    finally:
        await backend.aclose()


# ── Slots ────────────────────────────────────────────────────────


@app.command()
def slots(
    ctx: typer.Context,
    variant: Annotated[ContentVariant, typer.Argument(help="Content variant.")],
    base_limit: Annotated[
        Optional[int],
        typer.Option("--base-limit", help="Image size ceiling in MB."),
    ] = None,
) -> None:
    """Show the data slots a variant requires."""
    limit = base_limit if base_limit is not None else _config(ctx).uploads.base_limit_mb
    table = Table(title=f"{variant.value} slots")
    table.add_column("Slot")
    table.add_column("Kinds")
    table.add_column("Max size")
    table.add_column("Required")
    for spec in required_slots(variant, base_limit=limit):
        size = "n/a" if spec.size_ceiling is None else f"{spec.size_ceiling} MB"
        kinds = ", ".join(k.value for k in spec.accepted_kinds)
        table.add_row(spec.slot_name, kinds, size, "yes" if spec.is_required else "no")
    console.print(table)


# ── Categories ───────────────────────────────────────────────────


@category_app.command("encode")
def category_encode(
    name: Annotated[str, typer.Argument(help="Display name.")],
    kind: Annotated[CategoryKind, typer.Option("--kind", "-k")] = CategoryKind.WALLPAPER,
) -> None:
    """Print the storage name for a display name and kind."""
    if kind == CategoryKind.WALLPAPER and codec.is_ambiguous(name):
        console.print("[yellow]Warning:[/yellow] this name will decode as another kind")
    console.print(codec.encode(name, kind), markup=False)


@category_app.command("decode")
def category_decode(
    storage_name: Annotated[str, typer.Argument(help="Stored category name.")],
) -> None:
    """Print the kind and display name hidden in a storage name."""
    kind, display = codec.decode(storage_name)
    console.print(f"{kind.value}\t{display}", markup=False)


@category_app.command("list")
def category_list(ctx: typer.Context) -> None:
    """List categories with their decoded kind."""
    categories = _run(
        _with_backend(_config(ctx), lambda backend, session: backend.list_categories(session))
    )
    table = Table(title="Categories")
    for column in ("ID", "Kind", "Name", "Count", "Active"):
        table.add_column(column)
    for category in categories:
        table.add_row(
            category.id,
            category.kind.value,
            category.display_name,
            str(category.count),
            "yes" if category.active else "no",
        )
    console.print(table)


@category_app.command("create")
def category_create(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Display name.")],
    kind: Annotated[CategoryKind, typer.Option("--kind", "-k")] = CategoryKind.WALLPAPER,
    thumbnail: Annotated[str, typer.Option("--thumbnail")] = "",
) -> None:
    """Create a category."""
    storage_name = codec.encode(name, kind)
    category = _run(
        _with_backend(
            _config(ctx),
            lambda backend, session: backend.create_category(session, storage_name, thumbnail),
        )
    )
    console.print(f"[green]Created category[/green] {category.id} ({category.name})")


# ── Parallax layers ──────────────────────────────────────────────


def _read_parallax(path: Path) -> ParallaxConfig:
    if not path.exists():
        return ParallaxConfig()
    return _read_model(ParallaxConfig, path)


def _write_parallax(path: Path, config: ParallaxConfig) -> None:
    path.write_text(json.dumps(config.to_wire(), indent=2) + "\n", encoding="utf-8")
    for i, layer in enumerate(config.layers):
        console.print(
            f"  [{i}] {parallax.layer_name(layer.z_index)}: speed={layer.move_speed} "
            f"blur={layer.blur_amount} opacity={layer.opacity} image={layer.image_url or '-'}",
            markup=False,
        )


@layers_app.command("add")
def layers_add(
    path: Annotated[Path, typer.Argument(help="Parallax config JSON file (created if missing).")],
) -> None:
    """Append a default layer."""
    try:
        config = parallax.add_layer(_read_parallax(path))
    except WallstudioError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)
    _write_parallax(path, config)


@layers_app.command("remove")
def layers_remove(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False)],
    index: Annotated[int, typer.Argument(help="Layer position, 0-based.")],
) -> None:
    """Remove a layer."""
    try:
        config = parallax.remove_layer(_read_parallax(path), index)
    except (WallstudioError, IndexError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)
    _write_parallax(path, config)


@layers_app.command("set")
def layers_set(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False)],
    index: Annotated[int, typer.Argument(help="Layer position, 0-based.")],
    assignments: Annotated[list[str], typer.Argument(help="field=value pairs.")],
) -> None:
    """Overwrite layer fields, e.g. ``imageUrl=https://... moveSpeed=1.2``."""
    fields: dict[str, str] = {}
    for assignment in assignments:
        key, sep, value = assignment.partition("=")
        if not sep:
            console.print(f"[red]Error:[/red] expected field=value, got {assignment!r}")
            raise typer.Exit(1)
        fields[key] = value
    try:
        config = parallax.update_layer(_read_parallax(path), index, fields)
    except (IndexError, KeyError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)
    _write_parallax(path, config)


# ── Records & collections ────────────────────────────────────────


@app.command("submit")
def submit_cmd(
    ctx: typer.Context,
    draft_file: Annotated[Path, typer.Argument(exists=True, dir_okay=False)],
    record_id: Annotated[
        Optional[str],
        typer.Option("--id", help="Update this record instead of creating one."),
    ] = None,
) -> None:
    """Validate a draft JSON file and submit it."""
    draft = _read_model(ContentDraft, draft_file)
    record = _run(
        _with_backend(
            _config(ctx),
            lambda backend, session: submit(draft, backend, session, record_id=record_id),
        )
    )
    console.print(f"[green]Saved[/green] {record.variant.value} record {record.id}")


@app.command("reconcile")
def reconcile_cmd(
    ctx: typer.Context,
    collection_id: Annotated[str, typer.Argument(help="Collection to edit.")],
    items: Annotated[
        Optional[list[str]],
        typer.Option("--item", "-i", help="Desired member id (repeatable)."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Only show the edits."),
    ] = False,
) -> None:
    """Make a collection's membership exactly the given items."""
    config = _config(ctx)

    async def work(backend: PersistenceBackend, session: Session):
        collection = await backend.get_collection(session, collection_id)
        diff = reconcile(collection.members, items or [])
        if dry_run or diff.is_empty:
            return diff, None
        outcome = await apply(
            collection_id,
            diff.to_add,
            diff.to_remove,
            backend,
            session,
            concurrent=config.reconcile.concurrent,
        )
        return diff, outcome

    diff, outcome = _run(_with_backend(config, work))
    for item_id in sorted(diff.to_add):
        console.print(f"  [green]+[/green] {item_id}")
    for item_id in sorted(diff.to_remove):
        console.print(f"  [red]-[/red] {item_id}")
    if diff.is_empty:
        console.print("Collection already up to date.")
        return
    if outcome is None:
        return
    for item_id, reason in sorted(outcome.failed.items()):
        console.print(f"[red]Failed[/red] {item_id}: {reason}")
    if not outcome.ok:
        raise typer.Exit(1)
    console.print(f"[green]Applied {len(outcome.succeeded)} edit(s)[/green]")


@app.command("stats")
def stats_cmd(ctx: typer.Context) -> None:
    """Show library totals and the latest records."""
    stats = _run(_with_backend(_config(ctx), dashboard_stats))
    console.print(f"Records:     {stats.total_records}")
    console.print(f"Categories:  {stats.total_categories}")
    console.print(f"Collections: {stats.total_collections}")
    console.print(f"Downloads:   {stats.total_downloads}")
    if stats.recent:
        table = Table(title="Recent")
        for column in ("ID", "Title", "Type", "Downloads"):
            table.add_column(column)
        for record in stats.recent:
            table.add_row(record.id, record.title, record.variant.value, str(record.downloads))
        console.print(table)
