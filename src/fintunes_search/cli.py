"""CLI for fintunes-search (sync, albums, search)."""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any

import typer
from loguru import logger

from fintunes_search.api import AsyncJellyfinSearch, JellyfinApi
from fintunes_search.config import CATALOG_FILENAME, load_credentials, resolve_data_directory
from fintunes_search.core.catalog.cache import load_catalog, parse_catalog_item, save_catalog
from fintunes_search.core.catalog.store import CatalogStore
from fintunes_search.core.render.rows import ResultRow, project_rows
from fintunes_search.core.search.session import SearchController, SearchView
from fintunes_search.logging_config import configure_logging
from fintunes_search.models.catalog import CatalogSnapshot

app = typer.Typer(help="Search a cached Jellyfin music catalog, with live server results.")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Also write debug logs to this file"
    ),
) -> None:
    configure_logging(verbose=verbose, log_file=log_file)


def _catalog_path(data_dir: Path | None) -> Path:
    return (data_dir or resolve_data_directory()) / CATALOG_FILENAME


def _open_catalog(data_dir: Path | None) -> CatalogSnapshot:
    """Load the cached catalog, exiting if it doesn't exist."""
    path = _catalog_path(data_dir)
    if not path.exists():
        logger.error("Catalog cache not found: {}. Run 'sync' first.", path)
        raise typer.Exit(1)
    return load_catalog(path)


def _row_to_dict(row: ResultRow) -> dict[str, Any]:
    return {
        "id": row.key,
        "kind": row.kind,
        "album_id": row.album_id,
        "title": row.title,
        "subtitle": row.subtitle,
    }


def _echo_rows(rows: list[ResultRow]) -> None:
    for row in rows:
        typer.echo(f"  {row.title[:80]}")
        typer.echo(f"    {row.subtitle}  [id={row.key}]")


@app.command()
def sync(
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", "-d", help="Catalog cache directory"),
    ] = None,
) -> None:
    """Download all albums from the Jellyfin server into the local cache."""
    try:
        api = JellyfinApi(load_credentials())
    except RuntimeError as exc:
        logger.error("{}", exc)
        raise typer.Exit(1) from exc

    path = _catalog_path(data_dir)
    previous = load_catalog(path) if path.exists() else CatalogSnapshot()

    entities = []
    for item in api.fetch_albums():
        try:
            entities.append(parse_catalog_item(item))
        except ValueError:
            logger.warning("Skipping malformed album {!r:.80}", item)

    snapshot = CatalogSnapshot.from_entities(entities, version=previous.version + 1)
    save_catalog(path, snapshot)
    typer.echo(f"Synced {len(snapshot)} albums to {path}")


@app.command()
def albums(
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", "-d", help="Catalog cache directory"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """List the albums in the local cache."""
    snapshot = _open_catalog(data_dir)
    containers = sorted(snapshot.containers(), key=lambda e: e.name.casefold())

    if output_json:
        data = {
            "version": snapshot.version,
            "albums": [
                {"id": e.id, "name": e.name, "album_artist": e.album_artist} for e in containers
            ],
            "count": len(containers),
        }
        typer.echo(json.dumps(data, indent=2))
        return

    typer.echo(f"{len(containers)} albums (catalog v{snapshot.version}):\n")
    for e in containers:
        typer.echo(f"  {e.name} - {e.album_artist or 'Unknown artist'}  [id={e.id}]")


async def run_search(
    query: str,
    store: CatalogStore,
    client: AsyncJellyfinSearch | None,
) -> tuple[SearchView, SearchView]:
    """Run one search session; return the first published view and the settled one."""
    controller = SearchController(store, client)
    views: list[SearchView] = []
    controller.subscribe(views.append)
    try:
        controller.set_query(query)
        first = views[0] if views else controller.view
        await controller.wait_until_settled()
        return first, controller.view
    finally:
        await controller.aclose()


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    offline: bool = typer.Option(False, "--offline", "-o", help="Only search the local cache"),
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", "-d", help="Catalog cache directory"),
    ] = None,
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Search albums and tracks matching a query."""
    store = CatalogStore(_open_catalog(data_dir))

    client: AsyncJellyfinSearch | None = None
    if not offline:
        try:
            client = AsyncJellyfinSearch(JellyfinApi(load_credentials()), store=store)
        except RuntimeError:
            logger.warning("No Jellyfin credentials, searching the local cache only")

    first, final = asyncio.run(run_search(query, store, client))
    rows = project_rows(final.results, store.snapshot)

    if output_json:
        data = {
            "query": final.query,
            "results": [_row_to_dict(r) for r in rows],
            "count": len(rows),
        }
        typer.echo(json.dumps(data, indent=2))
        return

    local_rows = project_rows(first.results, store.snapshot)
    typer.echo(f"Local matches ({len(local_rows)}):\n")
    _echo_rows(local_rows)
    if client is not None:
        typer.echo(f"\nAll matches ({len(rows)}):\n")
        _echo_rows(rows)
    if final.show_empty_state:
        typer.echo("No results.")
