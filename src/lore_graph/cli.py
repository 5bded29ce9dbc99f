"""Command-line interface for Lore Graph."""

import logging
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from lore_graph import __version__

console = Console()
err_console = Console(stderr=True)


def parse_params(pairs: tuple[str, ...]) -> dict[str, Any]:
    """Turn repeated ``key=value`` options into a params mapping.

    A key given more than once collects its values in a list.
    """
    params: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f'expected key=value, got "{pair}"', param_hint="--param")
        key = key.strip()
        if key in params:
            existing = params[key]
            params[key] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            params[key] = value
    return params


def emit(response: tuple[int, dict[str, Any]]) -> None:
    """Print an envelope as JSON; error envelopes exit non-zero."""
    status, envelope = response
    console.print_json(data=envelope, default=str)
    if status >= 400:
        sys.exit(1)


def open_api():
    from lore_graph.api import LoreApi

    return LoreApi()


param_option = click.option(
    "--param", "-p", "params", multiple=True, metavar="KEY=VALUE", help="Query parameter (repeatable)"
)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """Lore Graph - Query, explore and compare a Warhammer 40,000 lore dataset."""
    from lore_graph.config import get_settings

    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@main.command()
def status() -> None:
    """Show the configured row store and entity counts."""
    from lore_graph.config import get_settings
    from lore_graph.graph.connection import check_neo4j_connection

    settings = get_settings()
    console.print("[bold]Lore Graph Status[/bold]\n")
    console.print(f"Store backend: {settings.store_backend}")

    if settings.store_backend == "neo4j":
        console.print(f"Neo4j URI: {settings.neo4j_uri}")
        if check_neo4j_connection(settings):
            console.print("[green]✓[/green] Neo4j connected")
        else:
            console.print("[red]✗[/red] Neo4j not reachable")
            sys.exit(1)
    else:
        console.print(f"Seeds: {settings.seeds_dir}")

    with open_api() as api:
        table = Table(title="Resources")
        table.add_column("Resource", style="cyan")
        table.add_column("Count", justify="right")
        for name in api.registry.resource_names:
            table.add_row(name, f"{api.store.count(name):,}")
        console.print(table)


@main.command(name="list")
@click.argument("resource")
@param_option
def list_command(resource: str, params: tuple[str, ...]) -> None:
    """List entities of RESOURCE (page, limit, search, sort, filter[..], include, fields[..])."""
    with open_api() as api:
        emit(api.list(resource, parse_params(params)))


@main.command()
@click.argument("resource")
@click.argument("identifier")
@param_option
def get(resource: str, identifier: str, params: tuple[str, ...]) -> None:
    """Show one entity of RESOURCE by id, slug or name."""
    with open_api() as api:
        emit(api.detail(resource, identifier, parse_params(params)))


@main.command()
@click.argument("term")
@click.option("--resources", "-r", help="Comma-separated resource types to search")
@click.option("--limit", "-l", type=int, help="Maximum number of results")
def search(term: str, resources: str | None, limit: int | None) -> None:
    """Search every resource type for TERM."""
    params: dict[str, Any] = {"search": term}
    if resources:
        params["resources"] = resources
    if limit is not None:
        params["limit"] = limit
    with open_api() as api:
        emit(api.search(params))


@main.command()
@click.argument("resource")
@click.argument("identifier")
@click.option("--depth", "-d", type=int, help="Traversal depth")
@click.option("--limit", "-l", "limit_per_relation", type=int, help="Neighbours kept per relation")
@click.option("--backlinks/--no-backlinks", default=None, help="Follow incoming relations")
@click.option("--resources", "-r", help="Comma-separated resource types to keep")
def graph(
    resource: str,
    identifier: str,
    depth: int | None,
    limit_per_relation: int | None,
    backlinks: bool | None,
    resources: str | None,
) -> None:
    """Build the relation graph around one entity."""
    params: dict[str, Any] = {"resource": resource, "identifier": identifier}
    if depth is not None:
        params["depth"] = depth
    if limit_per_relation is not None:
        params["limitPerRelation"] = limit_per_relation
    if backlinks is not None:
        params["backlinks"] = backlinks
    if resources:
        params["resources"] = resources
    with open_api() as api:
        emit(api.graph(params))


@main.command()
@click.argument("from_resource")
@click.argument("from_identifier")
@click.argument("to_resource")
@click.argument("to_identifier")
@click.option("--max-depth", "-d", type=int, help="Maximum path length")
@click.option("--limit", "-l", "limit_per_relation", type=int, help="Neighbours kept per relation")
@click.option("--backlinks/--no-backlinks", default=None, help="Follow incoming relations")
@click.option("--resources", "-r", help="Comma-separated resource types allowed on the path")
def path(
    from_resource: str,
    from_identifier: str,
    to_resource: str,
    to_identifier: str,
    max_depth: int | None,
    limit_per_relation: int | None,
    backlinks: bool | None,
    resources: str | None,
) -> None:
    """Find the shortest relation path between two entities."""
    params: dict[str, Any] = {
        "fromResource": from_resource,
        "fromIdentifier": from_identifier,
        "toResource": to_resource,
        "toIdentifier": to_identifier,
    }
    if max_depth is not None:
        params["maxDepth"] = max_depth
    if limit_per_relation is not None:
        params["limitPerRelation"] = limit_per_relation
    if backlinks is not None:
        params["backlinks"] = backlinks
    if resources:
        params["resources"] = resources
    with open_api() as api:
        emit(api.path(params))


@main.command()
@click.argument("resource")
@click.argument("ids")
@param_option
def compare(resource: str, ids: str, params: tuple[str, ...]) -> None:
    """Compare entities of RESOURCE given as comma-separated IDS."""
    query = parse_params(params)
    query["ids"] = ids
    with open_api() as api:
        emit(api.compare(resource, query))


@main.command()
@click.argument("resource")
@click.argument("group_key")
def stats(resource: str, group_key: str) -> None:
    """Grouped statistics, e.g. ``stats units by-faction``."""
    with open_api() as api:
        emit(api.stats(resource, group_key))


@main.command()
@click.argument("resource", required=False)
def catalog(resource: str | None) -> None:
    """Describe every resource type, or one in detail."""
    with open_api() as api:
        emit(api.resource_doc(resource) if resource else api.catalog_list())


@main.group()
def db() -> None:
    """Neo4j database commands."""
    pass


@db.command(name="init")
def db_init() -> None:
    """Create the Neo4j indexes."""
    from lore_graph.graph.writer import GraphWriter

    writer = GraphWriter()
    try:
        writer.initialize()
    finally:
        writer.close()
    console.print("[green]✓[/green] Schema initialized")


@db.command(name="seed")
@click.option("--seeds", "seed_dir", type=click.Path(exists=True, file_okay=False), help="Seed directory")
@click.option("--clear", is_flag=True, help="Delete existing entities first")
def db_seed(seed_dir: str | None, clear: bool) -> None:
    """Load seed JSON files into Neo4j."""
    from lore_graph.graph.writer import GraphWriter

    writer = GraphWriter()
    try:
        with console.status("Writing seeds to Neo4j..."):
            stats = writer.load_seeds(Path(seed_dir) if seed_dir else None, clear=clear)
    finally:
        writer.close()

    console.print("[bold green]✓ Seeds loaded[/bold green]")
    console.print(f"  Entities: {stats['entities_written']:,}")
    console.print(f"  Relationships: {stats['relationships_written']:,}")


if __name__ == "__main__":
    main()
