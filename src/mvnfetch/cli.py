"""Command-line interface for the mvnfetch project."""

from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import structlog
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mvnfetch.errors import MvnFetchError
from mvnfetch.models import ArtifactKind, Coordinate, DownloadReport, VersionInfo
from mvnfetch.services import (
    ChecksumVerifiedFetcher,
    RepositoryLayout,
    VersionResolver,
    build_walker,
)
from mvnfetch.settings import ENV_VARS, Settings, get_settings

console = Console()
app = typer.Typer(help="mvnfetch – verified Maven artifact fetcher")
logger = structlog.get_logger(__name__)


def _client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=settings.request_timeout, follow_redirects=True)


def _print_error(exc: Exception) -> None:
    console.print(f"[red]{escape(str(exc))}[/red]")


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as exc:
        console.print("[red]Invalid configuration:[/red]")
        for error in exc.errors():
            field = str(error["loc"][0]) if error["loc"] else "?"
            console.print(f"  {ENV_VARS.get(field, field)}: {escape(error['msg'])}")
        raise typer.Exit(code=1) from exc


def _parse_coordinates(values: list[str]) -> list[Coordinate]:
    try:
        return [Coordinate.parse(value) for value in values]
    except MvnFetchError as exc:
        _print_error(exc)
        raise typer.Exit(code=1) from exc


def _announce(coord: Coordinate) -> None:
    console.print(coord.display_name)


async def _handle_fetch(
    coordinates: list[Coordinate],
    kinds: list[ArtifactKind],
    dst: Path,
    settings: Settings,
) -> DownloadReport:
    async with _client(settings) as client:
        walker = build_walker(client, settings, on_coordinate=_announce)
        return await walker.download_all(coordinates, dst, kinds)


def _print_report(report: DownloadReport) -> None:
    table = Table(title="Fetched Artifacts")
    table.add_column("File")
    table.add_column("Status")
    table.add_column("SHA-1", overflow="fold")
    for outcome in report.outcomes:
        status = "[green]downloaded[/green]" if outcome.downloaded else "up to date"
        table.add_row(outcome.path.name, status, outcome.checksum)
    console.print(table)
    console.print(
        f"{len(report.resolved)} coordinates, "
        f"{report.downloaded_count} downloaded, {report.skipped_count} up to date"
    )


@app.command()
def fetch(
    coordinates: list[str] = typer.Argument(..., help="org/artifact[/version] coordinates"),
    types: str = typer.Option("jar,src", "--types", help="Comma-separated artifact types: jar, src, doc"),
    dst: Path = typer.Option(Path("."), "--dst", help="Destination directory"),
) -> None:
    """Download coordinates and their runtime dependencies."""
    try:
        kinds = ArtifactKind.parse_list(types)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--types") from exc

    settings = _load_settings()
    dst.mkdir(parents=True, exist_ok=True)
    roots = _parse_coordinates(coordinates)

    try:
        report = asyncio.run(_handle_fetch(roots, kinds, dst, settings))
    except MvnFetchError as exc:
        logger.error("fetch.failed", error=str(exc))
        _print_error(exc)
        raise typer.Exit(code=1) from exc
    _print_report(report)


@app.command()
def versions(
    coordinate: str = typer.Argument(..., help="org/artifact coordinate"),
) -> None:
    """List the versions published for an artifact."""
    settings = _load_settings()
    (coord,) = _parse_coordinates([coordinate])

    async def runner() -> VersionInfo:
        async with _client(settings) as client:
            layout = RepositoryLayout(settings.base_url)
            fetcher = ChecksumVerifiedFetcher(client, max_concurrency=settings.max_concurrency)
            return await VersionResolver(fetcher, layout).versions(coord)

    try:
        info = asyncio.run(runner())
    except MvnFetchError as exc:
        _print_error(exc)
        raise typer.Exit(code=1) from exc

    table = Table(title=f"{coord.organization}/{coord.artifact}")
    table.add_column("Version")
    table.add_column("Tags")
    for version in info.versions:
        tags = [label for label, value in (("latest", info.latest), ("release", info.release)) if value == version]
        table.add_row(version, ", ".join(tags))
    console.print(table)


@app.command()
def deps(
    coordinate: str = typer.Argument(..., help="org/artifact[/version] coordinate"),
) -> None:
    """Show the direct runtime dependencies of a coordinate."""
    settings = _load_settings()
    (coord,) = _parse_coordinates([coordinate])

    async def runner() -> list[Coordinate]:
        async with _client(settings) as client:
            return await build_walker(client, settings).dependencies(coord)

    try:
        children = asyncio.run(runner())
    except MvnFetchError as exc:
        _print_error(exc)
        raise typer.Exit(code=1) from exc

    if not children:
        console.print("[yellow]No runtime dependencies.")
        return
    for child in children:
        console.print(child.display_name)


@app.command()
def config(
    json_output: bool = typer.Option(False, "--json", help="Output settings as JSON"),
) -> None:
    """Display the resolved settings."""
    settings = _load_settings()
    if json_output:
        typer.echo(settings.model_dump_json(indent=2))
        return
    overridden = settings.model_fields_set
    table = Table(title="mvnfetch Settings")
    table.add_column("Environment", no_wrap=True)
    table.add_column("Value", overflow="fold")
    table.add_column("Source", no_wrap=True)
    for field, value in settings.model_dump().items():
        source = "env" if field in overridden else "default"
        table.add_row(ENV_VARS[field], str(value), source)
    console.print(table)


if __name__ == "__main__":
    app()
