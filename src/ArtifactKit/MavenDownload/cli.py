# === NAVMAP v1 ===
# {
#   "module": "ArtifactKit.MavenDownload.cli",
#   "purpose": "Typer CLI for resolving Maven dependencies into the local repository",
#   "sections": [
#     {
#       "id": "main",
#       "name": "main",
#       "anchor": "function-main",
#       "kind": "function"
#     },
#     {
#       "id": "resolve",
#       "name": "resolve",
#       "anchor": "function-resolve",
#       "kind": "function"
#     },
#     {
#       "id": "paths",
#       "name": "paths",
#       "anchor": "function-paths",
#       "kind": "function"
#     },
#     {
#       "id": "settings-cmd",
#       "name": "settings_cmd",
#       "anchor": "function-settings-cmd",
#       "kind": "function"
#     }
#   ]
# }
# === /NAVMAP ===

"""Typer CLI for the Maven downloader.

Example:
    $ mvnfetch resolve junit:junit:4.13.2 org.hamcrest:hamcrest-core:1.3
    $ mvnfetch --log-level DEBUG resolve --format json com.google.guava:guava:33.0.0-jre
    $ mvnfetch paths junit:junit:4.13.2
    $ mvnfetch settings
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .artifacts import DependencyJar, MavenJarArtifact
from .errors import MavenDownloadError, UserConfigError
from .logging_config import setup_logging
from .resolver import MavenDependencyResolver
from .settings import LoggingSettings, MavenDownloadSettings, resolve_local_repository

app = typer.Typer(
    name="mvnfetch",
    help="Resolve Maven dependencies into a verified local repository",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def _build_settings(
    *,
    repo_url: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    workers: Optional[int] = None,
    local_repository: Optional[Path] = None,
) -> MavenDownloadSettings:
    repository: Dict[str, Any] = {}
    if repo_url:
        repository["url"] = repo_url
    if username is not None:
        repository["username"] = username
    if password is not None:
        repository["password"] = password
    overrides: Dict[str, Any] = {}
    if repository:
        overrides["repository"] = repository
    if workers is not None:
        overrides["fetch"] = {"workers": workers}
    if local_repository is not None:
        overrides["local_repository"] = local_repository
    try:
        return MavenDownloadSettings(**overrides)
    except PydanticValidationError as exc:
        raise UserConfigError(f"Invalid settings: {exc}") from exc


def _parse_coordinates(coordinates: List[str]) -> List[DependencyJar]:
    return [DependencyJar.parse(coordinate) for coordinate in coordinates]


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="DEBUG, INFO, WARNING or ERROR"),
    log_dir: Optional[Path] = typer.Option(
        None, "--log-dir", help="Directory for JSON-lines log files"
    ),
) -> None:
    """Configure logging before running a subcommand."""
    try:
        config = LoggingSettings(level=log_level)
    except PydanticValidationError as exc:
        err_console.print(f"[red]Error:[/red] invalid log level '{log_level}'")
        raise typer.Exit(code=2) from exc
    setup_logging(config, log_dir=log_dir)


@app.command()
def resolve(
    coordinates: List[str] = typer.Argument(..., help="group:artifact:version coordinates"),
    repo_url: Optional[str] = typer.Option(None, "--repo-url", help="Remote repository URL"),
    local_repository: Optional[Path] = typer.Option(
        None, "--local-repository", help="Local repository root"
    ),
    username: Optional[str] = typer.Option(None, "--username", help="Repository username"),
    password: Optional[str] = typer.Option(None, "--password", help="Repository password"),
    workers: Optional[int] = typer.Option(None, "--workers", help="Concurrent transfers"),
    output_format: str = typer.Option("text", "--format", "-f", help="Output format: text or json"),
) -> None:
    """Fetch each coordinate if needed and print its local JAR path, in order."""
    if output_format not in {"text", "json"}:
        err_console.print(f"[red]Error:[/red] unknown format '{output_format}'")
        raise typer.Exit(code=2)
    try:
        dependencies = _parse_coordinates(coordinates)
        settings = _build_settings(
            repo_url=repo_url,
            username=username,
            password=password,
            workers=workers,
            local_repository=local_repository,
        )
        with MavenDependencyResolver(settings) as resolver:
            jars = resolver.resolve_many(dependencies)
    except (MavenDownloadError, UserConfigError) as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    if output_format == "json":
        payload = [
            {"coordinate": str(dependency), "path": str(jar)}
            for dependency, jar in zip(dependencies, jars)
        ]
        typer.echo(json.dumps(payload, indent=2))
        return
    for jar in jars:
        typer.echo(str(jar))


@app.command()
def paths(
    coordinate: str = typer.Argument(..., help="group:artifact:version coordinate"),
) -> None:
    """Print the four repository-relative paths of a coordinate."""
    try:
        artifact = MavenJarArtifact(DependencyJar.parse(coordinate))
    except UserConfigError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    for path in artifact.paths():
        typer.echo(path)


@app.command("settings")
def settings_cmd(
    output_format: str = typer.Option("table", "--format", "-f", help="Output format: table or json"),
) -> None:
    """Display the effective settings with secrets redacted."""
    try:
        settings = MavenDownloadSettings()
    except PydanticValidationError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    data = settings.model_dump(mode="json")
    data["resolved_local_repository"] = str(resolve_local_repository(settings))
    if output_format == "json":
        typer.echo(json.dumps(data, indent=2))
        return

    table = Table(title="mvnfetch settings")
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in data.items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                table.add_row(f"{key}__{sub_key}", str(sub_value))
        else:
            table.add_row(key, str(value))
    console.print(table)


if __name__ == "__main__":
    app()
