"""``assetforge show`` and ``assetforge cat`` — look up one asset."""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from assetforge.cli.commands._environment import build_environment
from assetforge.core.asset import Asset

console = Console()

PathOption = typer.Option(None, "--path", "-p", help="Search path (repeatable).")
RootOption = typer.Option(None, "--root", help="Directory relative paths resolve against.")
BackendOption = typer.Option(None, "--cache-backend", help="file, sqlite, memory or null.")
CachePathOption = typer.Option(None, "--cache-path", help="Persisted cache location.")


def _find(
    logical_path: str,
    bundle: bool,
    paths: list[Path] | None,
    root: Path | None,
    cache_backend: str | None,
    cache_path: Path | None,
) -> Asset:
    environment = build_environment(paths, root, cache_backend, cache_path)
    asset = environment.find_asset(logical_path, bundle=bundle)
    if asset is None:
        console.print(f"[bold red]Asset not found:[/bold red] {logical_path}")
        if environment.paths:
            console.print("[dim]Searched:[/dim]")
            for path in environment.paths:
                console.print(f"  [cyan]{path}[/cyan]")
        else:
            console.print("[dim]No search paths configured; pass --path.[/dim]")
        raise typer.Exit(code=1)
    return asset


def show_cmd(
    logical_path: str = typer.Argument(..., help="Logical path, e.g. application.js."),
    bundle: bool = typer.Option(True, "--bundle/--no-bundle", help="Concatenate required assets."),
    paths: list[Path] = PathOption,
    root: Path = RootOption,
    cache_backend: str = BackendOption,
    cache_path: Path = CachePathOption,
) -> None:
    """Show the attributes and dependencies of an asset."""
    asset = _find(logical_path, bundle, paths, root, cache_backend, cache_path)

    table = Table(title=f"{asset.logical_path}", show_header=False)
    table.add_column("Attribute", style="cyan")
    table.add_column("Value")
    table.add_row("Kind", asset.kind)
    table.add_row("Filename", asset.filename)
    table.add_row("Content type", asset.content_type)
    table.add_row("Length", str(asset.length))
    table.add_row("Digest", asset.digest)
    table.add_row("Dependency digest", asset.dependency_digest)
    table.add_row("Mtime", str(asset.mtime))
    console.print(table)

    if len(asset.required_assets) > 1:
        required = Table(title="Required assets")
        required.add_column("#", justify="right", style="dim")
        required.add_column("Logical path", style="cyan")
        required.add_column("Digest", style="green")
        for index, part in enumerate(asset.required_assets, start=1):
            required.add_row(str(index), part.logical_path, part.digest[:12])
        console.print(required)

    dependencies = Table(title="Dependency paths")
    dependencies.add_column("Path", style="cyan")
    dependencies.add_column("Mtime", justify="right")
    dependencies.add_column("Digest", style="green")
    for dependency in asset.dependency_paths:
        dependencies.add_row(dependency.path, str(dependency.mtime), dependency.digest[:12])
    console.print(dependencies)


def cat_cmd(
    logical_path: str = typer.Argument(..., help="Logical path, e.g. application.js."),
    bundle: bool = typer.Option(True, "--bundle/--no-bundle", help="Concatenate required assets."),
    paths: list[Path] = PathOption,
    root: Path = RootOption,
    cache_backend: str = BackendOption,
    cache_path: Path = CachePathOption,
) -> None:
    """Write the processed body of an asset to stdout."""
    asset = _find(logical_path, bundle, paths, root, cache_backend, cache_path)
    sys.stdout.buffer.write(asset.to_bytes())
    sys.stdout.flush()
