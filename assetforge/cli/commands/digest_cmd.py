"""``assetforge digest FILE...`` — content digests as the pipeline computes them."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from assetforge.config import config
from assetforge.core.hasher import bytes_hexdigest

console = Console()


def digest_cmd(
    files: list[Path] = typer.Argument(..., help="Files to digest."),
    algorithm: str = typer.Option(
        None, "--algorithm", "-a", help="hashlib algorithm (defaults to config)."
    ),
) -> None:
    """Print the hex digest of each file."""
    algorithm = algorithm or config.digest_algorithm
    missing = False
    for path in files:
        if not path.is_file():
            console.print(f"[bold red]Not a file:[/bold red] {path}")
            missing = True
            continue
        console.print(f"[green]{bytes_hexdigest(path.read_bytes(), algorithm)}[/green]  {path}")
    if missing:
        raise typer.Exit(code=1)
