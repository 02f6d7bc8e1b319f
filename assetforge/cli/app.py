"""Main Typer application — imports and registers all CLI commands.

Entry point: ``assetforge`` (configured via pyproject.toml console scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from assetforge import __version__
from assetforge.cli.commands.digest_cmd import digest_cmd
from assetforge.cli.commands.show import cat_cmd, show_cmd
from assetforge.config import config

app = typer.Typer(
    name="assetforge",
    help="assetforge: content-addressed asset pipeline.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (defaults to ASSETFORGE_LOG_LEVEL)."
    ),
) -> None:
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# Register subcommands
app.command(name="show", help="Show an asset's attributes and dependencies.")(show_cmd)
app.command(name="cat", help="Print an asset's processed body.")(cat_cmd)
app.command(name="digest", help="Print file digests.")(digest_cmd)


@app.command(name="version", help="Print the assetforge version.")
def version_cmd() -> None:
    """Print the installed assetforge version."""
    Console().print(f"assetforge {__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
