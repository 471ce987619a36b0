"""
Command-line interface for Syscore.

This module provides the command-line entry point that builds the installed
application inventory of the current host and prints it as a table or JSON.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import orjson
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from syscore_py import __version__
from syscore_py.config import SyscoreConfig, default_config_path
from syscore_py.inventory import TRUST_ORDER, Inventory, SourceUnavailable
from syscore_py.inventory.aggregator import build_aggregator
from syscore_py.inventory.rules import RULES_VERSION
from syscore_py.platform import start_menu_programs_dir, user_data_roots

# Results go to stdout, log records to stderr
console = Console()
err_console = Console(stderr=True)
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
)
logger = logging.getLogger("syscore")

# Create the Typer app
app = typer.Typer(
    help="Deduplicated inventory of the applications installed on this host.",
    add_completion=False,
)


def log_error(message: str) -> None:
    """Log an error message to both logger and console."""
    logger.error(message)
    console.print(f"[red]{message}[/red]")
    return None


def render_inventory(inventory: Inventory) -> Table:
    """Build a rich table for *inventory*."""
    table = Table(title=f"Installed applications ({len(inventory)})")
    table.add_column("Name", style="cyan")
    table.add_column("Publisher")
    table.add_column("Version")
    table.add_column("Source", style="magenta")
    table.add_column("Icon", style="dim")
    for record in inventory.apps:
        table.add_row(
            record.name,
            record.publisher,
            record.display_version,
            record.source.label,
            record.icon_path or "",
        )
    return table


@app.callback()
def callback(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output."
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Output logs in JSON format."
    ),
    version: bool = typer.Option(
        False, "--version", help="Show the application version and exit."
    ),
) -> None:
    """
    Syscore: merge what every source knows, trust the ones that know best.
    """
    if version:
        console.print(f"Syscore version: {__version__}")
        raise typer.Exit()

    # Configure logging level based on verbosity
    if verbose:
        logger.setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")

    # Configure JSON logging if requested
    if json_logs:
        # Reconfigure logging for JSON output; stdout stays free for results
        for handler in list(logging.root.handlers):
            logging.root.removeHandler(handler)
        logging.basicConfig(
            level=logging.INFO if not verbose else logging.DEBUG,
            format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
            '"message": "%(message)s"}',
            datefmt="%Y-%m-%dT%H:%M:%S",
            stream=sys.stderr,
        )
        logger.debug("JSON logging enabled")


@app.command()
def apps(
    json_output: bool = typer.Option(
        False, "--json", help="Print the inventory as JSON."
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the config file. Defaults to ~/.config/syscore/config.yaml.",
    ),
    no_icons: bool = typer.Option(
        False, "--no-icons", help="Skip the icon back-fill pass."
    ),
) -> None:
    """
    Scan the installed applications of this host.
    """
    config = SyscoreConfig.load(config_path)

    try:
        aggregator = build_aggregator(config, resolve_icons=not no_icons)
    except SourceUnavailable as e:
        log_error(f"Cannot scan installed applications: {e}")
        raise typer.Exit(1) from e

    inventory = aggregator.collect()

    if json_output:
        typer.echo(orjson.dumps(inventory.to_dict(), option=orjson.OPT_INDENT_2).decode())
        return

    console.print(render_inventory(inventory))
    counts = ", ".join(
        f"{kind.label}: {inventory.counts.get(kind, 0)}" for kind in TRUST_ORDER
    )
    console.print(f"[bold]Per source:[/bold] {counts}")


@app.command()
def sources(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to the config file. Defaults to ~/.config/syscore/config.yaml.",
    ),
) -> None:
    """
    Show the sources in trust order and where they read from.
    """
    config = SyscoreConfig.load(config_path)

    table = Table(title="Sources (most trusted first)")
    table.add_column("Rank", justify="right")
    table.add_column("Source", style="cyan")
    for rank, kind in enumerate(TRUST_ORDER, start=1):
        table.add_row(str(rank), kind.label)
    console.print(table)

    roots = user_data_roots() + [str(p) for p in config.portable_roots]
    console.print(f"Config file: {config_path or default_config_path()}")
    console.print(f"Start Menu: {start_menu_programs_dir() or '(no user profile)'}")
    console.print(f"Portable roots: {', '.join(roots) or '(no user profile)'}")
    console.print(f"Script: {config.script_path or '(default search locations)'}")
    console.print(f"Filter rules: v{RULES_VERSION}, {len(config.rules)} from config")


@app.command()
def version() -> None:
    """Show the application version and exit."""
    console.print(f"Syscore version: {__version__}")


if __name__ == "__main__":
    app()
