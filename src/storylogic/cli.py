"""StoryLogic CLI - typer application entry point."""

from __future__ import annotations

import asyncio
import atexit
import json
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from storylogic.config import (
    ValidationConfigError,
    ValidationOptions,
    load_validation_config,
    write_default_config,
)
from storylogic.graph import GraphLoadError, load_graph
from storylogic.observability import close_file_logging, configure_logging, get_logger
from storylogic.validation import LogicValidationResult, LogicValidator

# Load environment variables (threshold overrides) from .env file
load_dotenv()

app = typer.Typer(
    name="storylogic",
    help="StoryLogic: static validation for visual-novel logic graphs.",
    no_args_is_help=True,
)
console = Console()

DEFAULT_CONFIG_NAME = "storylogic.yaml"

log = get_logger(__name__)


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log_dir: Annotated[
        Path | None,
        typer.Option(
            "--log",
            help="Enable file logging to {DIR}/logs/debug.jsonl.",
        ),
    ] = None,
) -> None:
    """StoryLogic: static validation for visual-novel logic graphs."""
    if log_dir is not None:
        configure_logging(verbosity=verbose, log_to_file=True, log_dir=log_dir)
        atexit.register(close_file_logging)
    else:
        configure_logging(verbosity=verbose)


@app.command()
def version() -> None:
    """Show version information."""
    from storylogic import __version__

    console.print(f"StoryLogic v{__version__}")


@app.command("init-config")
def init_config(
    path: Annotated[
        Path,
        typer.Argument(help="Where to write the config file."),
    ] = Path(DEFAULT_CONFIG_NAME),
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing file."),
    ] = False,
) -> None:
    """Write a config file holding the default validation options."""
    if path.exists() and not force:
        console.print(f"[red]Error:[/red] {path} already exists (use --force to overwrite)")
        raise typer.Exit(1)

    write_default_config(path)
    console.print(f"[green]✓[/green] Wrote default config to [bold]{path}[/bold]")


def _resolve_options(config: Path | None) -> ValidationOptions:
    """Load options from --config, ./storylogic.yaml if present, or defaults."""
    if config is None:
        default_path = Path(DEFAULT_CONFIG_NAME)
        if not default_path.exists():
            return ValidationOptions()
        config = default_path
    return load_validation_config(config)


def _print_report(result: LogicValidationResult) -> None:
    """Render findings as a rich table."""
    table = Table(title="Logic validation", show_lines=False)
    table.add_column("Level", style="bold")
    table.add_column("Code")
    table.add_column("Target", style="dim")
    table.add_column("Message")

    for error in result.errors:
        target = error.node_id or error.connection_id or ""
        table.add_row(f"[red]{error.severity}[/red]", error.code, target, error.plain_message)
    for warning in result.warnings:
        target = warning.node_id or warning.connection_id or ""
        table.add_row("[yellow]warning[/yellow]", warning.code, target, warning.plain_message)
    for info in result.info:
        table.add_row("[blue]info[/blue]", info.code, info.node_id or "", info.message)
    for suggestion in result.suggestions:
        table.add_row(
            "[cyan]suggestion[/cyan]",
            suggestion.type,
            suggestion.node_id or "",
            suggestion.message,
        )

    if table.row_count:
        console.print(table)

    if result.valid:
        console.print(f"[green]✓ Valid[/green] ({result.summary})")
    else:
        console.print(f"[red]✗ Invalid[/red] ({result.summary})")


@app.command()
def validate(
    graph_file: Annotated[Path, typer.Argument(help="Logic graph JSON export.")],
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help=f"Validation config YAML (default: ./{DEFAULT_CONFIG_NAME} if present).",
            envvar="STORYLOGIC_CONFIG",
        ),
    ] = None,
    no_cycles: Annotated[
        bool, typer.Option("--no-cycles", help="Skip circular dependency detection.")
    ] = False,
    no_dead_code: Annotated[
        bool, typer.Option("--no-dead-code", help="Skip unreachable node detection.")
    ] = False,
    no_reachability: Annotated[
        bool, typer.Option("--no-reachability", help="Skip the exit point check.")
    ] = False,
    no_types: Annotated[
        bool, typer.Option("--no-types", help="Skip connection type compatibility.")
    ] = False,
    no_performance: Annotated[
        bool, typer.Option("--no-performance", help="Skip size, fan-out and depth limits.")
    ] = False,
    max_nodes: Annotated[
        int | None, typer.Option("--max-nodes", help="Node count warning threshold.")
    ] = None,
    max_connections: Annotated[
        int | None,
        typer.Option("--max-connections", help="Connection count warning threshold."),
    ] = None,
    max_depth: Annotated[
        int | None, typer.Option("--max-depth", help="Path depth warning threshold.")
    ] = None,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the result as JSON instead of a table.")
    ] = False,
) -> None:
    """Validate a logic graph and report errors, warnings and suggestions.

    Exits with status 1 when the graph has errors.
    """
    try:
        options = _resolve_options(config)
    except ValidationConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2) from e

    options = options.merged(
        check_circular_dependencies=False if no_cycles else None,
        check_dead_code=False if no_dead_code else None,
        check_reachability=False if no_reachability else None,
        check_type_compatibility=False if no_types else None,
        check_performance=False if no_performance else None,
        max_node_count=max_nodes,
        max_connection_count=max_connections,
        max_depth=max_depth,
    )

    try:
        graph = load_graph(graph_file)
    except GraphLoadError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2) from e

    log.debug("cli_validate", graph_file=str(graph_file), options=options.to_dict())
    result = asyncio.run(LogicValidator().validate_graph(graph, options))

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        _print_report(result)

    if not result.valid:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
