"""Typer CLI: tee, status, init, check commands."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from rollfile import __version__

app = typer.Typer(
    name="rollfile",
    help="Size-rotating log files with retention and gzip compression.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"rollfile v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version.", callback=_version_callback, is_eager=True
    ),
) -> None:
    """rollfile - rotating file sink for log pipelines."""


@app.command()
def tee(
    path: Path = typer.Argument(..., help="Active log file"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON or YAML config file"),
    max_size: Optional[str] = typer.Option(None, "--max-size", "-s", help="Rotation threshold, e.g. 10MB"),
    keep: Optional[int] = typer.Option(None, "--keep", "-k", help="Backups to retain"),
    compress: Optional[bool] = typer.Option(None, "--compress/--no-compress", help="Gzip retired files"),
    truncate: Optional[bool] = typer.Option(None, "--truncate/--append", help="Empty the file at start"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not echo input to stdout"),
) -> None:
    """Copy stdin into PATH, rotating as it grows."""
    from rollfile.appender import FileAppender
    from rollfile.config import DEFAULT_CONFIG, RotationConfig, load_config
    from rollfile.errors import AppenderError, ConfigError

    try:
        config = load_config(config_file) if config_file else dict(DEFAULT_CONFIG)
    except (OSError, ConfigError) as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    overrides = {
        "path": str(path),
        "threshold": max_size,
        "keep_count": keep,
        "compress": compress,
        "truncate": truncate,
    }
    config.update({k: v for k, v in overrides.items() if v is not None})

    try:
        rotation = RotationConfig.from_dict(config)
    except ConfigError as exc:
        for e in exc.errors:
            err_console.print(f"[red]Config error: {e}[/red]")
        raise typer.Exit(1)

    try:
        appender = FileAppender.from_config(rotation)
    except AppenderError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    stdin = sys.stdin.buffer
    stdout = sys.stdout.buffer
    try:
        with appender:
            for line in iter(stdin.readline, b""):
                appender.write(line)
                if not quiet:
                    stdout.write(line)
                    stdout.flush()
            appender.flush()
    except AppenderError as exc:
        err_console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        pass

    for failure in appender.failures():
        err_console.print(f"[yellow]warning: {failure}[/yellow]")


@app.command()
def status(
    path: Path = typer.Argument(..., help="Active log file"),
    keep: Optional[int] = typer.Option(None, "--keep", "-k", help="Expected keep count"),
) -> None:
    """Show the active file and its backups."""
    from rollfile.naming import existing_backups, index_of
    from rollfile.sizing import format_size

    console.print(Panel(f"[bold]rollfile status[/bold] {path}", style="blue"))

    table = Table(show_lines=False)
    table.add_column("Slot", width=6)
    table.add_column("File")
    table.add_column("Size", justify="right")
    table.add_column("Compressed", width=10)

    if path.exists():
        table.add_row("active", path.name, format_size(path.stat().st_size), "-")
    else:
        table.add_row("active", path.name, "[red]missing[/red]", "-")

    backups = existing_backups(path)
    for index, backup in backups:
        _, compressed = index_of(path, backup)
        table.add_row(
            str(index),
            backup.name,
            format_size(backup.stat().st_size),
            "[green]yes[/green]" if compressed else "no",
        )
    console.print(table)

    indices = sorted({index for index, _ in backups})
    if indices and indices != list(range(1, indices[-1] + 1)):
        console.print(f"  [yellow]Gap in backup indices: {indices}[/yellow]")
    if keep is not None and indices and indices[-1] > keep:
        console.print(f"  [yellow]{indices[-1] - keep} slot(s) beyond keep count {keep}[/yellow]")

    total = sum(b.stat().st_size for _, b in backups)
    console.print(f"\n[bold]Backups:[/bold] {len(indices)} slot(s), {format_size(total)}")


@app.command()
def init(
    config_file: Path = typer.Argument(Path("rollfile.yaml"), help="Config file to write"),
    path: str = typer.Option("app.log", "--path", "-p", help="Active log file"),
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Write a default config file."""
    from rollfile.config import DEFAULT_CONFIG, deep_merge, save_config

    if config_file.exists() and not force:
        console.print(f"  [yellow]{config_file} exists (use --force to overwrite)[/yellow]")
        raise typer.Exit(1)

    config = deep_merge(DEFAULT_CONFIG, {"path": path})
    save_config(config, config_file)
    console.print(f"  Config: [cyan]{config_file}[/cyan]")


@app.command()
def check(
    config_file: Path = typer.Argument(..., help="JSON or YAML config file"),
) -> None:
    """Validate a config file."""
    from rollfile.config import load_config, validate_config
    from rollfile.errors import ConfigError
    from rollfile.sizing import format_size, parse_size

    try:
        config = load_config(config_file)
    except (OSError, ConfigError) as exc:
        console.print(f"  [red]{exc}[/red]")
        raise typer.Exit(1)

    errors = validate_config(config)
    if errors:
        for e in errors:
            console.print(f"  [red]Config error: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"  Config: [green]valid[/green] (path={config['path']}, "
        f"threshold={format_size(parse_size(config['threshold']))}, "
        f"keep={config['keep_count']}, compress={config['compress']})"
    )
