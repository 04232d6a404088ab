"""
CLI entry point for repo-dump.

Provides a command-line interface for dumping repositories into a single text stream.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from . import __version__
from .config import DumpEntry
from .config_loader import load_config, merge_cli_with_config, normalize_patterns
from .dumper import DumpError, RepoDumper

# Initialize CLI app
app = typer.Typer(
    name="repo-dump",
    help="Dump a repository into a single LLM-friendly text stream.",
    add_completion=False,
)

# stdout carries the dump itself
console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"repo-dump version {__version__}")
        raise typer.Exit()


def parse_excludes(values: Optional[List[str]]) -> list[str]:
    """Parse repeated, comma-separated exclude options."""
    patterns: list[str] = []
    for value in values or []:
        patterns.extend(normalize_patterns(value))
    return patterns


def _describe_skip(entry: DumpEntry) -> str:
    if entry.skip_reason == "binary" and entry.content_type:
        return f"binary: {entry.content_type}"
    return entry.skip_reason or ""


def _resolve_root(path: Optional[Path]) -> Path:
    return path if path is not None else Path.cwd()


@app.command()
def dump(
    path: Optional[Path] = typer.Argument(
        None,
        help="Repository directory to dump (default: current directory).",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    description: Optional[str] = typer.Option(
        None,
        "--description", "-d",
        help="Description of the repository, placed in the header. Supports \\n, \\t, \\r, \\\\.",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Write the dump to this file instead of stdout.",
        dir_okay=False,
    ),
    exclude: Optional[List[str]] = typer.Option(
        None,
        "--exclude", "-e",
        help="Extra ignore patterns, comma-separated (e.g., 'docs/,*.lock'). Repeatable.",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Config file to use instead of searching the repository root.",
        exists=True,
        dir_okay=False,
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Don't print the summary.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show tracebacks on errors.",
    ),
    version: bool = typer.Option(
        False,
        "--version", "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """
    Dump a repository as delimited file sections followed by --END--.

    Examples:

        # Dump the current directory to stdout
        repo-dump dump

        # Dump a repository with a description into a file
        repo-dump dump ./repo -d "A CLI tool.\\nFocus on error handling." -o dump.txt

        # Skip docs and lock files in addition to .gitignore/.aiignore
        repo-dump dump ./repo -e "docs/,*.lock"
    """
    root = _resolve_root(path)
    project_config = load_config(root, config_file)
    settings = merge_cli_with_config(
        project_config,
        description=description,
        output=output,
        exclude=parse_excludes(exclude),
    )

    try:
        dumper = RepoDumper(root, extra_ignore=settings["exclude"])
        if settings["output"] is not None:
            with open(settings["output"], "wb") as out:
                stats = dumper.dump(out, description=settings["description"])
        else:
            out = typer.get_binary_stream("stdout")
            stats = dumper.dump(out, description=settings["description"])
            out.flush()
    except (DumpError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        raise typer.Exit(1)

    if quiet:
        return

    console.print()
    console.print("[bold green]✓ Dump complete![/bold green]")
    console.print("[cyan]Statistics:[/cyan]")
    console.print(f"  Files dumped: {stats.files_dumped}")
    console.print(f"  Files skipped (ignored): {stats.files_skipped_ignored}")
    console.print(f"  Directories skipped (ignored): {stats.dirs_skipped_ignored}")
    console.print(f"  Files skipped (binary): {stats.files_skipped_binary}")
    console.print(f"  Symlinks skipped: {stats.symlinks_skipped}")
    console.print(f"  Ignore rules: {stats.ignore_rules}")
    console.print(f"  Total bytes: {stats.bytes_written:,}")
    console.print(f"  Processing time: {stats.processing_time_seconds:.2f}s")
    if settings["output"] is not None:
        console.print(f"[cyan]Output file:[/cyan] {settings['output']}")


@app.command()
def files(
    path: Optional[Path] = typer.Argument(
        None,
        help="Repository directory (default: current directory).",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    exclude: Optional[List[str]] = typer.Option(
        None,
        "--exclude", "-e",
        help="Extra ignore patterns, comma-separated. Repeatable.",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Config file to use instead of searching the repository root.",
        exists=True,
        dir_okay=False,
    ),
    show_all: bool = typer.Option(
        False,
        "--all", "-a",
        help="Also list skipped entries with the reason, and content types.",
    ),
) -> None:
    """
    List the files a dump would include, without their contents.

    Uses the same ignore and binary rules as 'dump'.
    """
    root = _resolve_root(path)
    project_config = load_config(root, config_file)
    settings = merge_cli_with_config(project_config, exclude=parse_excludes(exclude))

    try:
        dumper = RepoDumper(root, extra_ignore=settings["exclude"])
        for entry in dumper.iter_entries():
            if entry.included:
                if show_all and entry.content_type:
                    typer.echo(f"{entry.relative_path} ({entry.content_type})")
                else:
                    typer.echo(entry.relative_path)
            elif show_all and entry.skip_reason is not None:
                typer.echo(f"{entry.relative_path} ({_describe_skip(entry)})")
    except DumpError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
