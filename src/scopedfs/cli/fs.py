"""
Filesystem inspection commands.

Provides:
- resolve: Print the absolute form of paths
- which: Find an executable on a PATH-style search list
- ls: List a directory
"""

import stat
import sys
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from scopedfs.filesystem import ScopedFileSystem


@click.command()
@click.argument("paths", nargs=-1)
@click.pass_obj
def resolve(obj: dict, paths: Tuple[str, ...]):
    """Print the absolute form of each PATH.

    With no arguments, prints the working directory.
    """
    fs: ScopedFileSystem = obj["fs"]
    for path in paths or ("",):
        click.echo(fs.resolve(path))


@click.command()
@click.argument("command")
@click.option(
    "--path",
    "search_path",
    default=None,
    help="PATH-style directory list (default: $PATH)"
)
@click.option(
    "--pathext",
    "path_ext",
    default=None,
    help="PATHEXT-style extension list (default: $PATHEXT)"
)
@click.pass_obj
def which(obj: dict, command: str, search_path: Optional[str], path_ext: Optional[str]):
    """Locate an executable COMMAND.

    \b
    Examples:
        scopedfs which python3
        scopedfs --cwd /opt which tool --path bin:/usr/bin
    """
    fs: ScopedFileSystem = obj["fs"]
    config = obj["config"]

    if search_path is None:
        search_path = config.search_path
    if path_ext is None:
        path_ext = config.path_ext

    found_path, found = fs.lookpath(command, search_path, path_ext)
    if not found:
        click.echo(f"Error: '{command}' not found", err=True)
        sys.exit(1)
    click.echo(found_path)


@click.command()
@click.argument("path", default="")
@click.pass_obj
def ls(obj: dict, path: str):
    """List the entries of PATH (default: the working directory)."""
    fs: ScopedFileSystem = obj["fs"]

    try:
        entries = fs.list_dir(path)
    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    table = Table(title=fs.resolve(path))
    table.add_column("Mode", no_wrap=True)
    table.add_column("Size", justify="right")
    table.add_column("Modified", no_wrap=True)
    table.add_column("Name", overflow="fold")

    for entry in entries:
        name = Text(f"{entry.name}/", style="bold blue") if entry.is_dir else Text(entry.name)
        table.add_row(
            stat.filemode(entry.mode),
            str(entry.size),
            entry.mod_time.strftime("%Y-%m-%d %H:%M"),
            name,
        )

    Console().print(table)
