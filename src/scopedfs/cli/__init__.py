"""
scopedfs CLI - inspect paths through a working-directory scoped filesystem.

Every command runs against the host filesystem through a ScopedFileSystem
whose working directory is set with --cwd, so the shell's own working
directory only matters for anchoring a relative --cwd.

Usage:
    scopedfs --help
    scopedfs --cwd /usr resolve bin ../etc
    scopedfs which python3
    scopedfs --cwd /tmp ls
"""

import sys

import click
from pydantic import ValidationError

from scopedfs.config import ScopedFsConfig
from scopedfs.exceptions import ScopedFsError
from scopedfs.utils import init_logging

from .fs import ls, resolve, which


@click.group()
@click.version_option(package_name="scopedfs")
@click.option(
    "--cwd",
    default="",
    help="Working directory for the scoped filesystem (default: current directory)"
)
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    help="Logging level name"
)
@click.pass_context
def main(ctx: click.Context, cwd: str, log_level: str):
    """scopedfs - filesystem operations with a private working directory."""
    try:
        config = ScopedFsConfig(base_directory=cwd, log_level=log_level)
        init_logging(config.log_level)
    except (ValidationError, ScopedFsError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    ctx.obj = {
        "config": config,
        "fs": config.create_filesystem(),
    }


# Register commands
main.add_command(resolve)
main.add_command(which)
main.add_command(ls)


if __name__ == "__main__":
    main()
