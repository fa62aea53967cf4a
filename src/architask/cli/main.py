"""Click CLI entry point for architask."""

from __future__ import annotations

import logging

import click
from rich.logging import RichHandler

from architask._version import __version__
from architask.core.output import error_console


@click.group()
@click.version_option(version=__version__, prog_name="architask")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """architask - static analysis and deterministic refactoring for Swift.

    Scan sources for findings, plan tasks from them, and apply the safe ones.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(name)s: %(message)s",
            handlers=[RichHandler(console=error_console, show_time=False)],
        )


# Import and register subcommands
from architask.cli.scan_cmd import scan  # noqa: E402
from architask.cli.plan_cmd import plan  # noqa: E402
from architask.cli.fix_cmd import fix  # noqa: E402
from architask.cli.undo_cmd import undo  # noqa: E402

cli.add_command(scan)
cli.add_command(plan)
cli.add_command(fix)
cli.add_command(undo)


if __name__ == "__main__":
    cli()
