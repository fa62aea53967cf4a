"""architask undo command."""

from __future__ import annotations

from pathlib import Path

import click
from rich.markup import escape

from architask.core.output import console, print_apply_result
from architask.executor.undo import UndoManager


@click.command()
@click.argument("change_id", required=False)
@click.option("--last", is_flag=True, help="Undo every change from the last fix session")
@click.option("--list", "list_all", is_flag=True, help="List all undoable changes")
@click.option("--project", type=click.Path(file_okay=False, path_type=Path), default=".",
              help="Project directory (default: current dir)")
def undo(change_id: str | None, last: bool, list_all: bool, project: Path):
    """Undo changes written by `architask fix`.

    Pass a CHANGE_ID to undo one change, or use --last to undo the
    entire last fix session.
    """
    manager = UndoManager(project.resolve())

    if list_all:
        entries = manager.list_undoable()
        if not entries:
            console.print("\n  No undoable changes found.\n")
            return

        console.print("\n  [bold]Undoable Changes[/bold]\n")
        for entry in entries:
            console.print(
                f"  {entry.change_id}  {escape(entry.file)}  "
                f"{escape(entry.description)}  \\[{entry.timestamp}]"
            )
        console.print()
        return

    if last:
        results = manager.undo_last_session()
        if not results:
            console.print("\n  No recent fix session to undo.\n")
            return

        console.print("\n  [bold]Undoing last fix session:[/bold]\n")
        for result in results:
            print_apply_result(result)
        console.print()
        return

    if change_id:
        print_apply_result(manager.undo(change_id))
        return

    console.print("\n  Usage: architask undo <CHANGE_ID> or architask undo --last")
    console.print("  Run `architask undo --list` to see available undos.\n")
