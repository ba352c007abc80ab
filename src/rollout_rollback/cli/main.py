"""Command-line entry point for rollout-rollback."""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from rollout_rollback.core.config import load_config
from rollout_rollback.core.dispatcher import CommandDispatcher
from rollout_rollback.core.exceptions import CommitFailed, PathNotFound, RollbackError
from rollout_rollback.core.repository import GitRepository

console = Console(highlight=False, soft_wrap=True, emoji=False)
error_console = Console(stderr=True, highlight=False, soft_wrap=True, emoji=False)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def _fail(error: RollbackError) -> None:
    error_console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    if isinstance(error, CommitFailed):
        error_console.print(
            f"[yellow]⚠️  '{escape(str(error.path))}' was restored to "
            f"{escape(error.revision)} but not committed. "
            f"Run 'git status' to review the working tree.[/yellow]"
        )
    sys.exit(1)


@click.command(name="rollback")
@click.argument("path", type=click.Path(path_type=Path))
@click.option("-v", "--verbose", is_flag=True, help="Log every git invocation")
@click.version_option(package_name="rollout-rollback")
def main(path: Path, verbose: bool):
    """Roll back rollout.yaml files to an earlier commit.

    PATH is either a file ending in rollout.yaml or a directory searched recursively
    for rollout.yaml files (case-insensitive). Each file's recent history
    is listed and the chosen revision is checked out and committed.
    """
    _configure_logging(verbose)

    try:
        if not path.exists():
            raise PathNotFound(path)
        config = load_config(Path.cwd())
        dispatcher = CommandDispatcher(GitRepository(Path.cwd()), config, console)
        session = dispatcher.dispatch(path)
    except RollbackError as e:
        _fail(e)

    if session.is_directory and session.files:
        rolled_back = session.rolled_back
        console.print(
            f"[bold]Rolled back {len(rolled_back)} of {len(session.files)} files.[/bold]"
        )
        for record in rolled_back:
            console.print(f"  • {escape(str(record.path))} → {escape(record.revision)}")


if __name__ == "__main__":
    main()
