"""Command line interface for stale-branch-remover."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from stale_branch_remover import __version__
from stale_branch_remover.git import DeletionError, GitError, NotARepositoryError
from stale_branch_remover.remover import DEFAULT_REMOTE, remove_stale_branches

app = typer.Typer(help="Delete local git branches that no longer have a remote-tracking branch")
console = Console()


def configure_logging(verbose: bool) -> None:
    """Send debug diagnostics through rich when verbose."""
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print the version and exit."""
    if value:
        print(f"stale-branch-remover {__version__}")
        raise typer.Exit()


def print_deleted(deleted: list[str]) -> None:
    """Show a table of the branches that were deleted."""
    result_table = Table(
        show_header=True,
        header_style="bold",
        show_edge=True,
    )
    result_table.add_column("Branch", style="cyan")
    for branch in deleted:
        result_table.add_row(branch)

    console.print()  # Add a blank line
    # Table titles wrap to the table width, so the summary gets its own line
    console.print(f"[bold green]Successfully deleted {len(deleted)} branch(es)[/bold green]", soft_wrap=True)
    console.print(result_table)


@app.command()
def main(
    path: Annotated[Path, typer.Option(help="Path to git repository")] = Path("."),
    remote: Annotated[
        str, typer.Option(envvar="STALE_BRANCH_REMOVER_REMOTE", help="Remote whose branches count as tracked")
    ] = DEFAULT_REMOTE,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    force: bool = typer.Option(False, "--force", "-f", help="Force deletion of unmerged branches"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show git operations as they run"),
    skip_repo_check: bool = typer.Option(False, hidden=True),  # Hidden parameter for tests
    version: Annotated[
        Optional[bool], typer.Option("--version", callback=version_callback, is_eager=True, help="Show version")
    ] = None,
) -> None:
    """Remove stale local branches after confirmation."""
    configure_logging(verbose)
    try:
        result = remove_stale_branches(
            path,
            skip_repo_check=skip_repo_check,
            remote=remote,
            assume_yes=yes,
            force=force,
            console=console,
        )
    except NotARepositoryError as err:
        print(f"[red]Error: {err}[/red]")
        raise typer.Exit(code=1) from err
    except DeletionError as err:
        if err.deleted:
            print_deleted(err.deleted)
        print(f"[red]Error:[/red] {err}")
        raise typer.Exit(code=1) from err
    except GitError as err:
        print(f"[red]Error:[/red] {err}")
        raise typer.Exit(code=1) from err

    if result.deleted:
        print_deleted(result.deleted)


if __name__ == "__main__":
    app()
