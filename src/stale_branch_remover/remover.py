"""Find and delete local branches that have no remote-tracking counterpart."""

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from rich.console import Console

from stale_branch_remover.git import BranchClient, DeletionError, GitError, GitRepo, validate_repository

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"
CONFIRM_PROMPT = "Do you want to delete these branches? (y/n): "


class Outcome(Enum):
    """How a run ended."""

    NO_STALE = "no-stale"
    DELETED = "deleted"
    ABORTED = "aborted"


@dataclass
class RemovalResult:
    """Summary of a single run."""

    outcome: Outcome
    original_branch: str
    skipped: list[str] = field(default_factory=list)
    stale: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)


class BranchInspector:
    """Check working tree cleanliness of a branch by switching to it.

    Leaves the branch checked out; callers restore the original branch
    with :func:`restore_checkout`.
    """

    def __init__(self, client: BranchClient) -> None:
        """Initialize inspector."""
        self.client = client

    def is_clean(self, branch_name: str) -> bool:
        """Check out the branch and report whether the working tree is clean."""
        self.client.checkout(branch_name)
        return self.client.get_status().is_clean()


@contextmanager
def restore_checkout(client: BranchClient, branch_name: str) -> Iterator[None]:
    """Check out ``branch_name`` again when the block exits, even on error."""
    try:
        yield
    finally:
        logger.debug("Restoring checkout of %s", branch_name)
        client.checkout(branch_name)


def strip_remote_prefix(branch_name: str, remote: str = DEFAULT_REMOTE) -> str:
    """Turn ``origin/feature`` into ``feature``; other names are returned as-is."""
    prefix = f"{remote}/"
    if branch_name.startswith(prefix):
        return branch_name[len(prefix) :]
    return branch_name


def find_stale_branches(filtered: Iterable[str], remote_branches: Iterable[str], remote: str = DEFAULT_REMOTE) -> list[str]:
    """Return the filtered branches without a remote counterpart, keeping their order."""
    remote_names = {strip_remote_prefix(branch, remote) for branch in remote_branches}
    return [branch for branch in filtered if branch not in remote_names]


def is_affirmative(answer: str) -> bool:
    """Only a bare "y" in either case confirms."""
    return answer.lower() == "y"


def ask_confirmation(prompt: Callable[[str], str], console: Console) -> bool:
    """Ask the operator to confirm. An interrupt or closed input counts as "no"."""
    try:
        answer = prompt(CONFIRM_PROMPT)
    except (KeyboardInterrupt, EOFError):
        console.print()
        logger.debug("Prompt interrupted, treating as decline")
        return False
    return is_affirmative(answer)


def scan_branches(
    client: BranchClient,
    local_branches: list[str],
    current: str,
    console: Console,
) -> tuple[list[str], list[str]]:
    """Split local branches into (filtered, skipped).

    Every non-current branch gets checked out in turn, so the working tree
    ends up on whichever branch was scanned last.
    """
    inspector = BranchInspector(client)
    filtered = []
    skipped = []
    for branch in local_branches:
        if branch == current:
            console.print(f"Skipping current branch: {branch}")
            skipped.append(branch)
            continue

        if not inspector.is_clean(branch):
            console.print(f"Skipping branch with pending changes: {branch}")
            skipped.append(branch)
            continue

        filtered.append(branch)
    return filtered, skipped


def remove_stale_branches(
    directory: Optional[Path] = None,
    client: Optional[BranchClient] = None,
    skip_repo_check: bool = False,
    *,
    remote: str = DEFAULT_REMOTE,
    prompt: Callable[[str], str] = input,
    assume_yes: bool = False,
    force: bool = False,
    console: Optional[Console] = None,
) -> RemovalResult:
    """Delete local branches that have no matching remote-tracking branch.

    Args:
        directory: Repository path, defaults to the current working directory
        client: Branch client to use instead of a :class:`GitRepo` for ``directory``
        skip_repo_check: Do not look for a ``.git`` marker in ``directory``
        remote: Remote whose prefix is stripped from remote branch names
        prompt: Reads one line of operator input for the confirmation
        assume_yes: Confirm without prompting
        force: Delete branches even if they are not fully merged
        console: Where to print progress

    Returns:
        The run summary. The originally checked-out branch is restored
        right after the scan, before the prompt and before deleting
        anything, so a stale branch is never the checked-out one when git
        deletes it.

    Raises:
        NotARepositoryError: If ``directory`` is not a git repository
        DeletionError: If deleting a branch fails; the remaining branches are left alone
        GitError: If any other git operation fails. A failure during the scan
            still checks out the original branch before propagating
    """
    directory = directory if directory is not None else Path.cwd()
    console = console or Console()

    validate_repository(directory, skip_repo_check)
    if client is None:
        client = GitRepo(directory)

    local_branches = client.list_local_branches()
    remote_branches = client.list_remote_branches()
    current = client.get_status().current

    console.print(f"Current branch: {current}")
    with restore_checkout(client, current):
        filtered, skipped = scan_branches(client, local_branches, current, console)

    stale = find_stale_branches(filtered, remote_branches, remote)
    logger.debug("Filtered branches: %s, stale branches: %s", filtered, stale)
    result = RemovalResult(outcome=Outcome.NO_STALE, original_branch=current, skipped=skipped, stale=stale)

    if not stale:
        console.print("[yellow]No stale branches found.[/yellow]")
        return result

    console.print("[blue]The following branches are stale and will be deleted:[/blue]")
    for branch in stale:
        console.print(f"[cyan]{branch}[/cyan]")

    if not (assume_yes or ask_confirmation(prompt, console)):
        console.print("[red]Operation aborted.[/red]")
        result.outcome = Outcome.ABORTED
        return result

    result.outcome = Outcome.DELETED
    for branch in stale:
        try:
            client.delete_local_branch(branch, force=force)
        except GitError as err:
            raise DeletionError(str(err), deleted=list(result.deleted)) from err
        result.deleted.append(branch)
        console.print(f"[green]Deleted branch: {branch}[/green]")
    return result
