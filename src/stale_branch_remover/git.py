"""Git repository operations."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Git operation error."""


class NotARepositoryError(GitError):
    """The target directory is missing or is not a git repository."""


class DeletionError(GitError):
    """A branch deletion failed part way through the stale list."""

    def __init__(self, message: str, deleted: Optional[list[str]] = None) -> None:
        """Initialize error.

        Args:
            message: Error message
            deleted: Branches that were deleted before the failure
        """
        super().__init__(message)
        self.deleted = deleted or []


@dataclass(frozen=True)
class WorkingTreeStatus:
    """Checked-out branch and whether the working tree has pending changes."""

    current: str
    clean: bool

    def is_clean(self) -> bool:
        """Return True when there are no uncommitted or untracked changes."""
        return self.clean


class BranchClient(Protocol):
    """Version-control operations needed to remove stale branches."""

    def list_local_branches(self) -> list[str]: ...

    def list_remote_branches(self) -> list[str]: ...

    def get_status(self) -> WorkingTreeStatus: ...

    def checkout(self, branch_name: str) -> None: ...

    def delete_local_branch(self, branch_name: str, force: bool = False) -> None: ...


def validate_repository(path: Path, skip_check: bool = False) -> None:
    """Make sure ``path`` exists and holds a ``.git`` marker.

    Args:
        path: Directory to check
        skip_check: Skip validation entirely (used by tests with fake clients)

    Raises:
        NotARepositoryError: If the directory is missing or not a repository
    """
    if skip_check:
        logger.debug("Skipping repository check for %s", path)
        return
    # .git is a file inside linked worktrees and submodules
    if not path.exists() or not (path / ".git").exists():
        raise NotARepositoryError("The specified directory is not a Git repository.")


class GitRepo:
    """GitPython-backed branch client."""

    def __init__(self, path: Path) -> None:
        """Initialize repository."""
        try:
            self.repo: Repo = Repo(path)
            if self.repo.bare:
                raise GitError("Cannot operate on bare repository")
        except (GitCommandError, ValueError, InvalidGitRepositoryError, NoSuchPathError) as err:
            raise GitError(f"Failed to open repository: {err}") from err

    def list_local_branches(self) -> list[str]:
        """Get local branch names in the order git reports them."""
        try:
            output = self.repo.git.branch("--format=%(refname:short)")
        except GitCommandError as err:
            raise GitError(f"Failed to list local branches: {err}") from err
        branches = [
            branch
            for branch in output.splitlines()
            if branch and not (branch.startswith("(") or branch == "HEAD")  # Skip detached HEAD entries
        ]
        logger.debug("Local branches: %s", branches)
        return branches

    def list_remote_branches(self) -> list[str]:
        """Get remote-tracking branch names, prefixed with their remote."""
        try:
            output = self.repo.git.branch("-r", "--format=%(refname:short)")
        except GitCommandError as err:
            raise GitError(f"Failed to list remote branches: {err}") from err
        branches = [
            branch
            for branch in output.splitlines()
            # refs/remotes/<remote>/HEAD shortens to "<remote>" on recent git
            if "/" in branch and not branch.endswith("/HEAD")
        ]
        logger.debug("Remote branches: %s", branches)
        return branches

    def get_status(self) -> WorkingTreeStatus:
        """Get the checked-out branch and working tree cleanliness."""
        try:
            try:
                current = self.repo.active_branch.name
            except TypeError:
                # Detached HEAD: remember the commit so it can be checked out again
                current = self.repo.head.commit.hexsha
            clean = not self.repo.is_dirty(untracked_files=True)
        except (GitCommandError, ValueError) as err:
            raise GitError(f"Failed to get status: {err}") from err
        logger.debug("Status: current=%s clean=%s", current, clean)
        return WorkingTreeStatus(current=current, clean=clean)

    def checkout(self, branch_name: str) -> None:
        """Switch the working tree to ``branch_name``."""
        logger.debug("Checking out %s", branch_name)
        try:
            self.repo.git.checkout(branch_name)
        except GitCommandError as err:
            raise GitError(f"Failed to checkout {branch_name}: {err}") from err

    def delete_local_branch(self, branch_name: str, force: bool = False) -> None:
        """Delete a local branch.

        Without ``force`` git refuses to delete branches that are not fully merged.
        """
        logger.debug("Deleting %s (force=%s)", branch_name, force)
        try:
            self.repo.git.branch("-D" if force else "-d", branch_name)
        except GitCommandError as err:
            raise GitError(f"Failed to delete branch {branch_name}: {err}") from err
