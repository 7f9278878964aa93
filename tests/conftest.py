"""Test configuration and fixtures."""

from pathlib import Path
from typing import Callable, Generator, Optional
from unittest.mock import MagicMock

import pytest
from git import Actor, Repo

from stale_branch_remover.git import BranchClient, WorkingTreeStatus

ClientFactory = Callable[..., MagicMock]


@pytest.fixture
def test_env(tmp_path: Path) -> Generator[tuple[Path, Path], None, None]:
    """Create a test environment with local and remote repositories.

    The local repository has ``main`` and ``feature-1`` pushed to ``origin``
    and a local-only ``stale-branch``. ``main`` is checked out.

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    # Create temporary directories for both repos
    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    # Initialize remote repo
    Repo.init(remote_path, bare=True)

    # Initialize local repo
    local_repo = Repo.init(local_path)

    # Set up git config
    author = Actor("Test User", "test@example.com")
    local_repo.config_writer().set_value("user", "name", author.name).release()
    local_repo.config_writer().set_value("user", "email", author.email).release()

    # Create initial commit and make sure the default branch is called main
    readme = local_path / "README.md"
    readme.write_text("# Test Repository")
    local_repo.index.add(["README.md"])
    local_repo.index.commit("Initial commit", author=author)
    local_repo.git.branch("-M", "main")
    main_branch = local_repo.heads.main

    # Add remote
    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("main")
    main_branch.set_tracking_branch(origin.refs.main)

    # Pushed branch with its own commit
    feature = local_repo.create_head("feature-1")
    feature.checkout()
    (local_path / "feature-1.txt").write_text("Feature content")
    local_repo.index.add(["feature-1.txt"])
    local_repo.index.commit("Add feature-1", author=author)
    origin.push("feature-1")
    feature.set_tracking_branch(origin.refs["feature-1"])

    # Local-only branch pointing at main, so it is fully merged
    main_branch.checkout()
    local_repo.create_head("stale-branch", "main")

    yield local_path, remote_path

    # Cleanup is handled by pytest's tmp_path fixture


@pytest.fixture
def make_client() -> ClientFactory:
    """Build an in-memory branch client.

    ``statuses`` are returned by successive ``get_status`` calls; when omitted
    every call reports ``current`` as checked out and clean.
    """

    def factory(
        local: list[str],
        remote: list[str],
        current: str = "main",
        statuses: Optional[list[WorkingTreeStatus]] = None,
    ) -> MagicMock:
        client = MagicMock(spec=BranchClient)
        client.list_local_branches.return_value = list(local)
        client.list_remote_branches.return_value = list(remote)
        if statuses is None:
            client.get_status.return_value = WorkingTreeStatus(current=current, clean=True)
        else:
            client.get_status.side_effect = statuses
        return client

    return factory
