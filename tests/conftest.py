"""Test configuration and fixtures."""

from pathlib import Path
from typing import Generator

import pytest
from git import Actor, Repo

BASE_TIME = 1_700_000_000


@pytest.fixture
def test_env(tmp_path: Path) -> Generator[tuple[Path, Path], None, None]:
    """Create a test environment with local and remote repositories.

    Branch tips are committed at fixed times, oldest to newest:
    main, develop, feature/signup, feature/login, feature/remote-only.
    ``feature/remote-only`` exists only on the remote, and ``origin/HEAD``
    points at ``origin/main``.

    Returns:
        Tuple of (local_repo_path, remote_repo_path)
    """
    remote_path = tmp_path / "remote"
    local_path = tmp_path / "local"
    remote_path.mkdir()
    local_path.mkdir()

    Repo.init(remote_path, bare=True)
    local_repo = Repo.init(local_path)
    # Name the unborn branch main regardless of init.defaultBranch
    local_repo.git.symbolic_ref("HEAD", "refs/heads/main")

    author = Actor("Test User", "test@example.com")
    local_repo.config_writer().set_value("user", "name", author.name).release()
    local_repo.config_writer().set_value("user", "email", author.email).release()

    def commit(filename: str, content: str, offset: int) -> None:
        path = local_path / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        local_repo.index.add([filename])
        date = f"{BASE_TIME + offset} +0000"
        local_repo.index.commit(
            f"Add {filename}",
            author=author,
            committer=author,
            author_date=date,
            commit_date=date,
        )

    commit("README.md", "# Test Repository", 0)
    main_branch = local_repo.heads.main

    origin = local_repo.create_remote("origin", url=str(remote_path))
    origin.push("main")
    main_branch.set_tracking_branch(origin.refs.main)

    def create_branch(name: str, offset: int) -> None:
        main_branch.checkout()
        branch = local_repo.create_head(name)
        branch.checkout()
        commit(f"{name}.txt", f"{name} content", offset)

    create_branch("develop", 100)
    create_branch("feature/signup", 200)
    create_branch("feature/login", 300)
    create_branch("feature/remote-only", 400)

    for name in ("develop", "feature/login", "feature/remote-only"):
        origin.push(name)

    main_branch.checkout()
    local_repo.delete_head("feature/remote-only", force=True)
    local_repo.git.remote("set-head", "origin", "main")

    yield local_path, remote_path


@pytest.fixture
def test_repo(test_env: tuple[Path, Path]) -> Path:
    """Path of the local repository."""
    local_path, _ = test_env
    return local_path
