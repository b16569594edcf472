"""Git repository operations."""

from enum import Enum
from pathlib import Path

from git import GitCommandError, GitCommandNotFound, InvalidGitRepositoryError, NoSuchPathError, Repo

from twig.logging_config import get_logger

logger = get_logger(__name__)


class Scope(Enum):
    """Which refs to list and check out."""

    LOCAL = "refs/heads/"
    REMOTE = "refs/remotes/"


class GitError(Exception):
    """Git operation error."""


class SourceError(GitError):
    """Branches could not be listed."""


class CheckoutError(GitError):
    """The selected branch could not be checked out."""


class GitRepo:
    """Git repository operations."""

    def __init__(self, path: Path) -> None:
        """Initialize repository."""
        try:
            self.repo: Repo = Repo(path, search_parent_directories=True)
            if self.repo.bare:
                raise SourceError("Cannot operate on bare repository")
        except (GitCommandError, ValueError, InvalidGitRepositoryError, NoSuchPathError) as err:
            raise SourceError(f"Failed to open repository: {err}") from err

    def get_current_branch_name(self) -> str:
        """Get current branch name."""
        try:
            try:
                return self.repo.active_branch.name
            except TypeError:
                # Detached HEAD
                return ""
        except (GitCommandError, ValueError) as err:
            raise GitError(f"Failed to get current branch: {err}") from err

    def get_recent_branches(self, scope: Scope) -> list[str]:
        """Get branch short names, most recently committed first.

        Symbolic refs such as ``origin/HEAD`` are left out.

        Raises:
            SourceError: If git could not list the refs
        """
        try:
            output = self.repo.git.for_each_ref(
                "--sort=-committerdate",
                scope.value,
                "--format=%(refname:short)%09%(symref)",
            )
        except (GitCommandError, GitCommandNotFound) as err:
            raise SourceError(f"Failed to list branches: {err}") from err

        branches = []
        for line in output.splitlines():
            name, _, symref = line.partition("\t")
            name = name.strip()
            if not name or symref.strip() or name.endswith("/HEAD"):
                continue
            branches.append(name)

        logger.debug("Found %d %s branches", len(branches), scope.name.lower())
        return branches

    def checkout_args(self, branch: str, scope: Scope) -> list[str]:
        """Build the ``git checkout`` arguments for a picked branch.

        A remote branch ``<remote>/<name>`` is checked out as ``<name>`` when
        that local branch already exists. Anything else gets a new tracking
        branch for the full ref, which stays unambiguous when several
        remotes carry the same branch name.
        """
        if scope is Scope.LOCAL:
            return [branch]

        _, sep, local_name = branch.partition("/")
        if sep and local_name and local_name in {head.name for head in self.repo.heads}:
            return [local_name]
        return ["--track", branch]

    def checkout(self, branch: str, scope: Scope) -> str:
        """Check out a branch and return the name of the branch now checked out.

        Raises:
            CheckoutError: If git refused the checkout
        """
        args = self.checkout_args(branch, scope)
        logger.info("Running git checkout %s", " ".join(args))
        try:
            self.repo.git.checkout(*args)
        except (GitCommandError, GitCommandNotFound) as err:
            raise CheckoutError(str(err)) from err
        return self.get_current_branch_name() or args[-1]
