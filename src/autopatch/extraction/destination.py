"""Operations on the repository history is replayed onto."""

import logging
from pathlib import Path
from typing import Optional, Tuple

import git
from git import Repo

from autopatch.exceptions import GitOperationError
from autopatch.extraction.git_extractor import wrap_git_error

logger = logging.getLogger(__name__)


class DestinationRepository:
    """Wraps the git commands a replay runs in the destination repository.

    Every method raises GitOperationError when git fails.
    """

    def __init__(self, repo_path: Path) -> None:
        """Open an existing destination repository.

        Args:
            repo_path: Path to the destination repository

        Raises:
            ValueError: If the path is not a Git repository
        """
        self.repo_path = Path(repo_path)
        try:
            self.repo = Repo(self.repo_path)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise ValueError(f"Invalid Git repository: {self.repo_path}") from e

    @classmethod
    def init(cls, repo_path: Path, initial_branch: Optional[str] = None) -> "DestinationRepository":
        """Create an empty repository and open it.

        Args:
            repo_path: Directory to initialize
            initial_branch: Name for the unborn first branch (git default if None)
        """
        kwargs = {}
        if initial_branch:
            kwargs["initial_branch"] = initial_branch
        try:
            Repo.init(repo_path, **kwargs)
        except git.GitCommandError as e:
            raise wrap_git_error(e) from e
        logger.info(f"New repository created at: {repo_path}")
        return cls(repo_path)

    @staticmethod
    def check_folder(repo_path: Path, can_create: bool) -> Tuple[bool, bool]:
        """Check whether a replay can go to a folder and whether it holds a repository.

        Args:
            repo_path: Destination folder
            can_create: Create the folder when it does not exist

        Returns:
            (can_continue, has_repository)
        """
        repo_path = Path(repo_path)
        if repo_path.is_dir():
            try:
                Repo(repo_path).git.status()
            except (git.exc.InvalidGitRepositoryError, git.GitCommandError):
                return True, False
            return True, True

        if not can_create:
            return False, False

        try:
            repo_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Could not create {repo_path}: {e}")
            return False, False
        return True, False

    def _git(self, command: str, *args: str) -> str:
        logger.debug(f"Running git {command} {' '.join(args)} in {self.repo_path}")
        try:
            return getattr(self.repo.git, command)(*args)
        except git.GitCommandError as e:
            raise wrap_git_error(e) from e

    def check_patch(self, patch_file: Path) -> None:
        """Verify that a patch applies cleanly without touching the work tree."""
        self._git("apply", "--check", str(Path(patch_file).resolve()))

    def apply_patch(self, patch_file: Path) -> None:
        """Commit a mailbox patch, keeping its author and message."""
        self._git("am", str(Path(patch_file).resolve()))

    def checkout(self, branch_name: str) -> None:
        self._git("checkout", branch_name)

    def create_branch(self, branch_name: str) -> None:
        """Create a branch at HEAD and check it out."""
        self._git("checkout", "-b", branch_name)

    def merge(self, branch_name: str, message: str) -> None:
        """Merge a branch into the checked out branch, always creating a merge commit."""
        self._git("merge", "--no-ff", branch_name, "-m", message)

    def delete_branch(self, branch_name: str) -> None:
        self._git("branch", "-d", branch_name)

    def tag(self, tag_name: str) -> None:
        """Create a lightweight tag at HEAD."""
        self._git("tag", tag_name)
