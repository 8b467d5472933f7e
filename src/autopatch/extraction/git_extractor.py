"""Git repository history extraction."""

import logging
from pathlib import Path
from typing import Dict, List, Tuple

import git
from git import Repo

from autopatch.exceptions import GitOperationError
from autopatch.models import LOG_FORMAT, Commit

logger = logging.getLogger(__name__)


def wrap_git_error(error: git.GitCommandError) -> GitOperationError:
    """Convert a GitPython command error into a GitOperationError."""
    command = error.command if isinstance(error.command, list) else [str(error.command)]
    stderr = error.stderr.strip() if isinstance(error.stderr, str) else str(error.stderr)
    return GitOperationError([str(part) for part in command], stderr, error.status)


class GitExtractor:
    """Reads the history of the source repository."""

    def __init__(self, repo_path: Path) -> None:
        """Initialize the GitExtractor.

        Args:
            repo_path: Path to the source repository

        Raises:
            ValueError: If repository path is invalid
        """
        self.repo_path = Path(repo_path)
        if not self.repo_path.exists():
            raise ValueError(f"Repository path does not exist: {self.repo_path}")

        try:
            self.repo = Repo(self.repo_path)
        except git.exc.InvalidGitRepositoryError as e:
            raise ValueError(f"Invalid Git repository: {self.repo_path}") from e

    def extract_log_lines(self) -> List[str]:
        """Return the log of every local branch, oldest commit first.

        Raises:
            GitOperationError: If git log fails (for example on an empty repository)
        """
        try:
            output = self.repo.git.log(
                "--branches", "--date-order", "--reverse", f"--pretty=format:{LOG_FORMAT}"
            )
        except git.GitCommandError as e:
            raise wrap_git_error(e) from e
        return [line for line in output.split("\n") if line]

    def extract_commits(self) -> List[Commit]:
        """Parse the full log into numbered commits.

        Returns:
            Commits numbered in log order
        """
        commits = [Commit.from_log_line(number, line) for number, line in enumerate(self.extract_log_lines())]
        logger.info(f"Read {len(commits)} commits from {self.repo_path}")
        return commits

    def extract_branch_tips(self) -> Dict[str, str]:
        """Return the tip commit hash of every local branch.

        Returns:
            Branch name -> tip hash
        """
        tips = {}
        for head in self.repo.branches:
            try:
                tips[head.name] = head.commit.hexsha
            except ValueError:
                # Unborn branch without commits
                logger.warning(f"Branch {head.name} has no commits, skipping")
        return tips

    def extract_tags(self) -> List[Tuple[str, str]]:
        """Return (commit hash, tag name) pairs for every tag that points at a commit."""
        tags = []
        for tag in self.repo.tags:
            try:
                tags.append((tag.commit.hexsha, tag.name))
            except ValueError:
                # Tag on a tree or blob
                logger.warning(f"Tag {tag.name} does not point at a commit, skipping")
        return tags

    def format_patch(self, commit_hash: str) -> str:
        """Generate the mailbox patch of a single commit.

        Args:
            commit_hash: Commit hash

        Returns:
            Patch text accepted by `git am`

        Raises:
            GitOperationError: If the patch cannot be generated
        """
        try:
            patch = self.repo.git.format_patch(commit_hash, "-1", "--stdout")
        except git.GitCommandError as e:
            raise wrap_git_error(e) from e
        return patch if patch.endswith("\n") else patch + "\n"
