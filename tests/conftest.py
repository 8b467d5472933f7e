"""Shared fixtures creating real Git repositories."""

import tempfile
from pathlib import Path

import git
import pytest


def configure_identity(repo: git.Repo) -> None:
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()


@pytest.fixture
def source_repo():
    """Create a repository with a merged feature branch and a tag.

    History, oldest first: "Initial commit" on master, "Add feature" and
    "Extend feature" on feature, then a --no-ff merge of feature into master
    tagged v1.0.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        repo_path = Path(tmpdir)
        repo = git.Repo.init(repo_path, initial_branch="master")
        configure_identity(repo)

        (repo_path / "README.md").write_text("# Test Project\n")
        repo.index.add(["README.md"])
        repo.index.commit("Initial commit")

        feature = repo.create_head("feature")
        feature.checkout()

        (repo_path / "feature.py").write_text("def feature():\n    return 1\n")
        repo.index.add(["feature.py"])
        repo.index.commit("Add feature")

        (repo_path / "feature.py").write_text("def feature():\n    return 2\n")
        repo.index.add(["feature.py"])
        repo.index.commit("Extend feature")

        repo.heads.master.checkout()
        repo.git.merge("--no-ff", "feature", "-m", "Merge branch 'feature'")
        repo.create_tag("v1.0")

        yield repo_path


@pytest.fixture
def git_identity(monkeypatch):
    """Give git commands without a configured identity a committer and author."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Replay User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "replay@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Replay User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "replay@example.com")
