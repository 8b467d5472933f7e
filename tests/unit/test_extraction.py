"""Unit tests for Git extraction and destination modules."""

from pathlib import Path

import git
import pytest

from autopatch.exceptions import GitOperationError
from autopatch.extraction import DestinationRepository, GitExtractor


def test_git_extractor_initialization(source_repo):
    """Test GitExtractor initialization."""
    extractor = GitExtractor(source_repo)

    assert extractor.repo_path == source_repo
    assert extractor.repo is not None


def test_git_extractor_invalid_path():
    """Test GitExtractor with invalid repository path."""
    with pytest.raises(ValueError, match="Repository path does not exist"):
        GitExtractor(Path("/nonexistent/path"))


def test_git_extractor_not_a_repository(tmp_path):
    with pytest.raises(ValueError, match="Invalid Git repository"):
        GitExtractor(tmp_path)


def test_extract_commits(source_repo):
    """Commits come oldest first and are numbered in log order."""
    commits = GitExtractor(source_repo).extract_commits()

    assert [c.number for c in commits] == [0, 1, 2, 3]
    assert [c.message for c in commits] == [
        "Initial commit",
        "Add feature",
        "Extend feature",
        "Merge branch 'feature'",
    ]
    assert commits[0].is_root
    assert commits[1].parent_hashes == [commits[0].hash]
    assert commits[3].is_merge
    assert commits[3].parent_hashes == [commits[0].hash, commits[2].hash]


def test_extract_branch_tips(source_repo):
    repo = git.Repo(source_repo)

    tips = GitExtractor(source_repo).extract_branch_tips()

    assert tips == {
        "master": repo.heads.master.commit.hexsha,
        "feature": repo.heads.feature.commit.hexsha,
    }


def test_extract_tags(source_repo):
    repo = git.Repo(source_repo)

    tags = GitExtractor(source_repo).extract_tags()

    assert tags == [(repo.heads.master.commit.hexsha, "v1.0")]


def test_format_patch(source_repo):
    extractor = GitExtractor(source_repo)
    commit = extractor.extract_commits()[1]

    patch = extractor.format_patch(commit.hash)

    assert "Subject: [PATCH] Add feature" in patch
    assert "feature.py" in patch
    assert patch.endswith("\n")


def test_format_patch_unknown_commit(source_repo):
    with pytest.raises(GitOperationError):
        GitExtractor(source_repo).format_patch("0" * 40)


class TestDestinationRepository:
    """Test the destination repository wrapper."""

    def test_check_folder_with_repository(self, source_repo):
        assert DestinationRepository.check_folder(source_repo, can_create=False) == (True, True)

    def test_check_folder_without_repository(self, tmp_path):
        assert DestinationRepository.check_folder(tmp_path, can_create=False) == (True, False)

    def test_check_folder_missing(self, tmp_path):
        missing = tmp_path / "missing"

        assert DestinationRepository.check_folder(missing, can_create=False) == (False, False)
        assert not missing.exists()

    def test_check_folder_creates_missing(self, tmp_path):
        missing = tmp_path / "new" / "dest"

        assert DestinationRepository.check_folder(missing, can_create=True) == (True, False)
        assert missing.is_dir()

    def test_init_with_initial_branch(self, tmp_path):
        destination = DestinationRepository.init(tmp_path, initial_branch="trunk")

        assert destination.repo.head.reference.name == "trunk"

    def test_open_invalid_repository(self, tmp_path):
        with pytest.raises(ValueError):
            DestinationRepository(tmp_path)

    def test_checkout_missing_branch_fails(self, source_repo):
        destination = DestinationRepository(source_repo)

        with pytest.raises(GitOperationError) as excinfo:
            destination.checkout("does-not-exist")

        assert excinfo.value.command[:2] == ["git", "checkout"]

    def test_create_branch_and_tag(self, source_repo):
        destination = DestinationRepository(source_repo)

        destination.create_branch("topic")
        destination.tag("v2.0")

        repo = git.Repo(source_repo)
        assert repo.active_branch.name == "topic"
        assert repo.tags["v2.0"].commit == repo.head.commit
