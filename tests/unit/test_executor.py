"""Unit tests for replay task execution."""

from unittest.mock import MagicMock

import pytest

from autopatch.exceptions import GitOperationError
from autopatch.replay import ReplayTask, TaskExecutor, TaskKind


def git_failure(*command):
    return GitOperationError(list(command), "fatal: simulated failure", 128)


@pytest.fixture
def source():
    mock = MagicMock()
    mock.format_patch.side_effect = lambda commit_hash: f"patch for {commit_hash}\n"
    return mock


@pytest.fixture
def destination():
    return MagicMock()


@pytest.fixture
def executor(source, destination, tmp_path):
    return TaskExecutor(source, destination, patch_file=tmp_path / "tmp.patch")


def test_runs_all_tasks_in_order(executor, destination):
    tasks = [
        ReplayTask.patch("aaa", "First"),
        ReplayTask.checkout("feature"),
        ReplayTask.merge("master", "feature", "Merge branch 'feature'"),
        ReplayTask.tag("v1.0"),
        ReplayTask.delete("feature"),
    ]

    result = executor.run(tasks)

    assert result.success
    assert result.completed == 5
    assert result.failed_task is None
    destination.merge.assert_called_once_with("feature", "Merge branch 'feature'")
    destination.tag.assert_called_once_with("v1.0")
    destination.delete_branch.assert_called_once_with("feature")


def test_stops_at_first_failure(executor, destination):
    destination.apply_patch.side_effect = [None, git_failure("git", "am"), None]
    tasks = [
        ReplayTask.patch("aaa", "First"),
        ReplayTask.patch("bbb", "Second"),
        ReplayTask.patch("ccc", "Third"),
        ReplayTask.tag("v1.0"),
    ]

    result = executor.run(tasks)

    assert not result.success
    assert result.completed == 1
    assert result.total == 4
    assert result.failed_task == tasks[1]
    assert "simulated failure" in result.error
    assert destination.apply_patch.call_count == 2
    destination.tag.assert_not_called()


def test_patch_file_written_and_removed(executor, source, destination, tmp_path):
    patch_file = tmp_path / "tmp.patch"
    seen = []
    destination.check_patch.side_effect = lambda path: seen.append(path.read_text())

    result = executor.run([ReplayTask.patch("aaa", "First")])

    assert result.success
    assert seen == ["patch for aaa\n"]
    source.format_patch.assert_called_once_with("aaa")
    destination.apply_patch.assert_called_once_with(patch_file)
    assert not patch_file.exists()


def test_patch_file_removed_on_failure(executor, destination, tmp_path):
    destination.check_patch.side_effect = git_failure("git", "apply", "--check")

    result = executor.run([ReplayTask.patch("aaa", "First")])

    assert not result.success
    destination.apply_patch.assert_not_called()
    assert not (tmp_path / "tmp.patch").exists()


def test_checkout_creates_missing_branch(executor, destination):
    destination.checkout.side_effect = git_failure("git", "checkout", "feature")

    result = executor.run([ReplayTask.checkout("feature")])

    assert result.success
    destination.create_branch.assert_called_once_with("feature")


def test_checkout_existing_branch(executor, destination):
    result = executor.run([ReplayTask.checkout("master")])

    assert result.success
    destination.checkout.assert_called_once_with("master")
    destination.create_branch.assert_not_called()


def test_checkout_fails_when_branch_cannot_be_created(executor, destination):
    destination.checkout.side_effect = git_failure("git", "checkout", "bad..name")
    destination.create_branch.side_effect = git_failure("git", "checkout", "-b", "bad..name")

    result = executor.run([ReplayTask.checkout("bad..name"), ReplayTask.patch("aaa", "First")])

    assert not result.success
    assert result.completed == 0
    destination.apply_patch.assert_not_called()


def test_merge_requires_target_checkout(executor, destination):
    destination.checkout.side_effect = git_failure("git", "checkout", "master")

    result = executor.run([ReplayTask.merge("master", "feature", "Merge")])

    assert not result.success
    destination.merge.assert_not_called()
    destination.create_branch.assert_not_called()


def test_empty_task_list(executor):
    result = executor.run([])

    assert result.success
    assert result.completed == 0


@pytest.mark.parametrize("kind", list(TaskKind))
def test_every_task_kind_is_handled(executor, kind):
    task = ReplayTask(kind=kind, identifier="abc", source_identifier="feature", comment="message")

    result = executor.run([task])

    assert result.success
    assert result.completed == 1
