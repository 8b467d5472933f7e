"""Unit tests for command-line configuration."""

from pathlib import Path

import pytest

from autopatch.exceptions import ConfigError
from autopatch.models import PatcherConfig, SelectionMode, Settings


def test_parse_args_converts_booleans():
    values = PatcherConfig.parse_args(["source=../repo", "dryRun=true", "flag=false", "count=3"])

    assert values == {"source": "../repo", "dryRun": True, "flag": False, "count": "3"}


def test_parse_args_ignores_bare_words():
    values = PatcherConfig.parse_args(["verbose", "=x", "branch=feature"])

    assert values == {"branch": "feature"}


def test_parse_args_keeps_equals_in_value():
    values = PatcherConfig.parse_args(["commit=abc=def"])

    assert values == {"commit": "abc=def"}


def test_from_args_branch_mode():
    config = PatcherConfig.from_args(["source=../src", "dest=../dst", "branch=feature"])

    assert config.source == Path("../src")
    assert config.dest == Path("../dst")
    assert config.selection_mode == SelectionMode.BRANCH
    assert config.dry_run is False


def test_from_args_commit_with_count():
    config = PatcherConfig.from_args(["source=.", "commit=abc123", "count=5"])

    assert config.selection_mode == SelectionMode.COMMIT
    assert config.count == 5


def test_from_args_hash_range():
    config = PatcherConfig.from_args(["source=.", "startCommit=abc", "endCommit=def", "dryRun=true"])

    assert config.selection_mode == SelectionMode.HASH_RANGE
    assert config.start_commit == "abc"
    assert config.end_commit == "def"
    assert config.dry_run is True


def test_from_args_without_selection_lists_branches():
    config = PatcherConfig.from_args(["source=."])

    assert config.selection_mode is None
    assert config.dest is None


def test_missing_source():
    with pytest.raises(ConfigError, match="source"):
        PatcherConfig.from_args(["dest=../dst", "branch=feature"])


def test_conflicting_selection_modes():
    with pytest.raises(ConfigError):
        PatcherConfig.from_args(["source=.", "branch=feature", "commit=abc"])


def test_start_commit_requires_end_commit():
    with pytest.raises(ConfigError):
        PatcherConfig.from_args(["source=.", "startCommit=abc"])


def test_invalid_count():
    with pytest.raises(ConfigError):
        PatcherConfig.from_args(["source=.", "commit=abc", "count=many"])


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("AUTOPATCH_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("AUTOPATCH_PATCH_FILE", "/tmp/replay.patch")

    settings = Settings()

    assert settings.log_level == "DEBUG"
    assert settings.patch_file == Path("/tmp/replay.patch")


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("AUTOPATCH_LOG_LEVEL", raising=False)
    monkeypatch.delenv("AUTOPATCH_PATCH_FILE", raising=False)

    settings = Settings()

    assert settings.log_level == "INFO"
    assert settings.patch_file == Path("tmp.patch")
