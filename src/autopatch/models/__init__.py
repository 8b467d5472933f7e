"""Data models for commits, branches and configuration."""

from autopatch.models.branch import Branch, MergeRecord
from autopatch.models.commit import LOG_FORMAT, Commit
from autopatch.models.config import PatcherConfig, SelectionMode, Settings

__all__ = [
    "Commit",
    "LOG_FORMAT",
    "Branch",
    "MergeRecord",
    "PatcherConfig",
    "SelectionMode",
    "Settings",
]
