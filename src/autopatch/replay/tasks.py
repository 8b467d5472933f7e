"""Replay task model."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TaskKind(str, Enum):
    """Operations that can be replayed onto the destination repository."""

    CHECKOUT = "checkout"
    PATCH = "patch"
    MERGE = "merge"
    TAG = "tag"
    DELETE = "delete"


class ReplayTask(BaseModel):
    """One operation against the destination repository."""

    model_config = ConfigDict(frozen=True)

    kind: TaskKind = Field(..., description="Operation to perform")
    identifier: str = Field(..., description="Branch name, commit hash or tag name the task acts on")
    source_identifier: Optional[str] = Field(None, description="Branch merged in, for merge tasks")
    comment: str = Field("", description="Commit or merge message")

    @classmethod
    def checkout(cls, branch_name: str) -> "ReplayTask":
        return cls(kind=TaskKind.CHECKOUT, identifier=branch_name)

    @classmethod
    def patch(cls, commit_hash: str, message: str) -> "ReplayTask":
        return cls(kind=TaskKind.PATCH, identifier=commit_hash, comment=message)

    @classmethod
    def merge(cls, target_branch: str, source_branch: str, message: str) -> "ReplayTask":
        return cls(kind=TaskKind.MERGE, identifier=target_branch, source_identifier=source_branch, comment=message)

    @classmethod
    def tag(cls, tag_name: str) -> "ReplayTask":
        return cls(kind=TaskKind.TAG, identifier=tag_name)

    @classmethod
    def delete(cls, branch_name: str) -> "ReplayTask":
        return cls(kind=TaskKind.DELETE, identifier=branch_name)

    def describe(self) -> str:
        """Short human-readable form of the task."""
        if self.kind == TaskKind.PATCH:
            return f"patch {self.identifier[:7]} {self.comment}"
        if self.kind == TaskKind.MERGE:
            return f"merge {self.source_identifier} into {self.identifier} ({self.comment})"
        return f"{self.kind.value} {self.identifier}"
