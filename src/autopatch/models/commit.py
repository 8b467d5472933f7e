"""Data model for a single commit of the flattened log."""

from typing import List, Optional

from pydantic import BaseModel, Field

# Format passed to `git log --pretty=format:` so that every line parses with
# Commit.from_log_line: "<hash> (<parent> <parent>...): <subject>"
LOG_FORMAT = "%H (%P): %s"


class Commit(BaseModel):
    """One commit of the linearized log.

    Everything except the tag is fixed at construction time; the tag is
    attached later, once the tagged hashes of the repository are known.
    """

    number: int = Field(..., frozen=True, description="Zero-based position in the log")
    hash: str = Field(..., frozen=True, description="Full commit SHA hash")
    parent_hashes: List[str] = Field(
        default_factory=list, frozen=True, description="Parent commit hashes, first parent first"
    )
    message: str = Field("", frozen=True, description="Commit subject line")
    tag: Optional[str] = Field(None, description="Tag pointing at this commit, if any")

    @property
    def is_merge(self) -> bool:
        """Whether this commit has more than one parent."""
        return len(self.parent_hashes) > 1

    @property
    def is_root(self) -> bool:
        return not self.parent_hashes

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @classmethod
    def from_log_line(cls, number: int, line: str) -> "Commit":
        """Parse a line written with LOG_FORMAT.

        Args:
            number: Position of the line in the log
            line: Raw log line

        Returns:
            Commit object
        """
        hashes, separator, message = line.partition(": ")
        if not separator:
            hashes = line.rstrip(":")

        parent_hashes: List[str] = []
        opener = hashes.find(" (")
        closer = hashes.find(")")
        if opener >= 0 and closer >= 0:
            commit_hash = hashes[:opener]
            parent_hashes = hashes[opener + 2:closer].split()
        else:
            commit_hash = hashes

        return cls(
            number=number,
            hash=commit_hash.strip(),
            parent_hashes=parent_hashes,
            message=message,
        )

    def merged_branch_name(self) -> Optional[str]:
        """Extract the branch name from a "Merge branch 'name'" style message.

        Returns:
            The text between the first and the last single quote, or None
        """
        first = self.message.find("'")
        last = self.message.rfind("'")
        if first < 0 or last <= first + 1:
            return None
        return self.message[first + 1:last]
