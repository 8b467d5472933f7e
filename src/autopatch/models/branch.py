"""Data models for inferred branches and the merges recorded on them."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from autopatch.models.commit import Commit


class MergeRecord(BaseModel):
    """The history of a branch, up to a local position, was merged into another branch."""

    model_config = ConfigDict(frozen=True)

    target_branch_id: int = Field(..., description="Arena id of the branch merged into")
    comment: str = Field("", description="Message of the merge commit")


class Branch(BaseModel):
    """An inferred branch: an ordered run of commits plus the merges made from it.

    Branches refer to each other through their arena ids (see CommitGraph),
    never through object references, so that splitting a branch only has to
    rewrite ids.
    """

    id: int = Field(..., description="Stable arena id")
    name: str = Field("", description="Branch name, empty until resolved")
    source_branch_id: Optional[int] = Field(None, description="Arena id of the branch this one forked from")
    closed: bool = Field(False, description="Whether the branch was merged away and not continued")
    commits: List[Commit] = Field(default_factory=list, description="Commits in ascending number order")
    merges: Dict[int, List[MergeRecord]] = Field(
        default_factory=dict, description="Merge records keyed by local commit index"
    )

    @property
    def last_commit(self) -> Optional[Commit]:
        return self.commits[-1] if self.commits else None

    @property
    def fork_hash(self) -> Optional[str]:
        """First parent of the first commit: the commit this branch grew from."""
        if not self.commits or not self.commits[0].parent_hashes:
            return None
        return self.commits[0].parent_hashes[0]

    @property
    def first_commit_number(self) -> int:
        """Number of the first commit, 0 for an empty branch."""
        return self.commits[0].number if self.commits else 0

    @property
    def last_commit_number(self) -> int:
        return self.commits[-1].number if self.commits else 0

    def append(self, commit: Commit, reopen: bool = True) -> None:
        """Append a commit to the end of the branch.

        Args:
            commit: Commit to append, numbered above the current last commit
            reopen: Clear the closed flag (a merged branch got continued)

        Raises:
            ValueError: If the commit number does not increase
        """
        if self.commits and commit.number <= self.commits[-1].number:
            raise ValueError(
                f"Commit {commit.number} cannot follow commit {self.commits[-1].number} on a branch"
            )
        self.commits.append(commit)
        if reopen:
            self.closed = False

    def index_of_hash(self, commit_hash: str) -> Optional[int]:
        for index, commit in enumerate(self.commits):
            if commit.hash == commit_hash:
                return index
        return None

    def index_of_number(self, number: int) -> Optional[int]:
        for index, commit in enumerate(self.commits):
            if commit.number == number:
                return index
        return None

    def contains_hash(self, commit_hash: str) -> bool:
        return self.index_of_hash(commit_hash) is not None

    def contains_number(self, number: int) -> bool:
        return self.index_of_number(number) is not None

    def mark_merged(self, target_branch_id: int, comment: str) -> None:
        """Record a merge of this branch, as it is now, into another branch and close it."""
        index = len(self.commits) - 1
        self.merges.setdefault(index, []).append(
            MergeRecord(target_branch_id=target_branch_id, comment=comment)
        )
        self.closed = True

    def has_merges_after(self, index: int) -> bool:
        """Whether any merge record sits at a local index strictly after `index`."""
        return any(key > index for key in self.merges)

    def split_after(self, index: int, new_id: int) -> "Branch":
        """Move every commit after `index`, with its merge records, to a new branch.

        The new branch forks from this one and takes over the closed flag.
        Merge records keep pointing at the commit they were made from, so
        their keys are shifted.

        Args:
            index: Local index of the last commit that stays on this branch
            new_id: Arena id for the split-off branch

        Returns:
            The split-off branch
        """
        cut = index + 1
        split = Branch(
            id=new_id, source_branch_id=self.id, commits=self.commits[cut:], closed=self.closed
        )
        del self.commits[cut:]
        self.closed = False

        for key in sorted(k for k in self.merges if k >= cut):
            split.merges[key - cut] = self.merges.pop(key)
        return split

    def retarget_merges(self, from_id: int, to_id: int, above_number: int) -> int:
        """Point merge records made after a commit number at a different branch.

        Args:
            from_id: Arena id currently referenced
            to_id: Arena id to reference instead
            above_number: Only records on commits numbered strictly above this move

        Returns:
            Number of merge records rewritten
        """
        moved = 0
        for key, records in self.merges.items():
            if self.commits[key].number <= above_number:
                continue
            for position, record in enumerate(records):
                if record.target_branch_id == from_id:
                    records[position] = record.model_copy(update={"target_branch_id": to_id})
                    moved += 1
        return moved

    def absorb(self, split: "Branch") -> None:
        """Undo `split_after`: take back the commits and merge records of a split-off branch."""
        if split.source_branch_id != self.id:
            raise ValueError(f"Branch {split.id} did not fork from branch {self.id}")
        if self.commits and split.commits and split.commits[0].number <= self.commits[-1].number:
            raise ValueError(f"Branch {split.id} does not continue branch {self.id}")

        offset = len(self.commits)
        self.commits.extend(split.commits)
        for key, records in split.merges.items():
            self.merges.setdefault(key + offset, []).extend(records)
        self.closed = split.closed
