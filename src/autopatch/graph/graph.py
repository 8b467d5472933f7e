"""Arena of inferred branches with lookups and retroactive splitting."""

from typing import Any, Dict, Iterator, List, Optional, Tuple

import structlog

from autopatch.models import Branch, Commit

logger = structlog.get_logger(__name__)


class CommitGraph:
    """All branches reconstructed from one commit log.

    Branches live in an arena keyed by a stable integer id. Every reference
    between branches (fork origin, merge target) goes through that id, which
    keeps a split down to an id rewrite over the arena.
    """

    def __init__(self) -> None:
        self._branches: Dict[int, Branch] = {}
        self._order: List[int] = []
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Branch]:
        return iter(self.branches)

    @property
    def branches(self) -> List[Branch]:
        """Branches in registration order, or first-commit order once sorted."""
        return [self._branches[branch_id] for branch_id in self._order]

    def get(self, branch_id: int) -> Branch:
        return self._branches[branch_id]

    def source_of(self, branch: Branch) -> Optional[Branch]:
        """The branch `branch` forked from, if any."""
        if branch.source_branch_id is None:
            return None
        return self._branches[branch.source_branch_id]

    def add_branch(self, commit: Optional[Commit] = None, source_branch_id: Optional[int] = None) -> Branch:
        """Register a new branch, optionally starting with one commit."""
        branch = Branch(id=self._allocate_id(), source_branch_id=source_branch_id)
        if commit is not None:
            branch.append(commit)
        self._register(branch)
        return branch

    def _allocate_id(self) -> int:
        branch_id = self._next_id
        self._next_id += 1
        return branch_id

    def _register(self, branch: Branch) -> None:
        self._branches[branch.id] = branch
        self._order.append(branch.id)

    # ============================================================================
    # Lookups
    # ============================================================================

    def find_by_hash(self, commit_hash: str) -> Optional[Branch]:
        """Find the branch containing a commit hash anywhere in its history."""
        for branch in self.branches:
            if branch.contains_hash(commit_hash):
                return branch
        return None

    def find_all_by_last_hash(self, commit_hash: str) -> List[Branch]:
        """Find every branch whose last commit has the given hash."""
        return [
            branch for branch in self.branches
            if branch.last_commit is not None and branch.last_commit.hash == commit_hash
        ]

    def find_by_number(self, number: int) -> Optional[Branch]:
        for branch in self.branches:
            if branch.contains_number(number):
                return branch
        return None

    def find_by_name(self, name: str) -> Optional[Branch]:
        for branch in self.branches:
            if branch.name == name and branch.commits:
                return branch
        return None

    def commit_positions(self) -> Dict[int, Tuple[Branch, int]]:
        """Map every commit number to its branch and local index."""
        positions: Dict[int, Tuple[Branch, int]] = {}
        for branch in self.branches:
            for index, commit in enumerate(branch.commits):
                positions[commit.number] = (branch, index)
        return positions

    def commit_count(self) -> int:
        return sum(len(branch.commits) for branch in self.branches)

    def commit_numbers_for_branch(self, name: str) -> Optional[Tuple[int, int]]:
        """First and last commit number of the named branch, or None."""
        branch = self.find_by_name(name)
        if branch is None:
            return None
        return branch.first_commit_number, branch.last_commit_number

    def commit_number_for_hash(self, hash_prefix: str) -> Optional[int]:
        """Resolve a (possibly abbreviated) hash to a commit number.

        Returns:
            The commit number, or None when nothing or more than one commit matches
        """
        found: Optional[int] = None
        for branch in self.branches:
            for commit in branch.commits:
                if commit.hash.startswith(hash_prefix):
                    if found is not None:
                        return None
                    found = commit.number
        return found

    def commit_numbers_for_hash_range(self, start_hash: str, end_hash: str) -> Optional[Tuple[int, int]]:
        """Resolve two hashes to an ascending commit-number range, or None."""
        start = self.commit_number_for_hash(start_hash)
        end = self.commit_number_for_hash(end_hash)
        if start is None or end is None or start > end:
            return None
        return start, end

    # ============================================================================
    # Mutation
    # ============================================================================

    def split_after_hash(self, branch: Branch, commit_hash: str) -> Branch:
        """Split a branch after one of its commits.

        Every commit after `commit_hash` moves to a new branch forking from
        `branch`. Merge records anywhere in the graph that target `branch`
        from commits numbered above the new branch's first commit now target
        the new branch, and branches whose fork commit moved are repointed
        to it.

        Args:
            branch: Branch to split
            commit_hash: Hash of the last commit that stays on `branch`

        Returns:
            The new, registered branch

        Raises:
            ValueError: If the hash is not part of the branch
        """
        index = branch.index_of_hash(commit_hash)
        if index is None:
            raise ValueError(f"Commit {commit_hash} is not part of branch {branch.id}")

        split = branch.split_after(index, self._allocate_id())
        self._register(split)

        moved = 0
        if split.commits:
            for other in self.branches:
                moved += other.retarget_merges(branch.id, split.id, split.first_commit_number)
                if other.source_branch_id == branch.id and other.fork_hash and split.contains_hash(other.fork_hash):
                    other.source_branch_id = split.id

        logger.debug(
            "branch_split",
            branch_id=branch.id,
            split_id=split.id,
            after=commit_hash[:7],
            kept=len(branch.commits),
            moved_commits=len(split.commits),
            moved_merges=moved,
        )
        return split

    def rejoin(self, split: Branch) -> Branch:
        """Reverse `split_after_hash`, folding a split-off branch back into its origin.

        Every reference to `split` in the graph, merge target or fork origin,
        goes back to the origin branch. An unnamed origin takes the name of
        `split`.

        Returns:
            The origin branch

        Raises:
            ValueError: If `split` does not directly continue its origin
        """
        if split.source_branch_id is None:
            raise ValueError(f"Branch {split.id} has no origin to rejoin")
        origin = self._branches[split.source_branch_id]
        origin.absorb(split)
        if not origin.name:
            origin.name = split.name

        del self._branches[split.id]
        self._order.remove(split.id)
        for other in self.branches:
            other.retarget_merges(split.id, origin.id, above_number=-1)
            if other.source_branch_id == split.id:
                other.source_branch_id = origin.id

        logger.debug("branch_rejoined", branch_id=origin.id, split_id=split.id)
        return origin

    def name_unnamed_branches(self) -> List[Branch]:
        """Give every unnamed branch a placeholder name derived from its first commit."""
        renamed = []
        for branch in self.branches:
            if not branch.name:
                branch.name = f"unnamed-{branch.first_commit_number}"
                renamed.append(branch)
        return renamed

    def sort(self) -> None:
        """Order branches by their first commit number."""
        self._order.sort(key=lambda branch_id: self._branches[branch_id].first_commit_number)

    def describe(self) -> List[Dict[str, Any]]:
        """Debug view of every branch."""
        result = []
        for branch in self.branches:
            source = self.source_of(branch)
            result.append({
                "name": branch.name,
                "source_branch": source.name if source else "none",
                "commits": [
                    f"{commit.message} -> {commit.tag}" if commit.tag else commit.message
                    for commit in branch.commits
                ],
                "merges": {
                    index: ", ".join(
                        f"{self._branches[record.target_branch_id].name} ({record.comment})"
                        for record in records
                    )
                    for index, records in sorted(branch.merges.items())
                },
                "closed": branch.closed,
            })
        return result
