"""Reconstruction of branches and merges from a linearized commit log.

A log lists commits oldest first with their parent hashes, but says nothing
about which branch a commit was made on. Branches are inferred while the log
is consumed and corrected retroactively: when a merge reveals that commits
attributed to one branch were really made on a branch that forked off it,
the branch is split and the merges already recorded are moved along.
"""

from typing import Dict, Iterable, List, Optional, Tuple

import structlog

from autopatch.exceptions import GraphConstructionError
from autopatch.graph.graph import CommitGraph
from autopatch.models import Branch, Commit

logger = structlog.get_logger(__name__)


class CommitGraphBuilder:
    """Builds a CommitGraph from commits in log order.

    Example:
        >>> builder = CommitGraphBuilder()
        >>> graph = builder.build(commits, branch_tips={"master": tip_hash}, tags=[])
    """

    def __init__(self) -> None:
        self.graph = CommitGraph()
        self._last_number: Optional[int] = None

    def build(
        self,
        commits: Iterable[Commit],
        branch_tips: Optional[Dict[str, str]] = None,
        tags: Optional[Iterable[Tuple[str, str]]] = None,
    ) -> CommitGraph:
        """Run every pass and return the finished graph.

        Args:
            commits: Commits in strictly increasing number order
            branch_tips: Live branch name -> tip hash
            tags: (hash, tag name) pairs

        Returns:
            Graph with named, tagged branches sorted by first commit number

        Raises:
            GraphConstructionError: If any pass finds an inconsistency
        """
        for commit in commits:
            self.add_commit(commit)
        self.reconcile_branch_tips(branch_tips or {})
        self.apply_tags(tags or [])
        return self.finalize()

    def add_commit(self, commit: Commit) -> None:
        """Place one commit in the graph."""
        if self._last_number is not None and commit.number <= self._last_number:
            raise GraphConstructionError(
                f"Commit {commit.number} ({commit.short_hash}) arrived after commit {self._last_number}"
            )
        self._last_number = commit.number

        if commit.is_root:
            self.graph.add_branch(commit)
        elif commit.is_merge:
            self._add_merge_commit(commit)
        else:
            self._add_child_commit(commit)

    def _add_child_commit(self, commit: Commit) -> None:
        parent_hash = commit.parent_hashes[0]
        matches = self.graph.find_all_by_last_hash(parent_hash)
        if len(matches) > 1:
            raise GraphConstructionError(
                f"Parent {parent_hash} of commit {commit.number} is the tip of {len(matches)} branches"
            )
        if matches:
            matches[0].append(commit)
            return

        # The parent already has a child on its branch, so this commit forks
        origin = self.graph.find_by_hash(parent_hash)
        if origin is None:
            raise GraphConstructionError(
                f"Parent {parent_hash} of commit {commit.number} ({commit.short_hash}) not found"
            )
        branch = self.graph.add_branch(commit, source_branch_id=origin.id)
        logger.debug("branch_forked", branch_id=branch.id, source_branch_id=origin.id, commit=commit.number)

    def _add_merge_commit(self, commit: Commit) -> None:
        destination_hash = commit.parent_hashes[0]
        destination = self.graph.find_by_hash(destination_hash)
        if destination is None:
            raise GraphConstructionError(
                f"Destination {destination_hash} of merge commit {commit.number} not found"
            )

        for source_hash in commit.parent_hashes[1:]:
            source = self.graph.find_by_hash(source_hash)
            if source is None:
                raise GraphConstructionError(
                    f"Source {source_hash} of merge commit {commit.number} not found"
                )

            if source.id == destination.id:
                # The destination carried on past the fork point: everything
                # after the first parent really belongs to the merged branch
                if source.index_of_hash(source_hash) <= source.index_of_hash(destination_hash):
                    raise GraphConstructionError(
                        f"Merge commit {commit.number} merges {source_hash} which precedes its destination"
                    )
                source = self.graph.split_after_hash(destination, destination_hash)
            elif self._forked_before_origin_moved_on(destination, source, source_hash):
                destination, source = self._reassign_fork(destination, source)

            branch_name = commit.merged_branch_name()
            if branch_name and not source.name:
                source.name = branch_name
            source.mark_merged(destination.id, commit.message)

        destination.append(commit, reopen=False)

    def _forked_before_origin_moved_on(self, destination: Branch, source: Branch, source_hash: str) -> bool:
        """Whether the origin `source` moved on past the fork before `destination` started.

        The log alone cannot tell which child of the fork commit continued the
        origin, so the first child logged got appended to it. A merge into
        `destination` settles it: the first parent continues the origin.
        """
        if destination.source_branch_id != source.id:
            return False
        fork_index = source.index_of_hash(destination.fork_hash)
        if fork_index is None or source.index_of_hash(source_hash) <= fork_index:
            return False
        return source.commits[fork_index + 1].number < destination.first_commit_number

    def _reassign_fork(self, destination: Branch, source: Branch) -> Tuple[Branch, Branch]:
        """Split the origin after the fork point and fold `destination` back into it.

        Returns:
            (new destination, new source)
        """
        merged = self.graph.split_after_hash(source, destination.fork_hash)
        trunk = self.graph.rejoin(destination)
        logger.debug("fork_reassigned", trunk_id=trunk.id, merged_id=merged.id, fork=merged.fork_hash[:7])
        return trunk, merged

    def reconcile_branch_tips(self, branch_tips: Dict[str, str]) -> None:
        """Name branches after the live branches whose tips they end with.

        A live tip found in the middle of an inferred branch means the
        commits after it were made elsewhere; the branch is split at the tip,
        the name goes to the earlier part and any name the branch already had
        moves to the later part.

        Raises:
            GraphConstructionError: If a tip is ambiguous or not in the graph
        """
        for name, tip_hash in branch_tips.items():
            matches = self.graph.find_all_by_last_hash(tip_hash)
            if len(matches) > 1:
                raise GraphConstructionError(f"Tip {tip_hash} of branch {name} ends {len(matches)} branches")
            if matches:
                matches[0].name = name
                continue

            branch = self.graph.find_by_hash(tip_hash)
            if branch is None:
                raise GraphConstructionError(f"Tip {tip_hash} of branch {name} not found in the log")
            split = self.graph.split_after_hash(branch, tip_hash)
            split.name = branch.name
            branch.name = name
            logger.info("branch_tip_split", branch=name, tip=tip_hash[:7])

    def apply_tags(self, tags: Iterable[Tuple[str, str]]) -> None:
        """Attach tag names to the commits they point at.

        Tags on hashes outside the log are skipped. When several tags point
        at one commit the last one wins.

        Raises:
            GraphConstructionError: If a tagged hash matches more than one commit
        """
        for tag_hash, tag_name in tags:
            found: List[Commit] = [
                commit
                for branch in self.graph.branches
                for commit in branch.commits
                if commit.hash == tag_hash
            ]
            if len(found) > 1:
                raise GraphConstructionError(f"Tag {tag_name} matches {len(found)} commits")
            if not found:
                logger.warning("tag_not_in_log", tag=tag_name, hash=tag_hash[:7])
                continue
            found[0].tag = tag_name

    def finalize(self) -> CommitGraph:
        """Name leftover branches and sort the graph."""
        renamed: List[Branch] = self.graph.name_unnamed_branches()
        for branch in renamed:
            logger.warning("branch_name_unknown", placeholder=branch.name, commits=len(branch.commits))
        self.graph.sort()
        logger.info(
            "graph_built",
            branches=len(self.graph),
            commits=self.graph.commit_count(),
        )
        return self.graph
