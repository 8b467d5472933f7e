"""Planning of replay tasks for a range of commit numbers."""

from typing import List, Optional, Tuple

import structlog

from autopatch.exceptions import PlanningError
from autopatch.graph import CommitGraph
from autopatch.models import Branch, PatcherConfig, SelectionMode
from autopatch.replay.tasks import ReplayTask

logger = structlog.get_logger(__name__)


def resolve_commit_range(graph: CommitGraph, config: PatcherConfig) -> Tuple[int, int]:
    """Turn the selection of a run into an inclusive commit-number range.

    Args:
        graph: Reconstructed commit graph
        config: Run configuration with a selection mode

    Returns:
        (start, end) commit numbers

    Raises:
        PlanningError: If the selection does not resolve to commits
    """
    mode = config.selection_mode
    commit_range: Optional[Tuple[int, int]] = None

    if mode == SelectionMode.BRANCH:
        commit_range = graph.commit_numbers_for_branch(config.branch)
    elif mode == SelectionMode.COMMIT:
        number = graph.commit_number_for_hash(config.commit)
        if number is not None:
            if config.count and config.count > 0:
                commit_range = (number, number + config.count - 1)
            else:
                commit_range = (number, number)
    elif mode == SelectionMode.HASH_RANGE:
        commit_range = graph.commit_numbers_for_hash_range(config.start_commit, config.end_commit)
    else:
        raise PlanningError("No branch or commit selection given")

    if commit_range is None:
        raise PlanningError("Could not find commits for the given branch or commit(s)")
    return commit_range


class PatchPlanner:
    """Turns a commit range of a CommitGraph into an ordered list of replay tasks.

    Besides one patch per ordinary commit, the plan switches branches when
    the commits move to another branch, replays recorded merges, tags
    commits and deletes branches whose work has been merged away, so that
    the destination ends up with the same topology as the source.
    """

    def __init__(self, graph: CommitGraph) -> None:
        self.graph = graph

    def plan(self, start: int, end: int) -> List[ReplayTask]:
        """Plan the replay of commits `start` to `end`, inclusive.

        Raises:
            PlanningError: If the range is inverted or a commit is not in the graph
        """
        if start < 0 or start > end:
            raise PlanningError(f"Invalid commit range {start}..{end}")

        positions = self.graph.commit_positions()
        tasks: List[ReplayTask] = []
        active: Optional[Branch] = None

        for number in range(start, end + 1):
            if number not in positions:
                raise PlanningError(f"Can't find branch for commit number: {number}")
            branch, index = positions[number]
            commit = branch.commits[index]

            if active is None or branch.id != active.id:
                # Commit 0 lands on the default branch of the destination
                if number > 0:
                    source = self.graph.source_of(branch)
                    if source is not None and index == 0 and (active is None or source.id != active.id):
                        tasks.append(ReplayTask.checkout(source.name))
                    tasks.append(ReplayTask.checkout(branch.name))
                active = branch

            if not commit.is_merge:
                tasks.append(ReplayTask.patch(commit.hash, commit.message))

            if commit.tag:
                tasks.append(ReplayTask.tag(commit.tag))

            records = branch.merges.get(index)
            if number < end and records:
                for record in records:
                    target = self.graph.get(record.target_branch_id)
                    tasks.append(ReplayTask.merge(target.name, branch.name, record.comment))
                active = self.graph.get(records[-1].target_branch_id)
                tasks.append(ReplayTask.checkout(active.name))

                if branch.closed and not branch.has_merges_after(index):
                    tasks.append(ReplayTask.delete(branch.name))

        logger.info("replay_planned", start=start, end=end, tasks=len(tasks))
        return tasks
