"""Execution of replay tasks against the destination repository."""

from pathlib import Path
from typing import Callable, Dict, List, Optional

import structlog
from pydantic import BaseModel, Field

from autopatch.exceptions import GitOperationError
from autopatch.extraction import DestinationRepository, GitExtractor
from autopatch.replay.tasks import ReplayTask, TaskKind

logger = structlog.get_logger(__name__)


class ExecutionResult(BaseModel):
    """Outcome of running a task list."""

    success: bool = Field(..., description="Whether every task succeeded")
    completed: int = Field(0, description="Number of tasks that succeeded")
    total: int = Field(0, description="Number of tasks in the list")
    failed_task: Optional[ReplayTask] = Field(None, description="The task that failed, if any")
    error: Optional[str] = Field(None, description="Diagnostic of the failure")


class TaskExecutor:
    """Runs replay tasks one at a time, in order, stopping at the first failure.

    Nothing is retried or rolled back: tasks that succeeded before a failure
    stay applied to the destination.
    """

    def __init__(
        self,
        source: GitExtractor,
        destination: DestinationRepository,
        patch_file: Path = Path("tmp.patch"),
    ) -> None:
        """Initialize the executor.

        Args:
            source: Repository the patches are generated from
            destination: Repository the tasks are applied to
            patch_file: File the current patch is written to while it is applied
        """
        self.source = source
        self.destination = destination
        self.patch_file = Path(patch_file)
        self._handlers: Dict[TaskKind, Callable[[ReplayTask], None]] = {
            TaskKind.CHECKOUT: self._checkout,
            TaskKind.PATCH: self._patch,
            TaskKind.MERGE: self._merge,
            TaskKind.DELETE: self._delete,
            TaskKind.TAG: self._tag,
        }

    def run(self, tasks: List[ReplayTask]) -> ExecutionResult:
        """Execute tasks in order.

        Returns:
            ExecutionResult; on failure it names the failing task
        """
        for completed, task in enumerate(tasks):
            try:
                self.apply(task)
            except (GitOperationError, OSError) as e:
                logger.error("task_failed", task=task.describe(), position=completed, error=str(e))
                return ExecutionResult(
                    success=False,
                    completed=completed,
                    total=len(tasks),
                    failed_task=task,
                    error=str(e),
                )
        return ExecutionResult(success=True, completed=len(tasks), total=len(tasks))

    def apply(self, task: ReplayTask) -> None:
        """Execute a single task.

        Raises:
            GitOperationError: If a git command fails
        """
        self._handlers[task.kind](task)

    def _checkout(self, task: ReplayTask) -> None:
        try:
            self.destination.checkout(task.identifier)
            logger.info("switched_branch", branch=task.identifier)
        except GitOperationError:
            self.destination.create_branch(task.identifier)
            logger.info("created_branch", branch=task.identifier)

    def _patch(self, task: ReplayTask) -> None:
        patch = self.source.format_patch(task.identifier)
        self.patch_file.write_text(patch, encoding="utf-8")
        try:
            self.destination.check_patch(self.patch_file)
            self.destination.apply_patch(self.patch_file)
        finally:
            self.patch_file.unlink(missing_ok=True)
        logger.info("patched_commit", commit=task.identifier[:7], message=task.comment)

    def _merge(self, task: ReplayTask) -> None:
        self.destination.checkout(task.identifier)
        self.destination.merge(task.source_identifier, task.comment)
        logger.info("merged_branch", source=task.source_identifier, target=task.identifier)

    def _delete(self, task: ReplayTask) -> None:
        self.destination.delete_branch(task.identifier)
        logger.info("deleted_branch", branch=task.identifier)

    def _tag(self, task: ReplayTask) -> None:
        self.destination.tag(task.identifier)
        logger.info("created_tag", tag=task.identifier)
