"""Planning and execution of history replays."""

from autopatch.replay.executor import ExecutionResult, TaskExecutor
from autopatch.replay.planner import PatchPlanner, resolve_commit_range
from autopatch.replay.tasks import ReplayTask, TaskKind

__all__ = [
    "ReplayTask",
    "TaskKind",
    "PatchPlanner",
    "resolve_commit_range",
    "TaskExecutor",
    "ExecutionResult",
]
