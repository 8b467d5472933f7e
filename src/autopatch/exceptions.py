"""Exceptions raised while building, planning and replaying history."""

from typing import List, Optional


class AutoPatchError(Exception):
    """Base exception for all autopatch errors"""
    pass


class ConfigError(AutoPatchError):
    """Raised when the command-line configuration is invalid"""
    pass


class GraphConstructionError(AutoPatchError):
    """Raised when the commit log cannot be turned into a branch graph"""
    pass


class PlanningError(AutoPatchError):
    """Raised when a commit range cannot be resolved or planned"""
    pass


class GitOperationError(AutoPatchError):
    """Raised when a git command fails"""
    def __init__(self, command: List[str], stderr: str, status: Optional[int] = None):
        self.command = command
        self.stderr = stderr
        self.status = status
        super().__init__(f"Command {' '.join(command)} failed with code {status}: {stderr}")

