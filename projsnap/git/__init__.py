"""Git integration for git-aware snapshots."""

from .context import GitContextProvider, GitWorkflowError, MergeConflictError, WorkflowState
from .repository import GitCommandError, GitRepository

__all__ = [
    "GitCommandError",
    "GitContextProvider",
    "GitRepository",
    "GitWorkflowError",
    "MergeConflictError",
    "WorkflowState",
]
