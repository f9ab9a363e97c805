"""Git context capture and the reversible speculative-merge workflow.

The working tree is mutated only between :meth:`GitContextProvider.begin_speculative_merge`
and :meth:`GitContextProvider.end_speculative_merge`; :meth:`GitContextProvider.speculative_merge`
wraps both, plus stash restoration, so every exit path runs the same unwind.
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Optional

from ..config import DEFAULT_TRUNK_BRANCH
from ..logging import get_logger
from ..models import BranchStatus, GitContext, RepositoryCheckpoint
from .repository import GitCommandError, GitRepository

STASH_MESSAGE = "projsnap: autostash before speculative merge"
_SHORT_HASH_LENGTH = 8


class WorkflowState(Enum):
    IDLE = "idle"
    BRANCH_CAPTURED = "branch-captured"
    STASHED = "stashed"
    MERGE_ATTEMPTED = "merge-attempted"
    MERGE_SUCCEEDED = "merge-succeeded"
    MERGE_ABORTED = "merge-aborted"
    UNWOUND = "unwound"


# States in which HEAD is back on (or never left) the original branch.
_RESTORABLE_STATES = frozenset(
    {
        WorkflowState.BRANCH_CAPTURED,
        WorkflowState.STASHED,
        WorkflowState.MERGE_ABORTED,
        WorkflowState.UNWOUND,
    }
)


class GitWorkflowError(RuntimeError):
    """Raised when the speculative merge workflow cannot proceed."""

    def __init__(self, message: str, checkpoint: Optional[RepositoryCheckpoint] = None) -> None:
        super().__init__(message)
        self.checkpoint = checkpoint


class MergeConflictError(GitWorkflowError):
    """Raised when the feature branch does not merge cleanly into trunk."""


class GitContextProvider:
    """Owns every branch checkout and stash operation of a git-aware snapshot."""

    def __init__(
        self,
        repository: GitRepository | str | Path,
        *,
        target_branch: str = DEFAULT_TRUNK_BRANCH,
        runner: Callable[..., str] | None = None,
    ) -> None:
        if isinstance(repository, GitRepository):
            self.repo = repository
        else:
            self.repo = GitRepository(repository, runner=runner)
        self.target_branch = target_branch
        self.logger = get_logger("git")
        self._state = WorkflowState.IDLE

    @property
    def state(self) -> WorkflowState:
        return self._state

    def capture_context(self) -> Optional[GitContext]:
        """Read branch and commit facts without touching the working tree.

        Returns ``None`` when any query fails so callers can snapshot without
        git information.
        """
        try:
            source = self.repo.current_branch()
            base = self.repo.merge_base(source, self.target_branch)
            ahead = self.repo.count_commits(base, source)
            behind = self.repo.count_commits(base, self.target_branch)
            last_commit = self.repo.last_commit(source)
        except GitCommandError as exc:
            self.logger.warning("Could not get complete git info: %s", exc)
            return None

        return GitContext(
            source_branch=source,
            target_branch=self.target_branch,
            branch_status=BranchStatus(
                ahead=ahead,
                behind=behind,
                merge_base=base[:_SHORT_HASH_LENGTH],
            ),
            last_commit=last_commit,
        )

    def begin_speculative_merge(self) -> RepositoryCheckpoint:
        """Stash local changes, check out trunk and merge the current branch without committing."""
        if self._state is not WorkflowState.IDLE:
            raise GitWorkflowError(
                f"A speculative merge is already in progress for {self.repo.path} ({self._state.value})"
            )

        try:
            original = self.repo.current_branch()
        except GitCommandError as exc:
            raise GitWorkflowError(f"Could not determine the current branch: {exc}") from exc
        if original == "HEAD":
            raise GitWorkflowError("HEAD is detached; check out a branch before a git-aware snapshot")
        self._state = WorkflowState.BRANCH_CAPTURED
        self.logger.debug("Captured original branch %s", original)

        try:
            had_stash = self._stash_if_dirty()
        except GitCommandError as exc:
            self._state = WorkflowState.IDLE
            raise GitWorkflowError(f"Could not stash local changes: {exc}") from exc
        checkpoint = RepositoryCheckpoint(original_branch=original, had_stash=had_stash)
        if had_stash:
            self._state = WorkflowState.STASHED

        try:
            self.repo.checkout(self.target_branch)
        except GitCommandError as exc:
            raise GitWorkflowError(
                f"Could not check out {self.target_branch}: {exc}", checkpoint
            ) from exc

        self._state = WorkflowState.MERGE_ATTEMPTED
        self.logger.debug("Merging %s into %s without committing", original, self.target_branch)
        try:
            self.repo.merge_no_commit(original)
        except GitCommandError as exc:
            self._abort_merge(checkpoint)
            raise MergeConflictError(
                f"Merging {original} into {self.target_branch} failed; resolve conflicts first",
                checkpoint,
            ) from exc

        self._state = WorkflowState.MERGE_SUCCEEDED
        return checkpoint

    def end_speculative_merge(self, checkpoint: RepositoryCheckpoint) -> None:
        """Discard uncommitted merge state and return to the original branch."""
        try:
            self.repo.reset_merge()
            self.repo.checkout(checkpoint.original_branch)
        except GitCommandError as exc:
            raise GitWorkflowError(
                f"Could not restore branch {checkpoint.original_branch}: {exc}", checkpoint
            ) from exc
        self._state = WorkflowState.UNWOUND
        self.logger.debug("Returned to %s", checkpoint.original_branch)

    def restore_stash(self, checkpoint: RepositoryCheckpoint) -> None:
        """Pop the autostash when one was created. Failures only warn."""
        try:
            if not checkpoint.had_stash:
                return
            if self._state not in _RESTORABLE_STATES:
                self.logger.warning(
                    "Repository was not returned to %s; stashed changes were left in "
                    "`git stash list` for manual recovery",
                    checkpoint.original_branch,
                )
                return
            try:
                self.repo.stash_pop()
            except GitCommandError as exc:
                self.logger.warning(
                    "Could not pop stashed changes (%s); recover them with `git stash pop`", exc
                )
            else:
                self.logger.debug("Restored stashed changes")
        finally:
            self._state = WorkflowState.IDLE

    @contextmanager
    def speculative_merge(self) -> Iterator[RepositoryCheckpoint]:
        """Yield while the working tree holds the merged result, then unwind."""
        try:
            checkpoint = self.begin_speculative_merge()
        except GitWorkflowError as exc:
            if exc.checkpoint is not None:
                self.restore_stash(exc.checkpoint)
            raise

        try:
            try:
                yield checkpoint
            finally:
                self.end_speculative_merge(checkpoint)
        finally:
            self.restore_stash(checkpoint)

    # ------------------------------------------------------------------
    # Internals

    def _stash_if_dirty(self) -> bool:
        if not self.repo.is_dirty():
            return False
        before = self.repo.stash_entries()
        self.repo.stash_save(STASH_MESSAGE)
        try:
            after = self.repo.stash_entries()
        except GitCommandError as exc:
            self.logger.debug("Could not confirm stash entry (%s); assuming it exists", exc)
            return True
        return after[:1] != before[:1]

    def _abort_merge(self, checkpoint: RepositoryCheckpoint) -> None:
        try:
            try:
                self.repo.merge_abort()
            except GitCommandError as exc:
                self.logger.debug("merge --abort failed (%s); resetting merge state", exc)
                self.repo.reset_merge()
            self.repo.checkout(checkpoint.original_branch)
        except GitCommandError as exc:
            raise GitWorkflowError(
                f"Merge failed and branch {checkpoint.original_branch} could not be restored: {exc}",
                checkpoint,
            ) from exc
        self._state = WorkflowState.MERGE_ABORTED
        self.logger.debug("Aborted merge and returned to %s", checkpoint.original_branch)


__all__ = [
    "GitContextProvider",
    "GitWorkflowError",
    "MergeConflictError",
    "STASH_MESSAGE",
    "WorkflowState",
]
