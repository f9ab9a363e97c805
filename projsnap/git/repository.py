"""Thin wrapper over the git operations the snapshot workflow needs."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Iterable, List, Sequence

from ..models import LastCommit

_FIELD_SEPARATOR = "\x1f"


class GitCommandError(RuntimeError):
    """Raised when a git subprocess fails or git is unavailable."""

    def __init__(self, args: Sequence[str], returncode: int | None, stderr: str = "") -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"`{' '.join(self.args_list)}` failed (exit {returncode}){detail}")


class GitRepository:
    """Executes git commands against one working tree."""

    def __init__(self, path: str | Path, runner: Callable[..., str] | None = None) -> None:
        self.path = Path(path)
        self._runner = runner or self._default_runner

    # ------------------------------------------------------------------
    # Read-only queries

    def current_branch(self) -> str:
        return self._run(["git", "rev-parse", "--abbrev-ref", "HEAD"]).strip()

    def is_dirty(self) -> bool:
        status = self._run(["git", "status", "--porcelain"])
        return bool(status.strip())

    def stash_entries(self) -> List[str]:
        output = self._run(["git", "stash", "list", "--format=%H"])
        return [line.strip() for line in output.splitlines() if line.strip()]

    def merge_base(self, first: str, second: str) -> str:
        return self._run(["git", "merge-base", first, second]).strip()

    def count_commits(self, since: str, until: str) -> int:
        output = self._run(["git", "rev-list", "--count", f"{since}..{until}", "--"]).strip()
        try:
            return int(output)
        except ValueError as exc:
            raise GitCommandError(["git", "rev-list", "--count"], 0, f"unexpected output {output!r}") from exc

    def last_commit(self, ref: str = "HEAD") -> LastCommit:
        fmt = _FIELD_SEPARATOR.join(("%H", "%s", "%an", "%aI"))
        output = self._run(["git", "log", "-1", f"--format={fmt}", ref, "--"]).strip("\n")
        fields = output.split(_FIELD_SEPARATOR)
        if len(fields) != 4:
            raise GitCommandError(["git", "log", "-1", ref], 0, f"unexpected output {output!r}")
        commit_hash, subject, author, date = fields
        return LastCommit(hash=commit_hash, subject=subject, author=author, date=date)

    # ------------------------------------------------------------------
    # Mutations

    def stash_save(self, message: str) -> None:
        self._run(["git", "stash", "push", "--include-untracked", "-m", message])

    def stash_pop(self) -> None:
        self._run(["git", "stash", "pop"])

    def checkout(self, branch: str) -> None:
        self._run(["git", "checkout", branch])

    def merge_no_commit(self, branch: str) -> None:
        self._run(["git", "merge", "--no-commit", "--no-ff", branch])

    def merge_abort(self) -> None:
        self._run(["git", "merge", "--abort"])

    def reset_merge(self) -> None:
        self._run(["git", "reset", "--merge"])

    # ------------------------------------------------------------------
    # Helpers

    def _run(self, args: Iterable[str]) -> str:
        args = list(args)
        try:
            return self._runner(args, cwd=self.path)
        except subprocess.CalledProcessError as exc:
            raise GitCommandError(args, exc.returncode, exc.stderr or "") from exc
        except OSError as exc:
            raise GitCommandError(args, None, str(exc)) from exc

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=True,
        )
        return completed.stdout


__all__ = ["GitCommandError", "GitRepository"]
