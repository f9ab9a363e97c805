"""Scripted stand-in for the git subprocess runner."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Dict, List, Sequence, Tuple


class FakeGit:
    """Records git invocations and answers them from a response table.

    ``responses`` maps a command prefix (tuple of arguments after ``git``) to
    its stdout; ``failures`` lists prefixes that exit non-zero.
    """

    def __init__(
        self,
        responses: Dict[Tuple[str, ...], str] | None = None,
        failures: Sequence[Tuple[str, ...]] = (),
    ) -> None:
        self.calls: List[List[str]] = []
        self.cwds: List[Path] = []
        self.responses: Dict[Tuple[str, ...], str] = {
            ("rev-parse", "--abbrev-ref", "HEAD"): "feature/x\n",
            ("status", "--porcelain"): "",
            ("stash", "list"): "",
        }
        self.responses.update(responses or {})
        self.failures = list(failures)
        self.stash_after_push = "aaaa\n"

    def __call__(self, args, *, cwd):  # type: ignore[no-untyped-def]
        argv = list(args)
        self.calls.append(argv)
        self.cwds.append(Path(cwd))
        command = tuple(argv[1:])
        for prefix in self.failures:
            if command[: len(prefix)] == prefix:
                raise subprocess.CalledProcessError(1, argv, output="", stderr=f"{' '.join(prefix)} failed")
        if command[:2] == ("stash", "push"):
            self.responses[("stash", "list")] = self.stash_after_push
            return ""
        best = ""
        best_len = -1
        for prefix, output in self.responses.items():
            if command[: len(prefix)] == prefix and len(prefix) > best_len:
                best, best_len = output, len(prefix)
        return best

    def commands(self) -> List[str]:
        """Return the git subcommand sequence as space-joined strings."""
        return [" ".join(call[1:]) for call in self.calls]

    def mutations(self) -> List[str]:
        readonly = ("rev-parse", "status", "stash list", "merge-base", "rev-list", "log")
        return [command for command in self.commands() if not command.startswith(readonly)]


__all__ = ["FakeGit"]
