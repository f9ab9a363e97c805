"""Ignore rules compiled from .gitignore, config excludes and built-in defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import FrozenSet, Iterable, List, Sequence

IGNORE_FILENAME = ".gitignore"

EXCLUDED_DIRS: FrozenSet[str] = frozenset(
    {
        "node_modules",
        "dist",
        "build",
        ".git",
        ".next",
        ".nuxt",
        ".svelte-kit",
        "coverage",
    }
)

EXCLUDED_FILES: FrozenSet[str] = frozenset(
    {
        ".DS_Store",
        "Thumbs.db",
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        "bun.lockb",
    }
)


@dataclass
class IgnoreRule:
    """Represents a single ignore pattern parsed from .gitignore or config."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash or self.pattern.startswith("**/"):
            return _match_segments(self.pattern.split("/"), rel_path.split("/"))

        # Slash-free patterns match the entry name at any depth.
        return fnmatchcase(rel_path.rsplit("/", 1)[-1], self.pattern)


def _match_segments(pattern_parts: Sequence[str], path_parts: Sequence[str]) -> bool:
    """Match path segments so ``*`` never crosses ``/`` and ``**`` spans whole segments."""
    if not pattern_parts:
        return not path_parts
    head, rest = pattern_parts[0], pattern_parts[1:]
    if head == "**":
        if not rest:
            # Trailing ``/**`` matches everything inside, not the directory itself.
            return bool(path_parts)
        return any(
            _match_segments(rest, path_parts[index:]) for index in range(len(path_parts) + 1)
        )
    if not path_parts or not fnmatchcase(path_parts[0], head):
        return False
    return _match_segments(rest, path_parts[1:])


def build_ignore_rule(line: str) -> IgnoreRule | None:
    """Parse one pattern line, returning ``None`` for blanks and comments."""
    line = line.rstrip()
    if not line or line.startswith("#"):
        return None

    negate = line.startswith("!")
    if negate:
        line = line[1:]
    elif line.startswith(("\\!", "\\#")):
        line = line[1:]

    directory_only = line.endswith("/")
    if directory_only:
        line = line.rstrip("/")

    anchored = line.startswith("/")
    if anchored:
        line = line.lstrip("/")

    if not line:
        return None

    return IgnoreRule(
        pattern=line,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in line.removeprefix("**/"),
    )


def parse_patterns(lines: Iterable[str]) -> List[IgnoreRule]:
    rules: List[IgnoreRule] = []
    for raw_line in lines:
        rule = build_ignore_rule(raw_line)
        if rule is not None:
            rules.append(rule)
    return rules


@dataclass
class IgnoreMatcher:
    """Predicate over slash-separated paths relative to the scan root."""

    rules: Sequence[IgnoreRule] = field(default_factory=list)
    excluded_dirs: FrozenSet[str] = EXCLUDED_DIRS
    excluded_files: FrozenSet[str] = EXCLUDED_FILES

    def prunes(self, dir_name: str) -> bool:
        """Return True for directory names that are never traversed."""
        return dir_name in self.excluded_dirs

    def excludes_file(self, file_name: str) -> bool:
        return file_name in self.excluded_files

    def ignores(self, rel_path: str, is_dir: bool = False) -> bool:
        """Return True when ``rel_path`` is excluded from the snapshot.

        A path below an excluded directory is excluded as well; negation
        cannot re-include it.
        """
        parts = [part for part in rel_path.replace("\\", "/").split("/") if part]
        if not parts:
            return False

        for index in range(1, len(parts)):
            if self.prunes(parts[index - 1]):
                return True
            if self._match_rules("/".join(parts[:index]), True):
                return True

        name = parts[-1]
        if is_dir and self.prunes(name):
            return True
        if not is_dir and self.excludes_file(name):
            return True
        return self._match_rules("/".join(parts), is_dir)

    def _match_rules(self, rel_path: str, is_dir: bool) -> bool:
        ignored = False
        for rule in self.rules:
            if rule.matches(rel_path, is_dir):
                ignored = not rule.negate
        return ignored


def compile_matcher(root: Path | str, extra_patterns: Sequence[str] = ()) -> IgnoreMatcher:
    """Compile the ignore rules that apply to the tree rooted at ``root``.

    A missing .gitignore is not an error; the matcher then falls back to the
    built-in excludes plus ``extra_patterns``.
    """
    rules: List[IgnoreRule] = []
    ignore_file = Path(root) / IGNORE_FILENAME
    if ignore_file.is_file():
        rules.extend(parse_patterns(ignore_file.read_text(encoding="utf-8").splitlines()))
    rules.extend(parse_patterns(extra_patterns))
    return IgnoreMatcher(rules=rules)


__all__ = [
    "EXCLUDED_DIRS",
    "EXCLUDED_FILES",
    "IGNORE_FILENAME",
    "IgnoreMatcher",
    "IgnoreRule",
    "build_ignore_rule",
    "compile_matcher",
    "parse_patterns",
]
