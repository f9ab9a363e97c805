"""Directory traversal producing classified file records."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, List

from .ignore import IgnoreMatcher, compile_matcher
from .logging import get_logger
from .models import FileRecord

UNKNOWN_TYPE = "unknown"

_TYPE_BY_SUFFIX = {
    ".js": "javascript",
    ".jsx": "react",
    ".ts": "typescript",
    ".tsx": "react-typescript",
    ".vue": "vue",
    ".svelte": "svelte",
    ".css": "stylesheet",
    ".scss": "stylesheet",
    ".less": "stylesheet",
    ".json": "json",
    ".md": "markdown",
    ".mdx": "markdown",
}

INCLUDED_EXTENSIONS = frozenset(_TYPE_BY_SUFFIX)

_logger = get_logger("scanner")


def classify_extension(suffix: str) -> str:
    """Return the classification tag for a file extension such as ``.tsx``."""
    file_type = _TYPE_BY_SUFFIX.get(suffix)
    if file_type is None:
        _logger.error("No classification for allowed extension %r", suffix)
        return UNKNOWN_TYPE
    return file_type


def _iter_files(root: Path, matcher: IgnoreMatcher) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""

        kept_dirs = []
        for name in sorted(dirnames):
            if matcher.prunes(name):
                continue
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if matcher.ignores(rel_path, is_dir=True):
                continue
            kept_dirs.append(name)
        dirnames[:] = kept_dirs

        for filename in sorted(filenames):
            if matcher.excludes_file(filename):
                continue
            if Path(filename).suffix not in INCLUDED_EXTENSIONS:
                continue
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if matcher.ignores(rel_path):
                continue
            yield current_dir / filename


class FileScanner:
    """Walks a project tree and loads every snapshot-eligible file."""

    def scan(self, root: str | Path, matcher: IgnoreMatcher | None = None) -> List[FileRecord]:
        """Return file records for ``root`` sorted by relative path."""
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")

        if matcher is None:
            matcher = compile_matcher(root_path)

        records: List[FileRecord] = []
        for path in _iter_files(root_path, matcher):
            rel_path = path.relative_to(root_path).as_posix()
            # Decode raw bytes so line endings survive verbatim.
            raw = path.read_bytes()
            records.append(
                FileRecord(
                    path=rel_path,
                    content=raw.decode("utf-8"),
                    type=classify_extension(path.suffix),
                    size=len(raw),
                )
            )

        records.sort(key=lambda record: record.path)
        _logger.debug("Scanned %d files under %s", len(records), root_path)
        return records


__all__ = ["FileScanner", "INCLUDED_EXTENSIONS", "UNKNOWN_TYPE", "classify_extension"]
