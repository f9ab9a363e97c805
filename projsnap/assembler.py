"""Assembly and serialization of snapshot manifests."""

from __future__ import annotations

import json
from collections import Counter
from datetime import UTC, datetime
from pathlib import Path
from typing import Mapping, Optional, Sequence

from . import __version__
from .analyzers.dependencies import DEPENDENCY_MANIFEST
from .models import FileRecord, GitContext, ProjectStructure, SnapshotManifest, SnapshotStats


def compute_stats(files: Sequence[FileRecord]) -> SnapshotStats:
    """Aggregate counts and sizes in a single pass."""
    by_type: Counter[str] = Counter()
    total_size = 0
    for record in files:
        by_type[record.type] += 1
        total_size += record.size
    return SnapshotStats(
        total_files=len(files),
        files_by_type=dict(sorted(by_type.items())),
        total_size=total_size,
    )


class SnapshotAssembler:
    """Combines scan output, structure facts and git context into a manifest."""

    def __init__(self, generator_version: str = __version__) -> None:
        self.generator_version = generator_version

    def assemble(
        self,
        *,
        name: str,
        version_tag: str,
        structure: ProjectStructure,
        files: Sequence[FileRecord],
        dependencies: Optional[Mapping[str, str]] = None,
        dev_dependencies: Optional[Mapping[str, str]] = None,
        git_context: Optional[GitContext] = None,
    ) -> SnapshotManifest:
        # Only the root package.json is redundant with the dependency tables.
        persisted = [record for record in files if record.path != DEPENDENCY_MANIFEST]
        return SnapshotManifest(
            name=name,
            version=version_tag,
            generator_version=self.generator_version,
            timestamp=datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            framework=structure.framework,
            has_type_check_config=structure.has_type_check_config,
            has_source_dir=structure.has_source_dir,
            stats=compute_stats(persisted),
            dependencies=dict(dependencies or {}),
            dev_dependencies=dict(dev_dependencies or {}),
            files=persisted,
            git=git_context,
        )


def write_manifest(manifest: SnapshotManifest, output_path: Path) -> Path:
    """Serialize ``manifest`` to ``output_path``, creating parent directories."""
    output_path = Path(output_path)
    payload = json.dumps(manifest.to_dict(), indent=2, ensure_ascii=False)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(payload + "\n", encoding="utf-8")
    return output_path


__all__ = ["SnapshotAssembler", "compute_stats", "write_manifest"]
