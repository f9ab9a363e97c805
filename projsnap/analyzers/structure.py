"""Analyzer that probes the project root for manifest-level facts."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from .dependencies import DEPENDENCY_MANIFEST, load_dependency_manifest, merged_dependency_names
from ..models import ProjectStructure

SOURCE_DIR = "src"
TYPE_CHECK_CONFIG = "tsconfig.json"
UNKNOWN_FRAMEWORK = "unknown"

# Evaluated in order; meta-frameworks precede the library they build on.
FRAMEWORK_RULES: Sequence[Tuple[str, str]] = (
    ("next", "next"),
    ("nuxt", "vue"),
    ("vue", "vue"),
    ("@sveltejs/kit", "svelte"),
    ("svelte", "svelte"),
    ("react", "react"),
    ("@angular/core", "angular"),
)


def detect_framework(manifest: Optional[Dict[str, Any]]) -> str:
    """Return the first framework tag whose dependency key is declared."""
    declared = merged_dependency_names(manifest)
    for key, framework in FRAMEWORK_RULES:
        if key in declared:
            return framework
    return UNKNOWN_FRAMEWORK


class StructureAnalyzer:
    """Derives a :class:`ProjectStructure` from filesystem probes."""

    def analyze(self, root: str | Path) -> ProjectStructure:
        root_path = Path(root)
        manifest = load_dependency_manifest(root_path)
        return ProjectStructure(
            has_dependency_manifest=(root_path / DEPENDENCY_MANIFEST).is_file(),
            dependency_manifest=manifest,
            has_source_dir=(root_path / SOURCE_DIR).is_dir(),
            has_type_check_config=(root_path / TYPE_CHECK_CONFIG).is_file(),
            framework=detect_framework(manifest),
        )


__all__ = [
    "FRAMEWORK_RULES",
    "SOURCE_DIR",
    "StructureAnalyzer",
    "TYPE_CHECK_CONFIG",
    "UNKNOWN_FRAMEWORK",
    "detect_framework",
]
