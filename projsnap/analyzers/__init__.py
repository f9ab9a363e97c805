"""Project structure analyzers."""

from __future__ import annotations

from .dependencies import DEPENDENCY_MANIFEST, load_dependency_manifest
from .structure import FRAMEWORK_RULES, StructureAnalyzer, detect_framework

__all__ = [
    "DEPENDENCY_MANIFEST",
    "FRAMEWORK_RULES",
    "StructureAnalyzer",
    "detect_framework",
    "load_dependency_manifest",
]
