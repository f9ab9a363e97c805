"""Dependency manifest (package.json) helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from ..logging import get_logger

DEPENDENCY_MANIFEST = "package.json"

_logger = get_logger("analyzers.dependencies")


def load_dependency_manifest(root: Path) -> Optional[Dict[str, Any]]:
    """Return the parsed package.json at ``root``, or ``None`` when unusable."""
    manifest_path = root / DEPENDENCY_MANIFEST
    if not manifest_path.is_file():
        return None
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        _logger.warning("Ignoring unparsable %s: %s", manifest_path, exc)
        return None
    if not isinstance(data, dict):
        _logger.warning("Ignoring %s: expected a JSON object", manifest_path)
        return None
    return data


def merged_dependency_names(manifest: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge runtime and development dependency tables."""
    if not manifest:
        return {}
    merged: Dict[str, Any] = {}
    for key in ("dependencies", "devDependencies"):
        section = manifest.get(key)
        if isinstance(section, dict):
            merged.update(section)
    return merged


__all__ = ["DEPENDENCY_MANIFEST", "load_dependency_manifest", "merged_dependency_names"]
