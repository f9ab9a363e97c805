"""Replay of snapshot manifests onto a directory tree."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Mapping

from .analyzers.dependencies import DEPENDENCY_MANIFEST
from .analyzers.structure import SOURCE_DIR, TYPE_CHECK_CONFIG, UNKNOWN_FRAMEWORK
from .logging import get_logger

_TSCONFIG_SCAFFOLD: Dict[str, Any] = {
    "compilerOptions": {
        "target": "es5",
        "lib": ["dom", "dom.iterable", "esnext"],
        "allowJs": True,
        "skipLibCheck": True,
        "strict": True,
        "forceConsistentCasingInFileNames": True,
        "noEmit": True,
        "esModuleInterop": True,
        "module": "esnext",
        "moduleResolution": "node",
        "resolveJsonModule": True,
        "isolatedModules": True,
        "jsx": "preserve",
        "incremental": True,
    },
    "include": ["**/*.ts", "**/*.tsx"],
    "exclude": ["node_modules"],
}


class ManifestValidationError(ValueError):
    """Raised when a manifest does not have the structure reconstruction needs."""


@dataclass
class ReconstructionResult:
    target_dir: Path
    framework: str
    total_files: int
    files_written: List[str] = field(default_factory=list)


def load_manifest(path: str | Path) -> Dict[str, Any]:
    """Read a manifest JSON file. Missing files raise ``FileNotFoundError``."""
    manifest_path = Path(path).expanduser()
    if not manifest_path.is_file():
        raise FileNotFoundError(f"Input file not found: {manifest_path}")
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        raise ManifestValidationError(f"{manifest_path} is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ManifestValidationError(f"{manifest_path} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestValidationError(f"{manifest_path} must contain a JSON object")
    return data


class ProjectReconstructor:
    """Writes the files recorded in a manifest into a target directory."""

    def __init__(self) -> None:
        self.logger = get_logger("reconstructor")

    def reconstruct(self, manifest: Mapping[str, Any], target_dir: str | Path) -> ReconstructionResult:
        records = _validate(manifest)
        structure = manifest.get("structure") or {}
        target = Path(target_dir).expanduser().resolve()

        self.logger.info("Reconstructing project in: %s", target)
        target.mkdir(parents=True, exist_ok=True)
        self._write_dependency_manifest(
            target,
            manifest.get("dependencies") or {},
            manifest.get("devDependencies") or {},
        )

        written: List[str] = []
        for record in records:
            rel_path = record["path"]
            file_path = target / rel_path
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_text(record["content"], encoding="utf-8", newline="")
            written.append(rel_path)
            self.logger.debug("Created: %s", rel_path)

        if _flag(structure, "hasSourceDir", "hasSrcDir"):
            (target / SOURCE_DIR).mkdir(exist_ok=True)

        if _flag(structure, "hasTypeCheckConfig", "hasTypescript") and TYPE_CHECK_CONFIG not in written:
            (target / TYPE_CHECK_CONFIG).write_text(
                json.dumps(_TSCONFIG_SCAFFOLD, indent=2) + "\n", encoding="utf-8"
            )

        stats = manifest.get("stats") or {}
        total_files = stats.get("totalFiles") if isinstance(stats, Mapping) else None
        return ReconstructionResult(
            target_dir=target,
            framework=str(structure.get("framework") or UNKNOWN_FRAMEWORK),
            total_files=total_files if isinstance(total_files, int) else len(written),
            files_written=written,
        )

    @staticmethod
    def _write_dependency_manifest(
        target: Path, dependencies: Mapping[str, Any], dev_dependencies: Mapping[str, Any]
    ) -> None:
        package_json = {
            "name": target.name,
            "version": "1.0.0",
            "dependencies": dict(dependencies),
            "devDependencies": dict(dev_dependencies),
        }
        (target / DEPENDENCY_MANIFEST).write_text(
            json.dumps(package_json, indent=2) + "\n", encoding="utf-8"
        )


def _validate(manifest: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    """Check the whole manifest up front so invalid input writes nothing."""
    if not isinstance(manifest, Mapping):
        raise ManifestValidationError("Manifest must be a JSON object")
    files = manifest.get("files")
    if not isinstance(files, list):
        raise ManifestValidationError('Invalid JSON structure. Missing or invalid "files" array.')

    for key in ("structure", "dependencies", "devDependencies"):
        value = manifest.get(key)
        if value is not None and not isinstance(value, Mapping):
            raise ManifestValidationError(f'"{key}" must be an object')

    for index, record in enumerate(files):
        if not isinstance(record, Mapping):
            raise ManifestValidationError(f"files[{index}] must be an object")
        path = record.get("path")
        if not isinstance(path, str) or not path:
            raise ManifestValidationError(f'files[{index}] is missing a "path" string')
        if not isinstance(record.get("content"), str):
            raise ManifestValidationError(f'files[{index}] ({path}) is missing a "content" string')
        pure = PurePosixPath(path)
        if pure.is_absolute() or ".." in pure.parts or "\\" in path:
            raise ManifestValidationError(f"files[{index}] path escapes the target directory: {path}")
        if not pure.parts or path.rsplit("/", 1)[-1] in ("", "."):
            raise ManifestValidationError(f"files[{index}] path does not name a file: {path}")
    return files


def _flag(structure: Mapping[str, Any], key: str, legacy_key: str) -> bool:
    if key in structure:
        return bool(structure[key])
    return bool(structure.get(legacy_key))


__all__ = ["ManifestValidationError", "ProjectReconstructor", "ReconstructionResult", "load_manifest"]
