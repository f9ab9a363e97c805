"""Core data models shared across projsnap components."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

MANIFEST_TYPE = "project:analysis"


@dataclass(frozen=True)
class FileRecord:
    """A scanned file with its text content and classification tag."""

    path: str
    content: str
    type: str
    size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "type": self.type,
            "size": self.size,
            "content": self.content,
        }


@dataclass
class ProjectStructure:
    """Facts probed from the project root."""

    has_dependency_manifest: bool
    dependency_manifest: Optional[Dict[str, Any]]
    has_source_dir: bool
    has_type_check_config: bool
    framework: str

    @property
    def dependencies(self) -> Dict[str, str]:
        return _section(self.dependency_manifest, "dependencies")

    @property
    def dev_dependencies(self) -> Dict[str, str]:
        return _section(self.dependency_manifest, "devDependencies")


@dataclass(frozen=True)
class BranchStatus:
    ahead: int
    behind: int
    merge_base: str

    def to_dict(self) -> Dict[str, Any]:
        return {"ahead": self.ahead, "behind": self.behind, "mergeBase": self.merge_base}


@dataclass(frozen=True)
class LastCommit:
    hash: str
    subject: str
    author: str
    date: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hash": self.hash,
            "subject": self.subject,
            "author": self.author,
            "date": self.date,
        }


@dataclass(frozen=True)
class GitContext:
    """Repository history facts captured for a git-aware snapshot."""

    source_branch: str
    target_branch: str
    branch_status: BranchStatus
    last_commit: LastCommit

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceBranch": self.source_branch,
            "targetBranch": self.target_branch,
            "branchStatus": self.branch_status.to_dict(),
            "lastCommit": self.last_commit.to_dict(),
        }


@dataclass(frozen=True)
class RepositoryCheckpoint:
    """State needed to undo a speculative merge."""

    original_branch: str
    had_stash: bool


@dataclass
class SnapshotStats:
    total_files: int
    files_by_type: Dict[str, int]
    total_size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalFiles": self.total_files,
            "filesByType": dict(self.files_by_type),
            "totalSize": self.total_size,
        }


@dataclass
class SnapshotManifest:
    """The persisted snapshot document."""

    name: str
    version: str
    generator_version: str
    timestamp: str
    framework: str
    has_type_check_config: bool
    has_source_dir: bool
    stats: SnapshotStats
    dependencies: Dict[str, str] = field(default_factory=dict)
    dev_dependencies: Dict[str, str] = field(default_factory=dict)
    files: List[FileRecord] = field(default_factory=list)
    git: Optional[GitContext] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "type": MANIFEST_TYPE,
            "version": self.version,
            "generatorVersion": self.generator_version,
            "timestamp": self.timestamp,
        }
        # Non-git snapshots omit the key entirely.
        if self.git is not None:
            payload["git"] = self.git.to_dict()
        payload["structure"] = {
            "framework": self.framework,
            "hasTypeCheckConfig": self.has_type_check_config,
            "hasSourceDir": self.has_source_dir,
        }
        payload["stats"] = self.stats.to_dict()
        payload["dependencies"] = dict(self.dependencies)
        payload["devDependencies"] = dict(self.dev_dependencies)
        payload["files"] = [record.to_dict() for record in self.files]
        return payload


def _section(manifest: Optional[Dict[str, Any]], key: str) -> Dict[str, str]:
    if not manifest:
        return {}
    value = manifest.get(key)
    if not isinstance(value, dict):
        return {}
    return {str(name): str(version) for name, version in value.items()}
