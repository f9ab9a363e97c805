"""Orchestrator behaviour for snapshot and reconstruct runs."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List

import pytest

from projsnap.git.context import GitWorkflowError
from projsnap.models import BranchStatus, GitContext, LastCommit, RepositoryCheckpoint
from projsnap.orchestrator import Orchestrator


class RecordingProvider:
    """Stands in for GitContextProvider and records the call order."""

    def __init__(self, events: List[str], *, fail_begin: bool = False) -> None:
        self.events = events
        self.fail_begin = fail_begin

    def capture_context(self) -> GitContext:
        self.events.append("capture")
        return GitContext(
            source_branch="feature/login",
            target_branch="main",
            branch_status=BranchStatus(ahead=2, behind=1, merge_base="abcd1234"),
            last_commit=LastCommit(
                hash="f" * 40,
                subject="Add login form",
                author="Dev",
                date="2026-01-02T03:04:05+00:00",
            ),
        )

    @contextmanager
    def speculative_merge(self) -> Iterator[RepositoryCheckpoint]:
        if self.fail_begin:
            raise GitWorkflowError("HEAD is detached; check out a branch before a git-aware snapshot")
        self.events.append("begin")
        try:
            yield RepositoryCheckpoint(original_branch="feature/login", had_stash=False)
        finally:
            self.events.append("end")


def _write_project(project_builder) -> Path:  # type: ignore[no-untyped-def]
    project_builder.write(
        {
            "src/App.jsx": "export default function App() {}\n",
            "README.md": "# Demo\n",
            "package.json": json.dumps(
                {"dependencies": {"react": "^18"}, "devDependencies": {"vite": "^5"}}
            ),
        }
    )
    return project_builder.root


def test_run_snapshot_without_git(project_builder, tmp_path: Path) -> None:
    root = _write_project(project_builder)
    output = tmp_path / "out" / "code.json"

    outcome = Orchestrator().run_snapshot(str(root), output=output)

    assert outcome.path == output.resolve()
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert "git" not in payload
    assert payload["name"] == root.name
    assert payload["version"] == "1.0.0"
    assert payload["type"] == "project:analysis"
    assert payload["structure"]["framework"] == "react"
    assert payload["structure"]["hasSourceDir"] is True
    assert payload["dependencies"] == {"react": "^18"}
    assert payload["devDependencies"] == {"vite": "^5"}
    assert [record["path"] for record in payload["files"]] == ["README.md", "src/App.jsx"]
    assert payload["stats"]["totalFiles"] == 2


def test_run_snapshot_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Project directory not found"):
        Orchestrator().run_snapshot(str(tmp_path / "missing"), output=tmp_path / "code.json")


def test_run_snapshot_skips_previous_output_inside_project(project_builder) -> None:
    root = _write_project(project_builder)
    output = root / "code.json"
    output.write_text('{"stale": true}\n', encoding="utf-8")

    Orchestrator().run_snapshot(str(root), output=output)

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert "code.json" not in [record["path"] for record in payload["files"]]


def test_run_snapshot_uses_config(project_builder) -> None:
    root = _write_project(project_builder)
    project_builder.write({"src/App.test.jsx": "test('x', () => {});\n"})
    project_builder.write(
        {
            ".projsnap.yml": """
            name: storefront
            version_tag: 4.2.0
            output: artifacts/snapshot.json
            exclude_paths:
              - "*.test.jsx"
            """
        }
    )

    outcome = Orchestrator().run_snapshot(str(root))

    assert outcome.path == root.resolve() / "artifacts" / "snapshot.json"
    payload = json.loads(outcome.path.read_text(encoding="utf-8"))
    assert payload["name"] == "storefront"
    assert payload["version"] == "4.2.0"
    assert "src/App.test.jsx" not in [record["path"] for record in payload["files"]]


def test_cli_arguments_override_config(project_builder, tmp_path: Path) -> None:
    root = _write_project(project_builder)
    project_builder.write({".projsnap.yml": "name: storefront\nversion_tag: 4.2.0\n"})

    outcome = Orchestrator().run_snapshot(
        str(root), output=tmp_path / "code.json", name="override", version_tag="9.9.9"
    )

    assert outcome.manifest.name == "override"
    assert outcome.manifest.version == "9.9.9"


def test_invalid_config_falls_back_to_defaults(project_builder, tmp_path: Path, caplog) -> None:
    root = _write_project(project_builder)
    project_builder.write({".projsnap.yml": "- not\n- a mapping\n"})

    with caplog.at_level(logging.WARNING, logger="projsnap"):
        outcome = Orchestrator().run_snapshot(str(root), output=tmp_path / "code.json")

    assert outcome.manifest.name == root.name
    assert "Ignoring invalid configuration" in caplog.text


def test_git_snapshot_builds_inside_speculative_merge(project_builder, tmp_path: Path) -> None:
    root = _write_project(project_builder)
    events: List[str] = []
    branches: List[str] = []

    def factory(path: Path, target_branch: str) -> RecordingProvider:
        branches.append(target_branch)
        return RecordingProvider(events)

    class TrackingOrchestrator(Orchestrator):
        def _build_manifest(self, *args, **kwargs):  # type: ignore[no-untyped-def]
            events.append("build")
            return super()._build_manifest(*args, **kwargs)

    output = tmp_path / "code.json"
    TrackingOrchestrator(git_provider_factory=factory).run_snapshot(
        str(root), output=output, use_git=True, target_branch="main"
    )

    assert branches == ["main"]
    assert events == ["capture", "begin", "build", "end"]
    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["git"]["sourceBranch"] == "feature/login"
    assert payload["git"]["targetBranch"] == "main"
    assert payload["git"]["branchStatus"] == {"ahead": 2, "behind": 1, "mergeBase": "abcd1234"}
    assert payload["git"]["lastCommit"]["subject"] == "Add login form"


def test_git_snapshot_uses_configured_trunk(project_builder, tmp_path: Path) -> None:
    root = _write_project(project_builder)
    project_builder.write({".projsnap.yml": "git:\n  trunk_branch: develop\n"})
    branches: List[str] = []

    def factory(path: Path, target_branch: str) -> RecordingProvider:
        branches.append(target_branch)
        return RecordingProvider([])

    Orchestrator(git_provider_factory=factory).run_snapshot(
        str(root), output=tmp_path / "code.json", use_git=True
    )

    assert branches == ["develop"]


def test_git_workflow_failure_writes_nothing(project_builder, tmp_path: Path) -> None:
    root = _write_project(project_builder)
    output = tmp_path / "code.json"

    def factory(path: Path, target_branch: str) -> RecordingProvider:
        return RecordingProvider([], fail_begin=True)

    with pytest.raises(GitWorkflowError, match="detached"):
        Orchestrator(git_provider_factory=factory).run_snapshot(
            str(root), output=output, use_git=True
        )

    assert not output.exists()


def test_run_reconstruct_round_trip(project_builder, tmp_path: Path) -> None:
    root = _write_project(project_builder)
    output = tmp_path / "code.json"
    orchestrator = Orchestrator()
    orchestrator.run_snapshot(str(root), output=output)

    result = orchestrator.run_reconstruct(output, tmp_path / "rebuilt")

    rebuilt = tmp_path / "rebuilt"
    assert result.framework == "react"
    assert result.total_files == 2
    assert (rebuilt / "src" / "App.jsx").read_text(encoding="utf-8") == (
        "export default function App() {}\n"
    )
    package_json = json.loads((rebuilt / "package.json").read_text(encoding="utf-8"))
    assert package_json["name"] == "rebuilt"
    assert package_json["dependencies"] == {"react": "^18"}
