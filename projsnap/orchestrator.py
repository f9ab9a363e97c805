"""Pipeline orchestration for snapshot and reconstruct flows."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .analyzers.structure import StructureAnalyzer
from .assembler import SnapshotAssembler, write_manifest
from .config import DEFAULT_OUTPUT, DEFAULT_VERSION_TAG, ConfigError, SnapshotConfig, load_config
from .git.context import GitContextProvider
from .ignore import compile_matcher
from .logging import get_logger
from .models import GitContext, SnapshotManifest
from .reconstructor import ProjectReconstructor, ReconstructionResult, load_manifest
from .scanner import FileScanner

GitProviderFactory = Callable[[Path, str], GitContextProvider]


@dataclass
class SnapshotOutcome:
    """Result of a snapshot run."""

    path: Path
    manifest: SnapshotManifest


def _default_git_provider(repo_path: Path, target_branch: str) -> GitContextProvider:
    return GitContextProvider(repo_path, target_branch=target_branch)


class Orchestrator:
    """Coordinates scanning, git handling, assembly and reconstruction."""

    def __init__(
        self,
        scanner: FileScanner | None = None,
        structure_analyzer: StructureAnalyzer | None = None,
        assembler: SnapshotAssembler | None = None,
        reconstructor: ProjectReconstructor | None = None,
        git_provider_factory: GitProviderFactory | None = None,
    ) -> None:
        self.scanner = scanner or FileScanner()
        self.structure_analyzer = structure_analyzer or StructureAnalyzer()
        self.assembler = assembler or SnapshotAssembler()
        self.reconstructor = reconstructor or ProjectReconstructor()
        self.git_provider_factory = git_provider_factory or _default_git_provider
        self.logger = get_logger("orchestrator")

    def run_snapshot(
        self,
        path: str,
        *,
        output: str | Path | None = None,
        name: str | None = None,
        version_tag: str | None = None,
        use_git: bool = False,
        target_branch: str | None = None,
    ) -> SnapshotOutcome:
        """Scan ``path`` and write its manifest. Returns the written location."""
        project_dir = Path(path).expanduser().resolve()
        if not project_dir.is_dir():
            raise FileNotFoundError(f"Project directory not found: {project_dir}")
        self.logger.info("Starting snapshot of %s", project_dir)

        config = self._load_config(project_dir)
        output_path = self._resolve_output(output, config)
        manifest_name = name or config.name or project_dir.name
        manifest_version = version_tag or config.version_tag or DEFAULT_VERSION_TAG

        if use_git:
            trunk = target_branch or config.git.trunk_branch
            provider = self.git_provider_factory(project_dir, trunk)
            git_context = provider.capture_context()
            with provider.speculative_merge() as checkpoint:
                self.logger.info(
                    "Scanning %s merged into %s", checkpoint.original_branch, trunk
                )
                manifest = self._build_manifest(
                    project_dir, config, manifest_name, manifest_version, git_context, output_path
                )
        else:
            manifest = self._build_manifest(
                project_dir, config, manifest_name, manifest_version, None, output_path
            )

        # Written only once the repository has been unwound.
        written = write_manifest(manifest, output_path)
        self.logger.info("Generated code analysis at: %s", written)
        return SnapshotOutcome(path=written, manifest=manifest)

    def run_reconstruct(self, input_path: str | Path, target_dir: str | Path) -> ReconstructionResult:
        """Rebuild a project tree from a manifest file."""
        manifest = load_manifest(input_path)
        result = self.reconstructor.reconstruct(manifest, target_dir)
        self.logger.info("Reconstructed %d files into %s", len(result.files_written), result.target_dir)
        return result

    # ------------------------------------------------------------------
    # Internals

    def _build_manifest(
        self,
        project_dir: Path,
        config: SnapshotConfig,
        name: str,
        version_tag: str,
        git_context: Optional[GitContext],
        output_path: Path,
    ) -> SnapshotManifest:
        patterns = list(config.exclude_paths)
        # Never snapshot a previous manifest written inside the project.
        if output_path.is_relative_to(project_dir):
            patterns.append("/" + output_path.relative_to(project_dir).as_posix())
        matcher = compile_matcher(project_dir, patterns)
        structure = self.structure_analyzer.analyze(project_dir)
        files = self.scanner.scan(project_dir, matcher)
        self.logger.debug("Scanner discovered %d files", len(files))
        return self.assembler.assemble(
            name=name,
            version_tag=version_tag,
            structure=structure,
            files=files,
            dependencies=structure.dependencies,
            dev_dependencies=structure.dev_dependencies,
            git_context=git_context,
        )

    def _load_config(self, project_dir: Path) -> SnapshotConfig:
        try:
            return load_config(project_dir)
        except ConfigError as exc:
            self.logger.warning("Ignoring invalid configuration: %s", exc)
            return SnapshotConfig(root=project_dir)

    @staticmethod
    def _resolve_output(output: str | Path | None, config: SnapshotConfig) -> Path:
        if output is not None:
            return Path(output).expanduser().resolve()
        if config.output is not None:
            return config.output
        return (Path.cwd() / DEFAULT_OUTPUT).resolve()


__all__ = ["Orchestrator", "SnapshotOutcome"]
