"""Tests for the structure analyzer."""

from __future__ import annotations

import json

import pytest

from projsnap.analyzers.structure import FRAMEWORK_RULES, StructureAnalyzer, detect_framework
from tests._fixtures.repo_builder import ProjectBuilder


def test_structure_analyzer_probes_root(project_builder: ProjectBuilder) -> None:
    project_builder.write(
        {
            "package.json": json.dumps(
                {"dependencies": {"react": "^18.0.0"}, "devDependencies": {"vite": "^5.0.0"}}
            ),
            "tsconfig.json": "{}",
            "src/main.tsx": "export {};\n",
        }
    )

    structure = StructureAnalyzer().analyze(project_builder.root)

    assert structure.has_dependency_manifest is True
    assert structure.has_source_dir is True
    assert structure.has_type_check_config is True
    assert structure.framework == "react"
    assert structure.dependencies == {"react": "^18.0.0"}
    assert structure.dev_dependencies == {"vite": "^5.0.0"}


def test_structure_analyzer_without_package_json(project_builder: ProjectBuilder) -> None:
    project_builder.write({"index.js": "console.log(1);\n"})

    structure = StructureAnalyzer().analyze(project_builder.root)

    assert structure.has_dependency_manifest is False
    assert structure.dependency_manifest is None
    assert structure.has_source_dir is False
    assert structure.has_type_check_config is False
    assert structure.framework == "unknown"
    assert structure.dependencies == {}


def test_structure_analyzer_tolerates_invalid_package_json(project_builder: ProjectBuilder) -> None:
    project_builder.write({"package.json": "{ not json"})

    structure = StructureAnalyzer().analyze(project_builder.root)

    assert structure.has_dependency_manifest is True
    assert structure.dependency_manifest is None
    assert structure.framework == "unknown"


@pytest.mark.parametrize(
    ("dependencies", "expected"),
    [
        ({"next": "14", "react": "18"}, "next"),
        ({"react": "18", "next": "14"}, "next"),
        ({"nuxt": "3", "vue": "3"}, "vue"),
        ({"@sveltejs/kit": "2", "svelte": "4"}, "svelte"),
        ({"react": "18", "react-dom": "18"}, "react"),
        ({"@angular/core": "17"}, "angular"),
        ({"lodash": "4"}, "unknown"),
    ],
)
def test_detect_framework_priority(dependencies: dict, expected: str) -> None:
    assert detect_framework({"dependencies": dependencies}) == expected


def test_detect_framework_reads_dev_dependencies() -> None:
    assert detect_framework({"devDependencies": {"svelte": "4"}}) == "svelte"


def test_detect_framework_without_manifest() -> None:
    assert detect_framework(None) == "unknown"


def test_framework_rules_put_meta_frameworks_first() -> None:
    keys = [key for key, _ in FRAMEWORK_RULES]
    assert keys.index("next") < keys.index("react")
    assert keys.index("nuxt") < keys.index("vue")
    assert keys.index("@sveltejs/kit") < keys.index("svelte")
