from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.repo_builder import GitRepoBuilder, ProjectBuilder


@pytest.fixture(autouse=True)
def _propagate_projsnap_logs() -> Iterator[None]:
    """Let caplog see projsnap records even after the CLI configured logging."""
    logger = logging.getLogger("projsnap")
    previous = (logger.propagate, logger.level, list(logger.handlers))
    logger.propagate = True
    yield
    logger.propagate, level, handlers = previous
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepoBuilder:
    """Provide a real git repository on ``master`` with one initial commit."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    return GitRepoBuilder.create(tmp_path)
