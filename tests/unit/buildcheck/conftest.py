"""Fixtures shared by the buildcheck unit tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from buildcheck.config import BuildcheckConfig
from tests.unit.buildcheck.helpers import write_manifest


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "app"
    root.mkdir()
    write_manifest(root)
    return root


@pytest.fixture
def config(project: Path) -> BuildcheckConfig:
    return BuildcheckConfig.defaults(project)
