"""Pytest configuration and fixtures for buildcheck tests."""
from pathlib import Path

import pytest


def pytest_sessionfinish(session, exitstatus):
    """Fail the run when --cov was requested but no data was collected."""
    cov_enabled = any("--cov" in str(arg) for arg in session.config.args)
    if not cov_enabled:
        return

    coverage_files = list(Path.cwd().glob(".coverage*"))
    if not coverage_files:
        pytest.exit(
            "Coverage was enabled but no data was collected. "
            "Check that tests import from 'buildcheck' (the package) not 'src/buildcheck'.",
            returncode=1,
        )


@pytest.fixture(autouse=True)
def _plain_console(monkeypatch):
    """Keep console output free of spinners and styling."""
    monkeypatch.setenv("BUILDCHECK_PLAIN", "1")
    monkeypatch.delenv("BUILDCHECK_HISTORY_DIR", raising=False)
