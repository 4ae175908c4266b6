"""Recurrence detection against the most recent reports."""

from __future__ import annotations

import logging
from pathlib import Path

from buildcheck.report import ERROR_STATUS_LINE, FAILED_MARKER
from buildcheck.types import CheckResult

logger = logging.getLogger(__name__)

HISTORY_WINDOW = 3


def recent_reports(history_dir: Path, limit: int = HISTORY_WINDOW) -> list[Path]:
    """Newest report files first, by modification time."""
    reports = [p for p in history_dir.iterdir() if p.is_file() and p.suffix == ".log"]
    reports.sort(key=lambda p: p.stat().st_mtime, reverse=True)
    return reports[:limit]


def is_recurrent(results: list[CheckResult], history_dir: Path) -> bool:
    """True if a current failure already failed in one of the last reports.

    Substring heuristic over the rendered report text: a history report
    counts when it shows the error status and mentions both a currently
    failing check's description and the failed marker. Any one failing
    check recurring is enough. Missing history or read errors yield False.
    """
    current_failures = [r.description for r in results if r.is_real_failure]
    if not current_failures:
        return False

    try:
        if not history_dir.is_dir():
            return False

        for report_path in recent_reports(history_dir):
            content = report_path.read_text(encoding="utf-8", errors="replace")
            if ERROR_STATUS_LINE not in content:
                continue
            if any(desc in content and FAILED_MARKER in content for desc in current_failures):
                logger.debug("recurrent failure found in %s", report_path.name)
                return True
    except OSError as exc:
        logger.debug("recurrence check skipped: %s", exc)
        return False

    return False
