"""Diagnostic stage: report parsing, project re-scan and remediation."""

from buildcheck.diagnose.engine import DiagnosisOutcome, DiagnosisState, diagnose, find_latest_report

__all__ = ["DiagnosisOutcome", "DiagnosisState", "diagnose", "find_latest_report"]
