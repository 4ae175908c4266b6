"""Reading structured error metadata back out of a rendered report."""

from __future__ import annotations

import re
from collections.abc import Callable

from buildcheck.report import (
    DETAILED_ERRORS_HEADER,
    ERROR_DETAILS_LABEL,
    ERROR_STATUS_LINE,
    EXECUTED_LABEL,
    FILTERED_ERRORS_HEADER,
    RECURRENT_MARKER,
    SECTION_RULE,
    SUCCESS_STATUS_LINE,
    WIDE_RULE,
)
from buildcheck.types import ErrorDetails, ErrorType, FileLocation

ERROR_INDICATORS: tuple[str, ...] = (
    "❌ Status: ERRO",
    "Status: ERRO",
    "ERROS DETALHADOS",
    "Build falhou",
    "Error:",
    "TypeError:",
    "SyntaxError:",
    "ReferenceError:",
)
FAILURE_COUNT_PATTERN = re.compile(r"^❌ Falhas: [1-9]\d*$", re.MULTILINE)
STATUS_LINE_PATTERN = re.compile(
    rf"^(?:{re.escape(SUCCESS_STATUS_LINE)}|{re.escape(ERROR_STATUS_LINE)})$", re.MULTILINE
)

# Line-anchored so that tool output echoed into a report cannot end a section.
DETAILED_SECTION_ENDS: tuple[str, ...] = (
    f"\n{FILTERED_ERRORS_HEADER}\n{SECTION_RULE}\n",
    f"\n{WIDE_RULE}\n{EXECUTED_LABEL}",
)

FAILED_CHECK_PATTERN = re.compile(r"Erro \d+: (.+?)\n-{20}")

# Tried in order; the first pattern with any match wins and only its first
# match is used.
LOCATION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(\S+\.tsx?)\((\d+),\d+\)"),
    re.compile(r"(\S+\.tsx?):(\d+):\d+"),
    re.compile(r"at\s+(.+?):(\d+):\d+"),
    re.compile(r"Error in (.+\.tsx?)"),
    re.compile(r"(\S+\.tsx?):\s*(.+)"),
)


def _report_failed(report_text: str) -> bool:
    lines = report_text.splitlines()
    return (
        ERROR_STATUS_LINE in lines
        or DETAILED_ERRORS_HEADER in lines
        or FAILURE_COUNT_PATTERN.search(report_text) is not None
    )


def has_error(report_text: str) -> bool:
    """True if a report shows any sign of failure.

    A rendered report is judged by its own status markers only, since the
    output of passing checks may print things like ``Error:``. Text without
    a status line falls back to the loose indicator scan.
    """
    if _report_failed(report_text):
        return True
    if STATUS_LINE_PATTERN.search(report_text) is not None:
        return False
    lowered = report_text.lower()
    return any(indicator.lower() in lowered for indicator in ERROR_INDICATORS)


def is_recurrent_report(report_text: str) -> bool:
    return RECURRENT_MARKER in report_text


def _detailed_section(report_text: str) -> str | None:
    """Text of the detailed-errors section, without the sections after it."""
    _, header, rest = report_text.partition(DETAILED_ERRORS_HEADER)
    if not header:
        return None
    for terminator in DETAILED_SECTION_ENDS:
        rest = rest.split(terminator, 1)[0]
    return rest


def extract_failed_checks(report_text: str) -> tuple[str, ...]:
    section = _detailed_section(report_text)
    if section is None:
        return ()
    return tuple(match.group(1) for match in FAILED_CHECK_PATTERN.finditer(section))


def locate_error(report_text: str) -> FileLocation | None:
    """Best-effort file/line pointer; None when nothing looks like a location."""
    for pattern in LOCATION_PATTERNS:
        match = pattern.search(report_text)
        if match is None:
            continue
        file_name = match.group(1)
        line = None
        if pattern.groups >= 2 and match.group(2).isdigit():
            line = int(match.group(2))
        return FileLocation(file=file_name, line=line)
    return None


def _mentions_check(failed_checks: tuple[str, ...], keyword: str) -> bool:
    return any(keyword in check for check in failed_checks)


Classifier = Callable[[tuple[str, ...], str], bool]

# Priority order, highest first. UNKNOWN is the total fallback.
CLASSIFIERS: tuple[tuple[ErrorType, Classifier], ...] = (
    (
        ErrorType.TYPESCRIPT,
        lambda checks, text: _mentions_check(checks, "TypeScript") or "typescript" in text or "tsc" in text,
    ),
    (
        ErrorType.ESLINT,
        lambda checks, text: _mentions_check(checks, "ESLint") or "eslint" in text,
    ),
    (
        ErrorType.PRISMA,
        lambda checks, text: _mentions_check(checks, "Prisma") or "prisma" in text or "database" in text,
    ),
    (
        ErrorType.NEXTJS,
        lambda checks, text: _mentions_check(checks, "Build") or "next" in text or "webpack" in text,
    ),
    (
        ErrorType.MODULE,
        lambda checks, text: "module not found" in text or "cannot resolve" in text,
    ),
    (
        ErrorType.SYNTAX,
        lambda checks, text: "syntax" in text,
    ),
)


def classify_error(failed_checks: tuple[str, ...], text: str) -> ErrorType:
    """Map failed checks and failure text to one ErrorType.

    Keyword matching is case-insensitive on the text and case-sensitive on
    check descriptions.
    """
    lowered = text.lower()
    for error_type, matches in CLASSIFIERS:
        if matches(failed_checks, lowered):
            return error_type
    return ErrorType.UNKNOWN


def extract_error_details(report_text: str) -> ErrorDetails:
    failed_checks = extract_failed_checks(report_text)

    # Keywords are matched against the failure section only; the per-check
    # listing and the footer name every check that ran.
    failure_text = _detailed_section(report_text) or report_text

    _, label, after_label = report_text.partition(ERROR_DETAILS_LABEL)
    full_error = (after_label if label else failure_text).strip()

    return ErrorDetails(
        type=classify_error(failed_checks, failure_text),
        failed_checks=failed_checks,
        location=locate_error(report_text),
        full_error=full_error,
    )
