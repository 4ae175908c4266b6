"""Domain types shared by the verification and diagnostic stages."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Literal

SKIPPED_EXIT_CODE = -1
TIMEOUT_EXIT_CODE = 124

Severity = Literal["error", "warning"]


def utc_timestamp() -> str:
    """Current instant as ISO 8601 UTC."""
    return datetime.now(UTC).isoformat()


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one external verification command."""

    description: str
    command: str
    exit_code: int
    success: bool
    stdout: str = ""
    stderr: str = ""
    output: str = ""
    timestamp: str = field(default_factory=utc_timestamp)
    skipped: bool = False
    filtered: bool = False

    def __post_init__(self) -> None:
        if self.skipped and self.success:
            raise ValueError(f"Skipped check cannot be successful: {self.description}")
        if self.filtered and self.skipped:
            raise ValueError(f"Skipped check cannot be filtered: {self.description}")

    @property
    def is_real_failure(self) -> bool:
        return not self.success and not self.skipped


@dataclass(frozen=True)
class ReportSummary:
    """Aggregate counts over one battery."""

    total: int
    succeeded: int
    failed: int
    skipped: int
    filtered: int

    @property
    def overall_success(self) -> bool:
        return self.failed == 0

    @classmethod
    def from_results(cls, results: list[CheckResult]) -> ReportSummary:
        return cls(
            total=len(results),
            succeeded=sum(1 for r in results if r.success),
            failed=sum(1 for r in results if r.is_real_failure),
            skipped=sum(1 for r in results if r.skipped),
            filtered=sum(1 for r in results if r.filtered),
        )


def overall_success(results: list[CheckResult]) -> bool:
    """A battery passes iff every check succeeded or was skipped."""
    return all(r.success or r.skipped for r in results)


@dataclass(frozen=True)
class RunContext:
    """Per-invocation timing handed to the report renderer."""

    started_at: float = field(default_factory=time.monotonic)

    def elapsed_seconds(self) -> int:
        return round(time.monotonic() - self.started_at)


@dataclass(frozen=True)
class OrmCapability:
    """Whether the Prisma toolchain is declared and configured."""

    installed: bool
    schema_present: bool

    @property
    def enabled(self) -> bool:
        return self.installed and self.schema_present


class ErrorType(str, Enum):
    """Closed classification of diagnosed problems.

    The first seven members form the report classification priority,
    highest first. The remaining members are only produced by the
    project re-scan.
    """

    TYPESCRIPT = "TYPESCRIPT_ERROR"
    ESLINT = "ESLINT_ERROR"
    PRISMA = "PRISMA_ERROR"
    NEXTJS = "NEXTJS_ERROR"
    MODULE = "MODULE_ERROR"
    SYNTAX = "SYNTAX_ERROR"
    UNKNOWN = "UNKNOWN_ERROR"
    REFERENCE = "REFERENCE_ERROR"
    FILE_READ = "FILE_READ_ERROR"
    PRISMA_CONFIG = "PRISMA_CONFIG_ERROR"
    PRISMA_CLIENT = "PRISMA_CLIENT_ERROR"
    PRISMA_READ = "PRISMA_READ_ERROR"


@dataclass(frozen=True)
class ErrorRecord:
    """One classified problem found in a report or by re-scan."""

    type: ErrorType
    file: str
    line: int | None
    message: str
    severity: Severity = "error"
    column: int | None = None
    rule: str | None = None
    code: str | None = None


@dataclass(frozen=True)
class FileLocation:
    """Best-effort pointer into a source file."""

    file: str
    line: int | None = None


@dataclass(frozen=True)
class ErrorDetails:
    """Structured metadata pulled out of a report's text."""

    type: ErrorType
    failed_checks: tuple[str, ...] = ()
    location: FileLocation | None = None
    full_error: str = ""
