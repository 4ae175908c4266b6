"""Reclassification of failures caused by buildcheck's own helper scripts.

Running the battery inside a project that also carries the log helper
scripts makes the linters and type-checker complain about those scripts.
Lines naming an allowlisted file are stripped; a result whose remaining
text carries no error indicator is promoted to success.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from buildcheck.config import DEFAULT_NOISE_FILES
from buildcheck.types import CheckResult
from buildcheck.ui import say

logger = logging.getLogger(__name__)

ERROR_INDICATORS: tuple[str, ...] = (
    "error",
    "Error:",
    "TypeError:",
    "SyntaxError:",
    "ReferenceError:",
    "warning",
    "Warning:",
    "fail",
    "failed",
    "FAIL",
    "FAILED",
)

NOISE_CATEGORY = "Erros dos scripts de log removidos"


def _mentions(text: str, noise_files: Iterable[str]) -> bool:
    return any(name in text for name in noise_files)


def _line_references(line: str, name: str) -> bool:
    return any(
        variant in line
        for variant in (name, f"./{name}", f"/{name}", f'"{name}"', f"'{name}'")
    )


def strip_noise_lines(text: str, noise_files: Iterable[str]) -> str:
    """Drop every line that references a noise file."""
    if not text:
        return ""
    names = tuple(noise_files)
    kept = []
    for line in text.split("\n"):
        if any(_line_references(line, name) for name in names):
            logger.debug("removing noise line: %s", line.strip())
            continue
        kept.append(line)
    return "\n".join(kept)


def has_remaining_errors(*texts: str) -> bool:
    combined = "".join(texts).strip()
    if not combined:
        return False
    lowered = combined.lower()
    return any(indicator.lower() in lowered for indicator in ERROR_INDICATORS)


def filter_result(result: CheckResult, noise_files: tuple[str, ...] = DEFAULT_NOISE_FILES) -> CheckResult:
    if result.skipped or result.success:
        return result

    if not any(_mentions(text, noise_files) for text in (result.output, result.stdout, result.stderr)):
        return result

    say(f"🔧 Ignorando erros de {result.description} relacionados aos scripts de log", style="cyan")

    output = strip_noise_lines(result.output, noise_files)
    stdout = strip_noise_lines(result.stdout, noise_files)
    stderr = strip_noise_lines(result.stderr, noise_files)

    if not has_remaining_errors(output, stdout, stderr):
        say(f"   ✅ {result.description} agora é considerado bem-sucedido após filtro", style="green")
        return replace(
            result,
            success=True,
            exit_code=0,
            output="",
            stdout="",
            stderr="",
            filtered=True,
        )

    say(f"   ⚠️  {result.description} ainda tem erros após filtro", style="yellow")
    return replace(result, output=output, stdout=stdout, stderr=stderr, filtered=True)


def filter_noise(
    results: list[CheckResult],
    noise_files: tuple[str, ...] = DEFAULT_NOISE_FILES,
) -> list[CheckResult]:
    """Return derived results with noise-only failures reclassified."""
    return [filter_result(result, noise_files) for result in results]
