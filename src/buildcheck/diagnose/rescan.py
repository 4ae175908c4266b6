"""Independent project re-scan producing ErrorRecords.

The type-checker and linter are re-run with machine-readable output, the
source tree is scanned with line heuristics, and the Prisma schema is
checked for the pieces a working client needs. Findings are aggregated
as-is, without deduplication.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator
from functools import partial
from pathlib import Path
from typing import Any

from buildcheck.capability import ORM_SCHEMA_RELATIVE_PATH
from buildcheck.config import BuildcheckConfig
from buildcheck.executor import CommandRunner, run_command
from buildcheck.types import ErrorRecord, ErrorType
from buildcheck.ui import say

logger = logging.getLogger(__name__)

TSC_LINE_PATTERN = re.compile(r"^(.+?)\((\d+),(\d+)\):\s*(error|warning)\s*TS(\d+):\s*(.+)$")
UNDEFINED_NAME_PATTERN = re.compile(r"(\w+)\s+is not defined")
IMPORT_KEYWORD_PATTERN = re.compile(r"\bimport\b")

SOURCE_SUFFIXES = (".ts", ".tsx")
SKIPPED_DIRS = frozenset({"node_modules"})
DATABASE_URL_PLACEHOLDER = "DATABASE_URL"


def parse_typescript_errors(output: str) -> list[ErrorRecord]:
    errors = []
    for line in output.splitlines():
        match = TSC_LINE_PATTERN.match(line.strip())
        if match is None:
            continue
        errors.append(
            ErrorRecord(
                type=ErrorType.TYPESCRIPT,
                file=match.group(1),
                line=int(match.group(2)),
                column=int(match.group(3)),
                severity="error" if match.group(4) == "error" else "warning",
                code=match.group(5),
                message=match.group(6),
            )
        )
    return errors


def parse_eslint_errors(results: list[dict[str, Any]]) -> list[ErrorRecord]:
    """Convert ``eslint --format json`` output to ErrorRecords."""
    errors = []
    for result in results:
        for message in result.get("messages", []):
            errors.append(
                ErrorRecord(
                    type=ErrorType.ESLINT,
                    file=result.get("filePath", ""),
                    line=message.get("line"),
                    column=message.get("column"),
                    severity="error" if message.get("severity") == 2 else "warning",
                    rule=message.get("ruleId"),
                    message=message.get("message", ""),
                )
            )
    return errors


def run_typescript_check(runner: CommandRunner) -> list[ErrorRecord]:
    result = runner("npx", ["tsc", "--noEmit", "--pretty", "false"], "TypeScript (re-scan)")
    if result.skipped:
        say("⚠️  TypeScript check não disponível", style="yellow")
        return []
    return parse_typescript_errors(result.output)


def run_eslint_check(runner: CommandRunner) -> list[ErrorRecord]:
    result = runner("npx", ["eslint", ".", "--format", "json"], "ESLint (re-scan)")
    if result.skipped:
        say("⚠️  ESLint check não disponível", style="yellow")
        return []
    try:
        payload = json.loads(result.stdout)
    except json.JSONDecodeError:
        logger.debug("eslint produced no JSON output")
        return []
    if not isinstance(payload, list):
        return []
    return parse_eslint_errors(payload)


def iter_source_files(source_root: Path) -> Iterator[Path]:
    """Yield .ts/.tsx files in a stable order, skipping hidden dirs and node_modules."""
    if not source_root.is_dir():
        return
    for entry in sorted(source_root.iterdir()):
        if entry.is_dir():
            if entry.name.startswith(".") or entry.name in SKIPPED_DIRS:
                continue
            yield from iter_source_files(entry)
        elif entry.is_file() and entry.suffix in SOURCE_SUFFIXES:
            yield entry


def check_basic_syntax(content: str, file_path: str) -> list[ErrorRecord]:
    errors = []
    for line_number, line in enumerate(content.split("\n"), start=1):
        stripped = line.strip()
        if IMPORT_KEYWORD_PATTERN.search(line) and "from" not in line and "*" not in line:
            if not stripped.endswith(";") and not stripped.endswith("{"):
                errors.append(
                    ErrorRecord(
                        type=ErrorType.SYNTAX,
                        file=file_path,
                        line=line_number,
                        message="Import mal formado - verifique a sintaxe",
                    )
                )

        undefined = UNDEFINED_NAME_PATTERN.search(line)
        if undefined:
            errors.append(
                ErrorRecord(
                    type=ErrorType.REFERENCE,
                    file=file_path,
                    line=line_number,
                    message=f"Variável '{undefined.group(1)}' não está definida",
                )
            )
    return errors


def check_syntax_errors(source_root: Path) -> list[ErrorRecord]:
    errors: list[ErrorRecord] = []
    for path in iter_source_files(source_root):
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            errors.append(
                ErrorRecord(
                    type=ErrorType.FILE_READ,
                    file=str(path),
                    line=1,
                    message=f"Erro ao ler arquivo: {exc}",
                )
            )
            continue
        errors.extend(check_basic_syntax(content, str(path)))
    return errors


def check_prisma_errors(project_root: Path, generated_client_dir: Path) -> list[ErrorRecord]:
    schema_path = project_root / ORM_SCHEMA_RELATIVE_PATH
    if not schema_path.exists():
        return []

    try:
        schema = schema_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return [
            ErrorRecord(
                type=ErrorType.PRISMA_READ,
                file=str(schema_path),
                line=1,
                message=f"Erro ao ler schema.prisma: {exc}",
            )
        ]

    errors = []
    if DATABASE_URL_PLACEHOLDER not in schema:
        errors.append(
            ErrorRecord(
                type=ErrorType.PRISMA_CONFIG,
                file=str(schema_path),
                line=1,
                message="DATABASE_URL não encontrada no schema.prisma",
            )
        )
    if not generated_client_dir.exists():
        errors.append(
            ErrorRecord(
                type=ErrorType.PRISMA_CLIENT,
                file=str(schema_path),
                line=1,
                message="Cliente Prisma não foi gerado. Execute: npx prisma generate",
            )
        )
    return errors


def scan_project(config: BuildcheckConfig, runner: CommandRunner | None = None) -> list[ErrorRecord]:
    """Run every re-scan probe and concatenate their findings."""
    if runner is None:
        runner = partial(
            run_command,
            cwd=config.project_root,
            timeout=config.command_timeout,
            quiet=True,
        )

    say("🔍 Escaneando projeto em busca de erros...")
    errors: list[ErrorRecord] = []

    say("📝 Verificando erros de TypeScript...")
    errors.extend(run_typescript_check(runner))

    say("🔧 Verificando erros de ESLint...")
    errors.extend(run_eslint_check(runner))

    say("📋 Verificando sintaxe dos arquivos...")
    errors.extend(check_syntax_errors(config.source_root))

    say("🗄️  Verificando configuração do Prisma...")
    errors.extend(check_prisma_errors(config.project_root, config.generated_client_dir))

    logger.debug("re-scan found %d problems", len(errors))
    return errors
