"""Tests for the independent project re-scan."""

from __future__ import annotations

import json
from pathlib import Path

from buildcheck.config import BuildcheckConfig
from buildcheck.diagnose.rescan import (
    check_basic_syntax,
    check_prisma_errors,
    check_syntax_errors,
    iter_source_files,
    parse_eslint_errors,
    parse_typescript_errors,
    run_eslint_check,
    run_typescript_check,
    scan_project,
)
from buildcheck.types import ErrorType
from tests.unit.buildcheck.helpers import FakeRunner, make_result, write_prisma_schema

TSC_OUTPUT = (
    "src/app/page.tsx(10,5): error TS2304: Cannot find name 'Foo'.\n"
    "src/lib/util.ts(3,1): warning TS6133: 'x' is declared but its value is never read.\n"
    "Found 2 errors.\n"
)

ESLINT_JSON = [
    {
        "filePath": "/app/src/app/page.tsx",
        "messages": [
            {"ruleId": "no-unused-vars", "severity": 2, "message": "'a' is unused", "line": 4, "column": 7},
            {"ruleId": "prefer-const", "severity": 1, "message": "Use const", "line": 9, "column": 3},
        ],
    },
    {"filePath": "/app/src/lib/ok.ts", "messages": []},
]


def test_parse_typescript_errors() -> None:
    """tsc output lines should parse into records with code and severity."""
    errors = parse_typescript_errors(TSC_OUTPUT)

    assert len(errors) == 2
    first, second = errors
    assert first.type is ErrorType.TYPESCRIPT
    assert (first.file, first.line, first.column, first.code) == ("src/app/page.tsx", 10, 5, "2304")
    assert first.severity == "error"
    assert first.message == "Cannot find name 'Foo'."
    assert second.severity == "warning"


def test_parse_eslint_errors() -> None:
    """ESLint JSON severity 2 should map to errors and severity 1 to warnings."""
    errors = parse_eslint_errors(ESLINT_JSON)

    assert [e.severity for e in errors] == ["error", "warning"]
    assert errors[0].rule == "no-unused-vars"
    assert errors[0].line == 4
    assert all(e.type is ErrorType.ESLINT for e in errors)


def test_typescript_check_uses_machine_readable_flags() -> None:
    """The TypeScript re-scan should run tsc without pretty output."""
    runner = FakeRunner({"TypeScript (re-scan)": make_result("TypeScript (re-scan)", exit_code=2, stdout=TSC_OUTPUT)})

    errors = run_typescript_check(runner)

    assert runner.calls == [("npx", ["tsc", "--noEmit", "--pretty", "false"], "TypeScript (re-scan)")]
    assert len(errors) == 2


def test_unavailable_tools_contribute_nothing() -> None:
    """Skipped re-scan tools should contribute no records."""
    runner = FakeRunner(
        {
            "TypeScript (re-scan)": make_result("TypeScript (re-scan)", skipped=True),
            "ESLint (re-scan)": make_result("ESLint (re-scan)", skipped=True),
        }
    )
    assert run_typescript_check(runner) == []
    assert run_eslint_check(runner) == []


def test_eslint_check_parses_stdout_json() -> None:
    """The ESLint re-scan should parse its JSON from stdout."""
    runner = FakeRunner(
        {"ESLint (re-scan)": make_result("ESLint (re-scan)", exit_code=1, stdout=json.dumps(ESLINT_JSON))}
    )
    assert len(run_eslint_check(runner)) == 2


def test_eslint_check_tolerates_non_json() -> None:
    """Non-JSON ESLint output should yield no records."""
    runner = FakeRunner({"ESLint (re-scan)": make_result("ESLint (re-scan)", exit_code=2, stdout="Oops! crashed")})
    assert run_eslint_check(runner) == []


def test_basic_syntax_heuristics() -> None:
    """Malformed imports and undefined names should be flagged."""
    content = "\n".join(
        [
            "import React from 'react';",
            "import './globals.css'",
            "import {",
            "import * as fs from 'fs'",
            "// important: keep this",
            "throw new Error('Foo is not defined')",
        ]
    )

    errors = check_basic_syntax(content, "src/app/page.tsx")

    assert [(e.type, e.line) for e in errors] == [
        (ErrorType.SYNTAX, 2),
        (ErrorType.REFERENCE, 6),
    ]
    assert errors[1].message == "Variável 'Foo' não está definida"


def test_source_walk_skips_hidden_and_node_modules(tmp_path: Path) -> None:
    """The source walk should skip hidden directories and node_modules."""
    src = tmp_path / "src"
    (src / "app").mkdir(parents=True)
    (src / "node_modules" / "pkg").mkdir(parents=True)
    (src / ".next").mkdir()
    (src / "app" / "page.tsx").write_text("", encoding="utf-8")
    (src / "app" / "styles.css").write_text("", encoding="utf-8")
    (src / "lib.ts").write_text("", encoding="utf-8")
    (src / "node_modules" / "pkg" / "index.ts").write_text("", encoding="utf-8")
    (src / ".next" / "chunk.ts").write_text("", encoding="utf-8")

    found = [p.relative_to(src).as_posix() for p in iter_source_files(src)]

    assert found == ["app/page.tsx", "lib.ts"]


def test_missing_source_root_yields_nothing(tmp_path: Path) -> None:
    """A missing source root should yield no records."""
    assert check_syntax_errors(tmp_path / "src") == []


def test_unreadable_source_file_is_reported(tmp_path: Path) -> None:
    """An unreadable source file should be recorded as a read error."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "bad.ts").write_bytes(b"\xff\xfe\x00broken")

    errors = check_syntax_errors(src)

    assert len(errors) == 1
    assert errors[0].type is ErrorType.FILE_READ


def test_prisma_checks_skip_without_schema(project: Path) -> None:
    """Without a schema the Prisma checks should yield nothing."""
    assert check_prisma_errors(project, project / "src" / "generated" / "prisma") == []


def test_prisma_schema_problems(project: Path) -> None:
    """A schema without DATABASE_URL or a generated client should be flagged."""
    write_prisma_schema(project, 'datasource db {\n  provider = "sqlite"\n  url = "file:dev.db"\n}\n')

    errors = check_prisma_errors(project, project / "src" / "generated" / "prisma")

    assert [e.type for e in errors] == [ErrorType.PRISMA_CONFIG, ErrorType.PRISMA_CLIENT]


def test_prisma_schema_healthy(project: Path) -> None:
    """A complete Prisma setup should yield no records."""
    write_prisma_schema(project)
    client = project / "src" / "generated" / "prisma"
    client.mkdir(parents=True)

    assert check_prisma_errors(project, client) == []


def test_scan_project_aggregates_without_dedup(config: BuildcheckConfig) -> None:
    """The project scan should keep every record from every source."""
    page = config.source_root / "app" / "page.tsx"
    page.parent.mkdir(parents=True)
    page.write_text("import './a.css'\nimport './a.css'\n", encoding="utf-8")
    runner = FakeRunner({"TypeScript (re-scan)": make_result("TypeScript (re-scan)", exit_code=2, stdout=TSC_OUTPUT)})

    errors = scan_project(config, runner)

    assert [e.type for e in errors] == [
        ErrorType.TYPESCRIPT,
        ErrorType.TYPESCRIPT,
        ErrorType.SYNTAX,
        ErrorType.SYNTAX,
    ]
