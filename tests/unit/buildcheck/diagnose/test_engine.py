"""Tests for the diagnostic state machine."""

from __future__ import annotations

import os
from pathlib import Path

from buildcheck.battery import TYPESCRIPT_CHECK
from buildcheck.config import BuildcheckConfig
from buildcheck.diagnose import DiagnosisState, diagnose, find_latest_report
from buildcheck.pipeline import run_verification
from buildcheck.types import ErrorType, FileLocation, OrmCapability
from tests.unit.buildcheck.helpers import FakeRunner, make_result

NO_ORM = OrmCapability(installed=False, schema_present=False)
TS_ERROR = "src/app/page.tsx(10,5): error TS2304: Cannot find name 'Foo'."

PAGE = "\n".join(
    [
        "'use client';",
        "",
        "type Props = {",
        "  title: string;",
        "};",
        "",
        "export default function Page({ title }: Props) {",
        "  return (",
        "    <main>",
        "      <Foo label={title} />",
        "    </main>",
        "  );",
        "}",
    ]
)


def test_nothing_to_diagnose_without_reports(config: BuildcheckConfig) -> None:
    """An empty history should stop after LOAD with nothing to diagnose."""
    outcome = diagnose(config, runner=FakeRunner())

    assert outcome.nothing_to_diagnose is True
    assert outcome.states == [DiagnosisState.LOAD]


def test_clean_report_triggers_preventive_scan_only(config: BuildcheckConfig) -> None:
    """A clean report should run the preventive scan and write no document."""
    run_verification(config, runner=FakeRunner(), capability=NO_ORM)
    runner = FakeRunner()

    outcome = diagnose(config, runner=runner)

    assert outcome.states == [DiagnosisState.LOAD, DiagnosisState.CLASSIFY, DiagnosisState.PREVENTIVE_SCAN]
    assert outcome.document_path is None
    assert list(config.history_dir.glob("*.md")) == []
    assert runner.descriptions == ["TypeScript (re-scan)", "ESLint (re-scan)"]


def test_typescript_failure_end_to_end(config: BuildcheckConfig) -> None:
    """A TypeScript failure should walk every state and emit a document with context."""
    page = config.project_root / "src" / "app" / "page.tsx"
    page.parent.mkdir(parents=True)
    page.write_text(PAGE, encoding="utf-8")
    failing = FakeRunner({TYPESCRIPT_CHECK: make_result(TYPESCRIPT_CHECK, exit_code=1, stderr=TS_ERROR)})
    verification = run_verification(config, runner=failing, capability=NO_ORM)

    outcome = diagnose(config, runner=FakeRunner())

    assert outcome.states == [
        DiagnosisState.LOAD,
        DiagnosisState.CLASSIFY,
        DiagnosisState.EXTRACT,
        DiagnosisState.RESCAN,
        DiagnosisState.ANALYZE_FILE,
        DiagnosisState.SYNTHESIZE,
        DiagnosisState.EMIT,
    ]
    assert outcome.details is not None
    assert outcome.details.location == FileLocation("src/app/page.tsx", 10)
    assert outcome.details.type is ErrorType.TYPESCRIPT
    assert outcome.commands.count("npx tsc --noEmit") == 1
    assert outcome.document_path == verification.report_path.with_suffix(".md")

    document = outcome.document_path.read_text(encoding="utf-8")
    assert "<Foo label={title} />" in document
    assert "**Linha:** 10" in document


def test_report_without_location_still_emits(config: BuildcheckConfig) -> None:
    """A failure without a location should still emit a document."""
    failing = FakeRunner({TYPESCRIPT_CHECK: make_result(TYPESCRIPT_CHECK, exit_code=1, stderr="tsc crashed")})
    run_verification(config, runner=failing, capability=NO_ORM)

    outcome = diagnose(config, runner=FakeRunner())

    assert outcome.details is not None
    assert outcome.details.location is None
    assert outcome.final_state is DiagnosisState.EMIT
    assert "Arquivo Problemático" not in outcome.document_path.read_text(encoding="utf-8")


def test_latest_report_is_newest_by_mtime(tmp_path: Path) -> None:
    """The latest report should be picked by mtime, not by name."""
    older = tmp_path / "log-2026-12-31-23-59.log"
    newer = tmp_path / "log-2026-01-01-00-00.log"
    older.write_text("old", encoding="utf-8")
    newer.write_text("new", encoding="utf-8")
    os.utime(older, (100, 100))
    os.utime(newer, (200, 200))

    assert find_latest_report(tmp_path) == newer
    assert find_latest_report(tmp_path / "missing") is None


def test_recurrence_noted_from_report_text(config: BuildcheckConfig) -> None:
    """A recurrence warning in the report should carry into the document."""
    config.history_dir.mkdir()
    (config.history_dir / "log-2026-10-19-14-05.log").write_text(
        "❌ Status: ERRO\n⚠️  ERRO RECORRENTE: Problemas similares\n", encoding="utf-8"
    )

    outcome = diagnose(config, runner=FakeRunner())

    assert outcome.recurrent is True
    assert "Erro recorrente" in outcome.document_path.read_text(encoding="utf-8")
