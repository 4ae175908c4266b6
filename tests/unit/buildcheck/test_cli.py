"""Tests for the buildcheck command line."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from buildcheck import __version__, battery
from buildcheck.battery import TYPESCRIPT_CHECK
from buildcheck.cli import cli
from buildcheck.diagnose import rescan
from tests.unit.buildcheck.helpers import FakeRunner, make_result, write_manifest, write_prisma_schema

runner = CliRunner()

TS_ERROR = "src/app/page.tsx(10,5): error TS2304: Cannot find name 'Foo'."


@pytest.fixture
def fake_commands(monkeypatch) -> FakeRunner:
    """Replace subprocess execution for both stages with one FakeRunner."""
    fake = FakeRunner()

    def run_command(command, args, description, **kwargs):
        return fake(command, args, description)

    monkeypatch.setattr(battery, "run_command", run_command)
    monkeypatch.setattr(rescan, "run_command", run_command)
    return fake


def test_version() -> None:
    """--version should print the package version and exit 0."""
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_missing_manifest_exits_1(tmp_path: Path, fake_commands: FakeRunner) -> None:
    """A project root without package.json should exit 1 before running any check."""
    result = runner.invoke(cli, ["verify", "--project-root", str(tmp_path)])

    assert result.exit_code == 1
    assert "package.json" in result.output
    assert fake_commands.calls == []


def test_verify_writes_report_and_exits_0_on_check_failure(project: Path, fake_commands: FakeRunner) -> None:
    """A failing check should be reported and written to history without a non-zero exit."""
    fake_commands.outcomes[TYPESCRIPT_CHECK] = make_result(TYPESCRIPT_CHECK, exit_code=1, stderr=TS_ERROR)

    result = runner.invoke(cli, ["verify", "--project-root", str(project)])

    assert result.exit_code == 0
    assert "RESULTADO FINAL" in result.output
    assert "❌ Falhas: 1" in result.output
    assert len(list((project / "logs").glob("log-*.log"))) == 1


def test_no_subcommand_runs_verification(project: Path, fake_commands: FakeRunner) -> None:
    """Invoking the CLI with no subcommand should run the verification stage."""
    result = runner.invoke(cli, ["--project-root", str(project)])

    assert result.exit_code == 0
    assert TYPESCRIPT_CHECK in fake_commands.descriptions
    assert "Todos os testes passaram" in result.output


def test_test_prisma_only_probes(project: Path, fake_commands: FakeRunner) -> None:
    """--test-prisma should print detection results and run no checks."""
    write_manifest(project, prisma=True)
    write_prisma_schema(project)

    result = runner.invoke(cli, ["verify", "-t", "--project-root", str(project)])

    assert result.exit_code == 0
    assert "Prisma instalado: ✅ Sim" in result.output
    assert "Schema existe: ✅ Sim" in result.output
    assert fake_commands.calls == []
    assert not (project / "logs").exists()


def test_invalid_config_exits_1(project: Path, fake_commands: FakeRunner) -> None:
    """A config file with unknown keys should exit 1 with a validation message."""
    (project / "buildcheck.yaml").write_text("unknown_key: 1\n", encoding="utf-8")

    result = runner.invoke(cli, ["verify", "--project-root", str(project)])

    assert result.exit_code == 1
    assert "Invalid config" in result.output


def test_pipeline_failure_exits_1(project: Path, monkeypatch) -> None:
    """An exception escaping the battery should exit 1 and point at the crash report."""
    def broken(command, args, description, **kwargs):
        raise RuntimeError("runner exploded")

    monkeypatch.setattr(battery, "run_command", broken)

    result = runner.invoke(cli, ["verify", "--project-root", str(project)])

    assert result.exit_code == 1
    assert "runner exploded" in result.output
    assert "Log de erro salvo em" in result.output


def test_history_dir_from_config(project: Path, fake_commands: FakeRunner) -> None:
    """history_dir from buildcheck.yaml should decide where reports are written."""
    (project / "buildcheck.yaml").write_text("history_dir: .buildcheck/history\n", encoding="utf-8")

    result = runner.invoke(cli, ["verify", "--project-root", str(project)])

    assert result.exit_code == 0
    assert len(list((project / ".buildcheck" / "history").glob("*.log"))) == 1


def test_diagnose_without_reports_exits_0(project: Path, fake_commands: FakeRunner) -> None:
    """diagnose with an empty history should report nothing to diagnose and exit 0."""
    result = runner.invoke(cli, ["diagnose", "--project-root", str(project)])

    assert result.exit_code == 0
    assert "Nenhum arquivo de log encontrado" in result.output


def test_verify_then_diagnose(project: Path, fake_commands: FakeRunner) -> None:
    """A failing verify followed by diagnose should produce a TypeScript remediation document."""
    fake_commands.outcomes[TYPESCRIPT_CHECK] = make_result(TYPESCRIPT_CHECK, exit_code=1, stderr=TS_ERROR)

    verify = runner.invoke(cli, ["verify", "--project-root", str(project)])
    diagnosis = runner.invoke(cli, ["--project-root", str(project), "diagnose"])

    assert verify.exit_code == 0
    assert diagnosis.exit_code == 0
    assert "Tipo de erro: TYPESCRIPT_ERROR" in diagnosis.output
    documents = list((project / "logs").glob("log-*.md"))
    assert len(documents) == 1
    assert "npx tsc --noEmit" in documents[0].read_text(encoding="utf-8")
