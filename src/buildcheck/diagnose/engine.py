"""Diagnostic stage: turn the newest report into a remediation document.

One invocation walks a fixed sequence of states::

    LOAD -> CLASSIFY -> PREVENTIVE_SCAN
                     -> EXTRACT -> RESCAN -> ANALYZE_FILE -> SYNTHESIZE -> EMIT

A missing report ends the run at LOAD. A report without failures only
triggers a preventive re-scan with a console summary; documents are
written for failing reports only.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from buildcheck.config import BuildcheckConfig
from buildcheck.diagnose.analysis import analyze_file
from buildcheck.diagnose.document import (
    error_type_icon,
    error_type_name,
    render_diagnostic,
    write_diagnostic,
)
from buildcheck.diagnose.extract import extract_error_details, has_error, is_recurrent_report
from buildcheck.diagnose.remediation import (
    LINT_FIX_COMMAND,
    TSC_COMMAND,
    VERIFY_COMMAND,
    action_plan,
    remediation_commands,
)
from buildcheck.diagnose.rescan import scan_project
from buildcheck.executor import CommandRunner
from buildcheck.recurrence import recent_reports
from buildcheck.types import ErrorDetails, ErrorRecord
from buildcheck.ui import say

logger = logging.getLogger(__name__)


class DiagnosisState(str, Enum):
    LOAD = "load"
    CLASSIFY = "classify"
    PREVENTIVE_SCAN = "preventive_scan"
    EXTRACT = "extract"
    RESCAN = "rescan"
    ANALYZE_FILE = "analyze_file"
    SYNTHESIZE = "synthesize"
    EMIT = "emit"


@dataclass
class DiagnosisOutcome:
    """What one diagnostic run visited and produced."""

    states: list[DiagnosisState] = field(default_factory=list)
    report_path: Path | None = None
    document_path: Path | None = None
    details: ErrorDetails | None = None
    project_errors: list[ErrorRecord] = field(default_factory=list)
    commands: list[str] = field(default_factory=list)
    recurrent: bool = False

    @property
    def nothing_to_diagnose(self) -> bool:
        return self.report_path is None

    @property
    def final_state(self) -> DiagnosisState | None:
        return self.states[-1] if self.states else None


def find_latest_report(history_dir: Path) -> Path | None:
    """Newest report by modification time, or None if there is none."""
    if not history_dir.is_dir():
        return None
    reports = recent_reports(history_dir, limit=1)
    return reports[0] if reports else None


def _print_error_counts(errors: list[ErrorRecord]) -> None:
    for error_type, count in Counter(error.type for error in errors).items():
        say(f"   {error_type_icon(error_type)} {error_type_name(error_type)}: {count}")


def _preventive_scan(config: BuildcheckConfig, runner: CommandRunner | None, outcome: DiagnosisOutcome) -> None:
    say("✅ Último log analisado: nenhum erro encontrado. Ambiente limpo.", style="green")
    say("🔍 Fazendo verificação preventiva do projeto...")
    outcome.project_errors = scan_project(config, runner)

    if not outcome.project_errors:
        say("🎉 Projeto está limpo - nenhum problema detectado!", style="bold green")
        return

    say(f"⚠️  Encontrados {len(outcome.project_errors)} problemas potenciais no código:", style="yellow")
    _print_error_counts(outcome.project_errors)
    say("\n💡 Execute os comandos de linting para corrigir:")
    say(f"   {TSC_COMMAND}")
    say(f"   {LINT_FIX_COMMAND}")


def _print_summary(outcome: DiagnosisOutcome) -> None:
    details = outcome.details
    say("✅ Análise completa finalizada!", style="bold green")
    say(f"📄 Relatório: {outcome.document_path}")
    if details is not None:
        say(f"\n🔧 Tipo de erro: {details.type.value}")
    say(f"📊 Erros no projeto: {len(outcome.project_errors)} encontrados")

    if outcome.project_errors:
        say("\n📊 Resumo dos erros:")
        _print_error_counts(outcome.project_errors)

    say("\n📋 Próximos passos:")
    say("1. Abra o arquivo .md gerado para ver as instruções detalhadas")
    say("2. Siga o plano de ação passo a passo")
    say("3. Execute os comandos sugeridos na ordem indicada")
    say(f"4. Execute {VERIFY_COMMAND} para verificar se foi resolvido")


def diagnose(config: BuildcheckConfig, *, runner: CommandRunner | None = None) -> DiagnosisOutcome:
    """Run the diagnostic stage once.

    Args:
        config: Effective project configuration
        runner: Command runner for the re-scan (defaults to subprocess)

    Returns:
        DiagnosisOutcome; ``nothing_to_diagnose`` is set when no report exists

    Raises:
        OSError: If the report or the document cannot be read or written
    """
    outcome = DiagnosisOutcome()
    say("🔍 Iniciando análise inteligente de logs...\n")

    outcome.states.append(DiagnosisState.LOAD)
    report_path = find_latest_report(config.history_dir)
    if report_path is None:
        say("❌ Nenhum arquivo de log encontrado.", style="yellow")
        say("💡 Execute primeiro: buildcheck verify")
        return outcome

    outcome.report_path = report_path
    report_mtime = datetime.fromtimestamp(report_path.stat().st_mtime)
    say(f"📄 Log mais recente: {report_path.name}")
    say(f"📅 Data: {report_mtime:%d/%m/%Y, %H:%M:%S}\n")
    report_text = report_path.read_text(encoding="utf-8")

    outcome.states.append(DiagnosisState.CLASSIFY)
    if not has_error(report_text):
        outcome.states.append(DiagnosisState.PREVENTIVE_SCAN)
        _preventive_scan(config, runner, outcome)
        return outcome

    say("❌ Erro detectado no log!", style="bold red")
    outcome.recurrent = is_recurrent_report(report_text)
    if outcome.recurrent:
        say("⚠️  Este é um erro recorrente!", style="bold yellow")

    outcome.states.append(DiagnosisState.EXTRACT)
    say("📋 Extraindo detalhes do erro...")
    details = extract_error_details(report_text)
    outcome.details = details
    logger.debug("classified report as %s; failed checks: %s", details.type.value, details.failed_checks)

    outcome.states.append(DiagnosisState.RESCAN)
    say("🔍 Escaneando projeto para análise completa...")
    outcome.project_errors = scan_project(config, runner)
    say(f"📊 Erros encontrados no projeto: {len(outcome.project_errors)}")

    outcome.states.append(DiagnosisState.ANALYZE_FILE)
    file_context = None
    if details.location is not None:
        location = details.location
        suffix = f":{location.line}" if location.line else ""
        say(f"🎯 Arquivo problemático: {location.file}{suffix}")
        file_context = analyze_file(config.project_root / location.file, location.line)

    outcome.states.append(DiagnosisState.SYNTHESIZE)
    outcome.commands = remediation_commands(details, config.build_script)
    plan = action_plan(details, config.build_script)

    outcome.states.append(DiagnosisState.EMIT)
    say("📝 Gerando relatório inteligente...\n")
    content = render_diagnostic(
        report_name=report_path.name,
        report_mtime=report_mtime,
        report_text=report_text,
        details=details,
        project_errors=outcome.project_errors,
        file_context=file_context,
        commands=outcome.commands,
        plan=plan,
        recurrent=outcome.recurrent,
    )
    outcome.document_path = write_diagnostic(report_path, content)
    _print_summary(outcome)
    return outcome

