"""Verification stage: battery, noise filter, recurrence and report."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from buildcheck.battery import run_battery
from buildcheck.capability import probe
from buildcheck.config import BuildcheckConfig
from buildcheck.executor import CommandRunner
from buildcheck.noise import filter_noise
from buildcheck.recurrence import is_recurrent
from buildcheck.report import write_report
from buildcheck.types import CheckResult, OrmCapability, ReportSummary, RunContext
from buildcheck.ui import banner, say

logger = logging.getLogger(__name__)


class PipelineError(RuntimeError):
    """Raised when the verification stage aborts outside a check."""

    def __init__(self, message: str, report_path: Path | None = None):
        super().__init__(message)
        self.report_path = report_path


@dataclass(frozen=True)
class VerificationOutcome:
    results: list[CheckResult]
    summary: ReportSummary
    recurrent: bool
    report_path: Path


def _print_final_summary(results: list[CheckResult], summary: ReportSummary, recurrent: bool) -> None:
    banner("📊 RESULTADO FINAL")
    say(f"✅ Sucessos: {summary.succeeded}")
    say(f"❌ Falhas: {summary.failed}")
    say(f"⚠️  Ignorados: {summary.skipped}")
    if summary.filtered > 0:
        say(f"🔧 Filtrados: {summary.filtered} (erros de scripts de log removidos)")

    if summary.failed == 0:
        say("\n🎉 Todos os testes passaram! Projeto está limpo.", style="bold green")
        return

    say("\n❌ Alguns testes falharam. Verifique os detalhes no log.", style="bold red")
    if recurrent:
        say("⚠️  ATENÇÃO: Erros recorrentes detectados!", style="bold yellow")
    say("\n🚨 Testes que falharam:")
    for index, result in enumerate((r for r in results if r.is_real_failure), start=1):
        say(f"   {index}. {result.description}")


def _print_next_steps(summary: ReportSummary, context: RunContext) -> None:
    banner("📋 PRÓXIMOS PASSOS:")
    if summary.failed > 0:
        say("1. 📄 Analise o log detalhado gerado")
        say("2. 🔍 Execute: buildcheck diagnose")
        say("3. 🛠️  Siga as instruções específicas do relatório")
        say("4. 🔄 Execute novamente este comando após as correções")
    else:
        say("1. ✅ Projeto está funcionando corretamente")
        say("2. 🚀 Pode fazer deploy ou continuar desenvolvimento")
    say(f"\n⏱️  Tempo total: {context.elapsed_seconds()}s")


def _write_crash_report(
    exc: Exception,
    config: BuildcheckConfig,
    capability: OrmCapability,
    context: RunContext,
) -> Path | None:
    crash = CheckResult(
        description="Execução do script",
        command="main",
        exit_code=1,
        success=False,
        stdout="",
        stderr=str(exc),
        output=str(exc),
    )
    try:
        return write_report(
            [crash],
            recurrent=False,
            history_dir=config.history_dir,
            capability=capability,
            context=context,
            noise_files=config.noise_files,
        )
    except OSError as write_exc:
        logger.error("could not persist crash report: %s", write_exc)
        return None


def run_verification(
    config: BuildcheckConfig,
    *,
    runner: CommandRunner | None = None,
    capability: OrmCapability | None = None,
    context: RunContext | None = None,
) -> VerificationOutcome:
    """Run the verification stage end to end.

    Check failures are recorded, never raised. Anything else that goes
    wrong aborts the run: a one-entry report describing the failure is
    written (best effort) and PipelineError is raised.
    """
    context = context or RunContext()
    capability = capability or probe(config.project_root)

    try:
        raw_results = run_battery(config, capability=capability, runner=runner)

        say("\n🔧 Filtrando erros dos scripts de log...")
        results = filter_noise(raw_results, config.noise_files)

        recurrent = is_recurrent(results, config.history_dir)
        summary = ReportSummary.from_results(results)
        _print_final_summary(results, summary, recurrent)

        report_path = write_report(
            results,
            recurrent=recurrent,
            history_dir=config.history_dir,
            capability=capability,
            context=context,
            noise_files=config.noise_files,
        )
    except Exception as exc:
        logger.debug("verification aborted", exc_info=True)
        crash_path = _write_crash_report(exc, config, capability, context)
        raise PipelineError(f"Erro durante a execução dos testes: {exc}", crash_path) from exc

    _print_next_steps(summary, context)
    return VerificationOutcome(
        results=results,
        summary=summary,
        recurrent=recurrent,
        report_path=report_path,
    )
