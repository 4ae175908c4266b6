"""Rendering and persistence of the verification report.

The section headers and status lines are a stable contract: the
diagnostic stage and the recurrence check locate them by substring.
"""

from __future__ import annotations

import platform
from datetime import datetime
from pathlib import Path

from buildcheck.noise import NOISE_CATEGORY
from buildcheck.types import CheckResult, OrmCapability, ReportSummary, RunContext, overall_success
from buildcheck.ui import say

SUCCESS_STATUS_LINE = "✅ Status: SUCESSO"
ERROR_STATUS_LINE = "❌ Status: ERRO"
RECURRENT_MARKER = "ERRO RECORRENTE"
FAILED_MARKER = "FALHOU"
DETAILED_ERRORS_HEADER = "🚨 ERROS DETALHADOS"
ERROR_DETAILS_LABEL = "Detalhes do erro:"
FILTERED_ERRORS_HEADER = "🔧 ERROS FILTRADOS"

REPORT_SUFFIX = ".log"
WIDE_RULE = "=" * 60
SECTION_RULE = "-" * 30
ITEM_RULE = "-" * 20
EXECUTED_LABEL = "Testes executados:"


def report_filename(now: datetime | None = None) -> str:
    """Minute-granular name; two runs in the same minute share it."""
    moment = now or datetime.now()
    return f"log-{moment:%Y-%m-%d-%H-%M}{REPORT_SUFFIX}"


def format_local_time(timestamp: str) -> str:
    """Render an ISO instant the way pt-BR locales print date and time."""
    try:
        moment = datetime.fromisoformat(timestamp)
    except ValueError:
        return timestamp
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return f"{moment:%d/%m/%Y, %H:%M:%S}"


def _status_label(result: CheckResult) -> str:
    if result.skipped:
        return "⚠️  IGNORADO"
    if result.success and result.filtered:
        return "🔧 SUCESSO (FILTRADO)"
    if result.success:
        return "✅ SUCESSO"
    if result.filtered:
        return "🔧 FALHOU (FILTRADO)"
    return "❌ FALHOU"


def _environment_lines(capability: OrmCapability) -> list[str]:
    return [
        "🔧 INFORMAÇÕES DO AMBIENTE",
        SECTION_RULE,
        f"Python: {platform.python_version()}",
        f"Plataforma: {platform.system().lower() or 'unknown'}",
        f"Prisma instalado: {'Sim' if capability.installed else 'Não'}",
        f"Schema Prisma: {'Encontrado' if capability.schema_present else 'Não encontrado'}",
        "",
    ]


def _status_lines(results: list[CheckResult], recurrent: bool) -> list[str]:
    if overall_success(results):
        lines = [SUCCESS_STATUS_LINE, ""]
        filtered = [r.description for r in results if r.filtered]
        if filtered:
            lines.append("🔧 FILTROS APLICADOS: Erros dos scripts de log foram removidos automaticamente.")
            lines.append(f"Arquivos filtrados: {', '.join(filtered)}")
            lines.append("")
        lines.append("Todos os testes passaram com sucesso!")
        lines.append("")
        return lines

    lines = [ERROR_STATUS_LINE, ""]
    if recurrent:
        lines.append(f"⚠️  {RECURRENT_MARKER}: Problemas similares já foram detectados em logs anteriores.")
        lines.append("")
    return lines


def _summary_lines(summary: ReportSummary) -> list[str]:
    lines = [
        "📊 RESUMO DOS TESTES",
        SECTION_RULE,
        f"✅ Sucessos: {summary.succeeded}",
        f"❌ Falhas: {summary.failed}",
        f"⚠️  Ignorados: {summary.skipped}",
    ]
    if summary.filtered > 0:
        lines.append(f"🔧 Filtrados: {summary.filtered} (erros de scripts de log removidos)")
    lines.append(f"📈 Total: {summary.total}")
    lines.append("")
    return lines


def _detail_lines(results: list[CheckResult]) -> list[str]:
    lines = ["📋 DETALHES DOS TESTES", SECTION_RULE, ""]
    for index, result in enumerate(results, start=1):
        lines.append(f"{index}. {result.description}")
        lines.append(f"   Status: {_status_label(result)}")
        lines.append(f"   Comando: {result.command}")
        lines.append(f"   Código de saída: {result.exit_code}")
        lines.append(f"   Horário: {format_local_time(result.timestamp)}")

        if result.filtered:
            lines.append("   ℹ️  Output: [Filtrado - erros dos scripts de log removidos]")
        elif result.output:
            lines.append("   Output:")
            lines.extend(f"     {line}" for line in result.output.split("\n") if line.strip())
        lines.append("")
    return lines


def _detailed_error_lines(results: list[CheckResult]) -> list[str]:
    failed = [r for r in results if r.is_real_failure and not r.filtered]
    if not failed:
        return []

    lines = [DETAILED_ERRORS_HEADER, SECTION_RULE, ""]
    for index, result in enumerate(failed, start=1):
        lines.append(f"Erro {index}: {result.description}")
        lines.append(ITEM_RULE)
        if result.stderr:
            lines.append(f"{ERROR_DETAILS_LABEL}\n{result.stderr}\n")
        if result.stdout and result.stdout != result.stderr:
            lines.append(f"Output adicional:\n{result.stdout}\n")
    return lines


def _filtered_error_lines(results: list[CheckResult], noise_files: tuple[str, ...]) -> list[str]:
    filtered = [r for r in results if not r.success and r.filtered]
    if not filtered:
        return []

    lines = [FILTERED_ERRORS_HEADER, SECTION_RULE, ""]
    for index, result in enumerate(filtered, start=1):
        lines.append(f"Filtrado {index}: {result.description}")
        lines.append(ITEM_RULE)
        lines.append(f"Tipo: {NOISE_CATEGORY}")
        lines.append(f"Motivo: Continha referências a {', '.join(noise_files)}")
        lines.append("")
    return lines


def _footer_lines(
    results: list[CheckResult],
    capability: OrmCapability,
    generated_at: str,
    context: RunContext,
) -> list[str]:
    lines = [WIDE_RULE, f"{EXECUTED_LABEL} {', '.join(r.description for r in results)}"]
    if not capability.installed:
        lines.append("Testes ignorados: Prisma (não instalado)")
    elif not capability.schema_present:
        lines.append("Testes ignorados: Prisma (schema não encontrado)")
    lines.append(f"Data/Hora: {generated_at}")
    lines.append(f"Duração total: {context.elapsed_seconds()}s")
    return lines


def render_report(
    results: list[CheckResult],
    *,
    recurrent: bool,
    capability: OrmCapability,
    context: RunContext,
    noise_files: tuple[str, ...],
    generated_at: str,
) -> str:
    """Render the full report text in its fixed section layout."""
    lines = [f"[{generated_at}] Relatório Completo de Testes", WIDE_RULE, ""]
    lines += _environment_lines(capability)
    lines += _status_lines(results, recurrent)
    lines += _summary_lines(ReportSummary.from_results(results))
    lines += _detail_lines(results)
    lines += _detailed_error_lines(results)
    lines += _filtered_error_lines(results, noise_files)
    lines += _footer_lines(results, capability, generated_at, context)
    return "\n".join(lines) + "\n"


def write_report(
    results: list[CheckResult],
    *,
    recurrent: bool,
    history_dir: Path,
    capability: OrmCapability,
    context: RunContext,
    noise_files: tuple[str, ...],
    now: datetime | None = None,
) -> Path:
    """Render and persist the report; returns its path.

    A single write of the fully rendered text, with no partial-write
    recovery. Same-minute runs overwrite each other.
    """
    if not history_dir.exists():
        history_dir.mkdir(parents=True, exist_ok=True)
        say(f'📁 Pasta "{history_dir.name}" criada.')

    moment = now or datetime.now().astimezone()
    content = render_report(
        results,
        recurrent=recurrent,
        capability=capability,
        context=context,
        noise_files=noise_files,
        generated_at=moment.isoformat(),
    )

    report_path = history_dir / report_filename(moment)
    report_path.write_text(content, encoding="utf-8")
    say(f"📄 Log completo salvo em: {report_path}")
    return report_path
