"""Markdown remediation document for a failing report."""

from __future__ import annotations

import io
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import TextIO

from buildcheck.diagnose.analysis import FileContext
from buildcheck.diagnose.remediation import ActionStage
from buildcheck.types import ErrorDetails, ErrorRecord, ErrorType

MAX_ERRORS_PER_TYPE = 5

CHECK_ICONS: tuple[tuple[str, str], ...] = (
    ("TypeScript", "📝"),
    ("ESLint", "🔧"),
    ("Prisma", "🗄️"),
    ("Build", "⚛️"),
    ("Auditoria", "🔒"),
    ("Dependências", "📦"),
)

ERROR_TYPE_ICONS: dict[ErrorType, str] = {
    ErrorType.TYPESCRIPT: "📝",
    ErrorType.ESLINT: "🔧",
    ErrorType.SYNTAX: "⚠️",
    ErrorType.PRISMA: "🗄️",
    ErrorType.MODULE: "📦",
    ErrorType.NEXTJS: "⚛️",
    ErrorType.FILE_READ: "📄",
    ErrorType.REFERENCE: "🔗",
    ErrorType.PRISMA_CONFIG: "⚙️",
    ErrorType.PRISMA_CLIENT: "🧩",
    ErrorType.PRISMA_READ: "📂",
}

ERROR_TYPE_NAMES: dict[ErrorType, str] = {
    ErrorType.TYPESCRIPT: "Erros de TypeScript",
    ErrorType.ESLINT: "Problemas de Lint",
    ErrorType.SYNTAX: "Erros de Sintaxe",
    ErrorType.PRISMA: "Problemas do Prisma",
    ErrorType.MODULE: "Módulos não encontrados",
    ErrorType.NEXTJS: "Problemas do Next.js",
    ErrorType.FILE_READ: "Problemas de Leitura",
    ErrorType.REFERENCE: "Referências não definidas",
    ErrorType.PRISMA_CONFIG: "Configuração do Prisma",
    ErrorType.PRISMA_CLIENT: "Cliente Prisma não gerado",
    ErrorType.PRISMA_READ: "Leitura do Schema Prisma",
}

USEFUL_LINKS: tuple[tuple[str, str], ...] = (
    ("Documentação do Next.js", "https://nextjs.org/docs"),
    ("Documentação do Prisma", "https://www.prisma.io/docs"),
    ("Documentação do TypeScript", "https://www.typescriptlang.org/docs"),
    ("Guia de Solução de Problemas do React", "https://react.dev/learn/troubleshooting"),
)


def check_icon(description: str) -> str:
    for keyword, icon in CHECK_ICONS:
        if keyword in description:
            return icon
    return "❓"


def error_type_icon(error_type: ErrorType) -> str:
    return ERROR_TYPE_ICONS.get(error_type, "❓")


def error_type_name(error_type: ErrorType) -> str:
    return ERROR_TYPE_NAMES.get(error_type, "Erro Desconhecido")


def group_by_type(errors: list[ErrorRecord]) -> dict[ErrorType, list[ErrorRecord]]:
    """Group records by type, keeping first-seen type order."""
    grouped: dict[ErrorType, list[ErrorRecord]] = defaultdict(list)
    for error in errors:
        grouped[error.type].append(error)
    return dict(grouped)


def _format_datetime(moment: datetime) -> str:
    return f"{moment:%d/%m/%Y, %H:%M:%S}"


def _write_failed_checks(f: TextIO, failed_checks: tuple[str, ...]) -> None:
    if not failed_checks:
        return
    f.write("## 📊 Testes que Falharam\n\n")
    for index, check in enumerate(failed_checks, start=1):
        f.write(f"{index}. {check_icon(check)} **{check}**\n")
    f.write("\n")


def _write_located_file(f: TextIO, details: ErrorDetails, file_context: FileContext | None) -> None:
    location = details.location
    if location is None:
        return

    f.write("## 🎯 Arquivo Problemático Identificado\n\n")
    f.write(f"**Arquivo:** `{location.file}`  \n")
    if location.line:
        f.write(f"**Linha:** {location.line}  \n")
    f.write(f"**Tipo:** {details.type.value}  \n\n")

    if file_context is None:
        f.write("⚠️ Arquivo não encontrado no sistema. Verifique se o caminho está correto.\n\n")
        return

    f.write("### 📖 Contexto do Erro\n\n")
    f.write(f"```typescript\n{file_context.excerpt}\n```\n\n")

    analysis = file_context.analysis
    if analysis is None:
        return

    f.write("### 🔍 Diagnóstico Específico\n\n")
    f.write(f"**Problema:** {analysis.problem}\n\n")
    f.write(f"**Solução:** {analysis.solution}\n\n")
    if analysis.code_example:
        f.write("### 💡 Exemplo de Código Correto\n\n")
        f.write(f"```typescript\n{analysis.code_example}\n```\n\n")
    if analysis.steps:
        f.write("### 🛠️ Passos Específicos para Resolver\n\n")
        for index, step in enumerate(analysis.steps, start=1):
            f.write(f"{index}. {step}\n")
        f.write("\n")


def _write_project_errors(f: TextIO, errors: list[ErrorRecord]) -> None:
    if not errors:
        return
    f.write(f"## 🔍 Erros Detectados no Projeto ({len(errors)})\n\n")
    for error_type, records in group_by_type(errors).items():
        f.write(f"### {error_type_icon(error_type)} {error_type_name(error_type)}\n\n")
        for index, error in enumerate(records[:MAX_ERRORS_PER_TYPE], start=1):
            where = Path(error.file).name
            if error.line is not None:
                where = f"{where}:{error.line}"
            f.write(f"{index}. **{where}**\n")
            f.write(f"   `{error.message}`\n\n")
        hidden = len(records) - MAX_ERRORS_PER_TYPE
        if hidden > 0:
            f.write(f"   ... e mais {hidden} erros deste tipo\n\n")


def _write_commands(f: TextIO, commands: list[str]) -> None:
    f.write("## 💻 Comandos de Resolução Recomendados\n\n")
    for index, command in enumerate(commands, start=1):
        f.write(f"{index}. `{command}`\n")
    f.write("\n")


def _write_plan(f: TextIO, plan: list[ActionStage]) -> None:
    f.write("## 📋 Plano de Ação Completo\n\n")
    for index, stage in enumerate(plan, start=1):
        f.write(f"### Etapa {index}: {stage.title}\n")
        f.write(f"{stage.description}\n\n")
        if stage.commands:
            for command in stage.commands:
                f.write(f"- `{command}`\n")
            f.write("\n")


def _write_reference(f: TextIO, report_text: str) -> None:
    f.write("## 📄 Log Completo (Referência)\n\n")
    f.write("<details>\n")
    f.write("<summary>Clique para ver o log completo</summary>\n\n")
    f.write(f"```\n{report_text}\n```\n\n")
    f.write("</details>\n\n")

    f.write("## 🔗 Links Úteis\n\n")
    for title, url in USEFUL_LINKS:
        f.write(f"- [{title}]({url})\n")
    f.write("\n")


def render_diagnostic(
    *,
    report_name: str,
    report_mtime: datetime,
    report_text: str,
    details: ErrorDetails,
    project_errors: list[ErrorRecord],
    file_context: FileContext | None,
    commands: list[str],
    plan: list[ActionStage],
    recurrent: bool = False,
    generated_at: datetime | None = None,
) -> str:
    """Render the remediation document as markdown text."""
    f = io.StringIO()
    f.write("# 🔧 Análise Inteligente de Erro - Build Log\n\n")
    f.write(f"**Data do Log:** {_format_datetime(report_mtime)}  \n")
    f.write(f"**Arquivo de Log:** `{report_name}`  \n")
    f.write("**Status:** ❌ Erro detectado e analisado  \n")
    if recurrent:
        f.write("**Recorrência:** ⚠️ Erro recorrente em logs anteriores  \n")
    f.write("\n")

    _write_failed_checks(f, details.failed_checks)
    _write_located_file(f, details, file_context)
    _write_project_errors(f, project_errors)
    _write_commands(f, commands)
    _write_plan(f, plan)
    _write_reference(f, report_text)

    moment = generated_at or datetime.now()
    f.write("---\n")
    f.write(f"*Análise inteligente gerada automaticamente em {_format_datetime(moment)}*\n")
    return f.getvalue()


def diagnostic_path(report_path: Path) -> Path:
    """Document path: same directory and base name as the report, ``.md``."""
    return report_path.with_suffix(".md")


def write_diagnostic(report_path: Path, content: str) -> Path:
    path = diagnostic_path(report_path)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    return path
