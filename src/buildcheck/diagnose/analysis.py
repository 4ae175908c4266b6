"""Heuristic inspection of the file a report points at."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

CONTEXT_RADIUS = 3
TYPESCRIPT_SUFFIXES = (".ts", ".tsx")


@dataclass(frozen=True)
class FileAnalysis:
    """Problem/solution guidance for one located line."""

    kind: str
    problem: str
    solution: str
    code_example: str
    steps: tuple[str, ...]


@dataclass(frozen=True)
class FileContext:
    path: Path
    line: int | None
    total_lines: int
    excerpt: str
    analysis: FileAnalysis | None


def _missing_react_import(content: str, problem_line: str, file_path: str) -> FileAnalysis | None:
    if "React" not in problem_line or "import React" in content:
        return None
    return FileAnalysis(
        kind="TypeScript/React",
        problem="Import do React está ausente",
        solution="Adicionar import do React no topo do arquivo",
        code_example="import React from 'react';",
        steps=(
            "Adicione a linha de import no topo do arquivo",
            "Certifique-se de que está antes de outros imports locais",
            "Salve o arquivo e execute o build novamente",
        ),
    )


def _type_annotation_mismatch(content: str, problem_line: str, file_path: str) -> FileAnalysis | None:
    if ":" not in problem_line:
        return None
    if not any(name in problem_line for name in ("string", "number", "boolean")):
        return None
    return FileAnalysis(
        kind="TypeScript/React",
        problem="Problema de tipagem TypeScript",
        solution="Corrigir a declaração de tipo na linha",
        code_example=(
            "// Exemplo de tipagem correta:\n"
            'const variavel: string = "valor";\n'
            "const numero: number = 42;"
        ),
        steps=(
            "Verifique se o tipo declarado corresponde ao valor atribuído",
            "Certifique-se de que a sintaxe está correta (: tipo)",
            "Se for uma prop, verifique a interface do componente pai",
        ),
    )


def _export_import_problem(content: str, problem_line: str, file_path: str) -> FileAnalysis | None:
    if "export" not in problem_line and "import" not in problem_line:
        return None
    return FileAnalysis(
        kind="TypeScript/React",
        problem="Problema com export/import",
        solution="Corrigir a declaração de import/export",
        code_example=(
            "// Export correto:\n"
            "export default function ComponentName() {}\n\n"
            "// Import correto:\n"
            "import ComponentName from './ComponentName';"
        ),
        steps=(
            "Verifique se o caminho do arquivo está correto",
            "Certifique-se de que o arquivo exportado existe",
            "Verifique se é export default ou named export",
        ),
    )


def _component_declaration(content: str, problem_line: str, file_path: str) -> FileAnalysis | None:
    if not file_path.endswith(".tsx"):
        return None
    if "function" not in problem_line and "const" not in problem_line:
        return None
    return FileAnalysis(
        kind="TypeScript/React",
        problem="Problema na declaração do componente React",
        solution="Corrigir a estrutura do componente",
        code_example=(
            "// Componente funcional correto:\n"
            "function ComponentName() {\n"
            "  return (\n"
            "    <div>\n"
            "      {/* conteúdo */}\n"
            "    </div>\n"
            "  );\n"
            "}"
        ),
        steps=(
            "Verifique se o componente retorna JSX válido",
            "Certifique-se de que está dentro de um único elemento pai",
            "Verifique se todas as tags JSX estão fechadas corretamente",
        ),
    )


def _generic_problem(content: str, problem_line: str, file_path: str) -> FileAnalysis:
    return FileAnalysis(
        kind="TypeScript/React",
        problem="Erro de sintaxe ou lógica detectado",
        solution="Revisar a linha indicada e corrigir o erro",
        code_example="// Verifique a sintaxe da linha com erro",
        steps=(
            "Examine a linha indicada no erro",
            "Verifique sintaxe (pontos e vírgulas, chaves, parênteses)",
            "Execute o linter para mais detalhes: npm run lint",
        ),
    )


Rule = Callable[[str, str, str], FileAnalysis | None]

# First match wins; order is significant.
RULES: tuple[Rule, ...] = (
    _missing_react_import,
    _type_annotation_mismatch,
    _export_import_problem,
    _component_declaration,
)


def analyze_typescript_line(content: str, line_number: int | None, file_path: str) -> FileAnalysis:
    lines = content.split("\n")
    index = (line_number or 1) - 1
    problem_line = lines[index] if 0 <= index < len(lines) else ""

    for rule in RULES:
        analysis = rule(content, problem_line, file_path)
        if analysis is not None:
            return analysis
    return _generic_problem(content, problem_line, file_path)


def context_window(content: str, line_number: int | None, radius: int = CONTEXT_RADIUS) -> str:
    """Lines ``line-radius`` through ``line+radius`` (1-based, clamped)."""
    lines = content.split("\n")
    center = line_number or 1
    start = max(0, center - 1 - radius)
    end = min(len(lines), center + radius)
    return "\n".join(lines[start:end])


def analyze_file(path: Path, line_number: int | None) -> FileContext | None:
    """Read the located file and build guidance; None if it cannot be read."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None

    analysis = None
    if path.suffix in TYPESCRIPT_SUFFIXES:
        analysis = analyze_typescript_line(content, line_number, str(path))

    return FileContext(
        path=path,
        line=line_number,
        total_lines=len(content.split("\n")),
        excerpt=context_window(content, line_number),
        analysis=analysis,
    )
