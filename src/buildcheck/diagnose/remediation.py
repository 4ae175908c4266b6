"""Remediation commands and staged action plans."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from buildcheck.battery import (
    BUILD_CHECK,
    DEPENDENCIES_CHECK,
    ESLINT_CHECK,
    TYPESCRIPT_CHECK,
)
from buildcheck.types import ErrorDetails, ErrorType

TSC_COMMAND = "npx tsc --noEmit"
LINT_FIX_COMMAND = "npm run lint -- --fix"
PRISMA_GENERATE_COMMAND = "npx prisma generate"
PRISMA_MIGRATE_COMMAND = "npx prisma migrate dev"
CLEAN_BUILD_COMMAND = "rm -rf .next"
INSTALL_COMMAND = "npm install"
AUDIT_FIX_COMMAND = "npm audit fix"
VERIFY_COMMAND = "buildcheck verify"
DIAGNOSE_COMMAND = "buildcheck diagnose"

# Keyword in a failed check description -> commands it calls for.
CHECK_COMMANDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("TypeScript", (TSC_COMMAND,)),
    ("ESLint", (LINT_FIX_COMMAND,)),
    ("Prisma", (PRISMA_GENERATE_COMMAND, PRISMA_MIGRATE_COMMAND)),
    ("Build", (CLEAN_BUILD_COMMAND,)),
    ("Dependências", (INSTALL_COMMAND,)),
    ("Auditoria", (AUDIT_FIX_COMMAND,)),
)

TYPE_COMMANDS: dict[ErrorType, str] = {
    ErrorType.TYPESCRIPT: TSC_COMMAND,
    ErrorType.PRISMA: PRISMA_GENERATE_COMMAND,
    ErrorType.MODULE: INSTALL_COMMAND,
    ErrorType.NEXTJS: CLEAN_BUILD_COMMAND,
}


def remediation_commands(details: ErrorDetails, build_script: str = "build:dev") -> list[str]:
    """Ordered, de-duplicated fix commands.

    Failed checks contribute first, then the classified error type; the
    list always ends with a rebuild followed by a new diagnosis.
    """
    commands: list[str] = []

    def add(command: str) -> None:
        if command not in commands:
            commands.append(command)

    for check in details.failed_checks:
        for keyword, check_commands in CHECK_COMMANDS:
            if keyword in check:
                for command in check_commands:
                    add(command)

    type_command = TYPE_COMMANDS.get(details.type)
    if type_command is not None:
        add(type_command)

    rebuild = f"npm run {build_script}"
    commands = [c for c in commands if c not in (rebuild, DIAGNOSE_COMMAND)]
    commands.extend([rebuild, DIAGNOSE_COMMAND])
    return commands


class PlanCategory(str, Enum):
    """Action plan stages, in plan order."""

    TYPESCRIPT = "typescript"
    LINT = "lint"
    PRISMA = "prisma"
    BUILD = "build"
    DEPENDENCIES = "dependencies"


@dataclass(frozen=True)
class ActionStage:
    title: str
    description: str
    commands: tuple[str, ...] = ()


def _categories(details: ErrorDetails) -> set[PlanCategory]:
    categories: set[PlanCategory] = set()
    for check in details.failed_checks:
        if check == TYPESCRIPT_CHECK:
            categories.add(PlanCategory.TYPESCRIPT)
        elif check == ESLINT_CHECK:
            categories.add(PlanCategory.LINT)
        elif "Prisma" in check:
            categories.add(PlanCategory.PRISMA)
        elif check == BUILD_CHECK:
            categories.add(PlanCategory.BUILD)
        elif check == DEPENDENCIES_CHECK:
            categories.add(PlanCategory.DEPENDENCIES)

    by_type = {
        ErrorType.TYPESCRIPT: PlanCategory.TYPESCRIPT,
        ErrorType.ESLINT: PlanCategory.LINT,
        ErrorType.PRISMA: PlanCategory.PRISMA,
        ErrorType.NEXTJS: PlanCategory.BUILD,
        ErrorType.MODULE: PlanCategory.DEPENDENCIES,
    }
    if details.type in by_type:
        categories.add(by_type[details.type])
    return categories


def _stage_for(category: PlanCategory, build_script: str) -> ActionStage:
    if category is PlanCategory.TYPESCRIPT:
        return ActionStage(
            "Corrigir Erros de TypeScript",
            "Resolver problemas de tipagem e sintaxe do TypeScript.",
            (TSC_COMMAND, "code . # Abrir editor para correções"),
        )
    if category is PlanCategory.LINT:
        return ActionStage(
            "Corrigir Problemas de Lint",
            "Resolver problemas de qualidade e padrões de código.",
            (LINT_FIX_COMMAND, "npm run lint # Verificar problemas restantes"),
        )
    if category is PlanCategory.PRISMA:
        return ActionStage(
            "Resolver Problemas do Prisma",
            "Corrigir configuração do banco de dados e ORM.",
            (PRISMA_GENERATE_COMMAND, PRISMA_MIGRATE_COMMAND, "npx prisma db push"),
        )
    if category is PlanCategory.BUILD:
        return ActionStage(
            "Corrigir Build do Next.js",
            "Resolver problemas de build e compilação.",
            (CLEAN_BUILD_COMMAND, f"npm run {build_script}"),
        )
    return ActionStage(
        "Resolver Dependências",
        "Corrigir problemas com pacotes e dependências.",
        (INSTALL_COMMAND, "rm -rf node_modules package-lock.json && npm install"),
    )


def action_plan(details: ErrorDetails, build_script: str = "build:dev") -> list[ActionStage]:
    """One stage per problem category present, then the located file, then re-verification."""
    present = _categories(details)
    plan = [_stage_for(category, build_script) for category in PlanCategory if category in present]

    location = details.location
    if location is not None:
        at_line = f" na linha {location.line}" if location.line else ""
        target = f"{location.file}:{location.line}" if location.line else location.file
        plan.append(
            ActionStage(
                "Corrigir Arquivo Específico",
                f"Resolver problemas no arquivo {location.file}{at_line}.",
                (f"code {target}",),
            )
        )

    plan.append(
        ActionStage(
            "Verificação Final",
            "Executar todos os testes novamente para confirmar as correções.",
            (VERIFY_COMMAND, DIAGNOSE_COMMAND),
        )
    )
    return plan
