"""The fixed, ordered battery of project health checks."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial

from buildcheck.capability import probe
from buildcheck.config import BuildcheckConfig
from buildcheck.executor import CommandRunner, run_command
from buildcheck.types import CheckResult, OrmCapability
from buildcheck.ui import say

TYPESCRIPT_CHECK = "Verificação TypeScript"
ESLINT_CHECK = "Verificação ESLint"
PRISMA_GENERATE_CHECK = "Geração do Cliente Prisma"
PRISMA_MIGRATE_CHECK = "Status das Migrações Prisma"
BUILD_CHECK = "Build do Next.js"
AUDIT_CHECK = "Auditoria de Segurança"
DEPENDENCIES_CHECK = "Verificação de Dependências"


@dataclass(frozen=True)
class CheckSpec:
    """One battery entry: what to run and whether it needs the ORM."""

    description: str
    command: str
    args: tuple[str, ...]
    requires_orm: bool = False


def battery_specs(build_script: str = "build:dev") -> tuple[CheckSpec, ...]:
    """The battery in its fixed display order."""
    return (
        CheckSpec(TYPESCRIPT_CHECK, "npx", ("tsc", "--noEmit")),
        CheckSpec(ESLINT_CHECK, "npx", ("eslint", ".", "--max-warnings", "0")),
        CheckSpec(PRISMA_GENERATE_CHECK, "npx", ("prisma", "generate"), requires_orm=True),
        CheckSpec(PRISMA_MIGRATE_CHECK, "npx", ("prisma", "migrate", "status"), requires_orm=True),
        CheckSpec(BUILD_CHECK, "npm", ("run", build_script)),
        CheckSpec(AUDIT_CHECK, "npm", ("audit", "--audit-level", "high")),
        CheckSpec(DEPENDENCIES_CHECK, "npm", ("ls", "--depth=0")),
    )


def announce_capability(capability: OrmCapability) -> None:
    if capability.enabled:
        say("✅ Prisma detectado - testes do Prisma serão incluídos", style="green")
    elif not capability.installed:
        say("⚠️  Prisma não instalado - testes do Prisma serão ignorados", style="yellow")
    else:
        say("⚠️  Schema do Prisma não encontrado - testes do Prisma serão ignorados", style="yellow")
    say()


def run_battery(
    config: BuildcheckConfig,
    *,
    capability: OrmCapability | None = None,
    runner: CommandRunner | None = None,
) -> list[CheckResult]:
    """Run every check, one at a time, in battery order.

    A failing check never stops the battery. ORM checks are left out
    entirely unless Prisma is both declared and configured.
    """
    say("🚀 Iniciando bateria completa de testes...\n", style="bold")

    if capability is None:
        capability = probe(config.project_root)
    announce_capability(capability)

    if runner is None:
        runner = partial(run_command, cwd=config.project_root, timeout=config.command_timeout)

    results: list[CheckResult] = []
    for spec in battery_specs(config.build_script):
        if spec.requires_orm and not capability.enabled:
            continue
        results.append(runner(spec.command, list(spec.args), spec.description))
    return results
