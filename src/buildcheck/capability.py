"""Detection of the optional Prisma toolchain."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from buildcheck.types import OrmCapability
from buildcheck.ui import say

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "package.json"
ORM_PACKAGES: tuple[str, ...] = ("prisma", "@prisma/client")
DEPENDENCY_GROUPS: tuple[str, ...] = ("dependencies", "devDependencies")
ORM_SCHEMA_RELATIVE_PATH = Path("prisma") / "schema.prisma"


def is_orm_installed(project_root: Path) -> bool:
    """True if the manifest declares a Prisma package in either dependency group.

    A missing or malformed manifest counts as "not installed".
    """
    manifest_path = project_root / MANIFEST_FILENAME
    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return False
    except (OSError, ValueError) as exc:
        logger.warning("could not read %s: %s", manifest_path, exc)
        return False

    if not isinstance(manifest, dict):
        return False

    for group in DEPENDENCY_GROUPS:
        declared = manifest.get(group)
        if not isinstance(declared, dict):
            continue
        if any(declared.get(name) for name in ORM_PACKAGES):
            return True
    return False


def has_orm_schema(project_root: Path) -> bool:
    return (project_root / ORM_SCHEMA_RELATIVE_PATH).is_file()


def probe(project_root: Path) -> OrmCapability:
    return OrmCapability(
        installed=is_orm_installed(project_root),
        schema_present=has_orm_schema(project_root),
    )


def print_probe(project_root: Path) -> OrmCapability:
    """Console report of the ORM probe (``verify --test-prisma``)."""
    capability = probe(project_root)
    say("🔍 TESTE DE DETECÇÃO DO PRISMA", style="bold")
    say("=" * 40)
    say(f"Prisma instalado: {'✅ Sim' if capability.installed else '❌ Não'}")
    say(f"Schema existe: {'✅ Sim' if capability.schema_present else '❌ Não'}")

    if capability.installed:
        say("📦 Pacotes Prisma encontrados no package.json")
    else:
        say("⚠️  Nenhum pacote Prisma encontrado no package.json", style="yellow")

    if capability.schema_present:
        say(f"📄 Arquivo {ORM_SCHEMA_RELATIVE_PATH.as_posix()} encontrado")
    else:
        say(f"⚠️  Arquivo {ORM_SCHEMA_RELATIVE_PATH.as_posix()} não encontrado", style="yellow")
    say("=" * 40)
    say()
    return capability
