"""Test helpers: project scaffolding and a fake command runner."""

from __future__ import annotations

import json
from pathlib import Path

from buildcheck.types import SKIPPED_EXIT_CODE, CheckResult


def make_result(
    description: str,
    *,
    exit_code: int = 0,
    stdout: str = "",
    stderr: str = "",
    command: str = "npx test",
    skipped: bool = False,
) -> CheckResult:
    if skipped:
        return CheckResult(
            description=description,
            command=command,
            exit_code=SKIPPED_EXIT_CODE,
            success=False,
            stderr=stderr,
            output=stderr,
            skipped=True,
        )
    return CheckResult(
        description=description,
        command=command,
        exit_code=exit_code,
        success=exit_code == 0,
        stdout=stdout,
        stderr=stderr,
        output=(stdout + stderr).strip(),
    )


class FakeRunner:
    """CommandRunner stand-in; unlisted descriptions succeed."""

    def __init__(self, outcomes: dict[str, CheckResult] | None = None):
        self.outcomes = outcomes or {}
        self.calls: list[tuple[str, list[str], str]] = []

    def __call__(self, command: str, args: list[str], description: str) -> CheckResult:
        self.calls.append((command, args, description))
        if description in self.outcomes:
            return self.outcomes[description]
        return make_result(description, command=" ".join([command, *args]))

    @property
    def descriptions(self) -> list[str]:
        return [call[2] for call in self.calls]


def write_manifest(root: Path, *, prisma: bool = False) -> None:
    manifest: dict = {"name": "demo-app", "scripts": {"build:dev": "next build"}}
    if prisma:
        manifest["dependencies"] = {"@prisma/client": "^5.0.0"}
        manifest["devDependencies"] = {"prisma": "^5.0.0"}
    (root / "package.json").write_text(json.dumps(manifest), encoding="utf-8")


def write_prisma_schema(root: Path, content: str | None = None) -> Path:
    schema_dir = root / "prisma"
    schema_dir.mkdir(exist_ok=True)
    schema = schema_dir / "schema.prisma"
    schema.write_text(
        content
        if content is not None
        else 'datasource db {\n  provider = "postgresql"\n  url = env("DATABASE_URL")\n}\n',
        encoding="utf-8",
    )
    return schema


