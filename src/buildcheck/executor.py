"""Command runner for verification checks."""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

from buildcheck.types import SKIPPED_EXIT_CODE, TIMEOUT_EXIT_CODE, CheckResult
from buildcheck.ui import Spinner, say

logger = logging.getLogger(__name__)

CommandRunner = Callable[[str, list[str], str], CheckResult]


def _as_text(stream: str | bytes | None) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        return stream.decode("utf-8", errors="replace")
    return stream


def _unavailable(rendered: str, description: str, reason: str, *, quiet: bool) -> CheckResult:
    if not quiet:
        say(f"⚠️  {description} - Não disponível ({reason})", style="yellow")
    return CheckResult(
        description=description,
        command=rendered,
        exit_code=SKIPPED_EXIT_CODE,
        success=False,
        stdout="",
        stderr=reason,
        output=reason,
        skipped=True,
    )


def run_command(
    command: str,
    args: list[str],
    description: str,
    *,
    cwd: Path,
    timeout: float | None = None,
    quiet: bool = False,
) -> CheckResult:
    """Run one external command and capture its outcome.

    Never raises. A command that cannot be started is reported as skipped;
    a command that starts and exits non-zero is reported as failed.
    """
    rendered = " ".join([command, *args])
    if not quiet:
        say(f"⏳ {description}...")

    executable = shutil.which(command)
    if executable is None:
        return _unavailable(rendered, description, f"{command}: command not found", quiet=quiet)

    logger.debug("running %s in %s", rendered, cwd)
    try:
        completed = Spinner(description).run(
            lambda: subprocess.run(
                [executable, *args],
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
            )
        )
    except subprocess.TimeoutExpired as exc:
        stdout = _as_text(exc.stdout).strip()
        stderr = f"{_as_text(exc.stderr)}\nError: timed out after {timeout}s".strip()
        if not quiet:
            say(f"❌ {description} - Falhou (tempo esgotado)", style="red")
        return CheckResult(
            description=description,
            command=rendered,
            exit_code=TIMEOUT_EXIT_CODE,
            success=False,
            stdout=stdout,
            stderr=stderr,
            output=f"{stdout}\n{stderr}".strip(),
        )
    except (OSError, ValueError) as exc:
        return _unavailable(rendered, description, str(exc), quiet=quiet)

    stdout = completed.stdout or ""
    stderr = completed.stderr or ""
    result = CheckResult(
        description=description,
        command=rendered,
        exit_code=completed.returncode,
        success=completed.returncode == 0,
        stdout=stdout.strip(),
        stderr=stderr.strip(),
        output=(stdout + stderr).strip(),
    )

    if not quiet:
        if result.success:
            say(f"✅ {description} - Concluído", style="green")
        else:
            say(f"❌ {description} - Falhou (código: {result.exit_code})", style="red")
    return result
