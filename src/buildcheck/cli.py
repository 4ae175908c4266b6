"""buildcheck CLI - verification and diagnostic stages."""

from dataclasses import dataclass
from pathlib import Path

import typer

from buildcheck import __version__
from buildcheck.capability import print_probe
from buildcheck.config import (
    BuildcheckConfig,
    ConfigError,
    ProjectRootError,
    load_config,
    require_project_root,
)
from buildcheck.diagnose import diagnose
from buildcheck.pipeline import PipelineError, run_verification
from buildcheck.ui import configure_logging

cli = typer.Typer(
    name="buildcheck",
    help="buildcheck - project health verifier and log diagnostician",
    add_completion=False,
)


@dataclass
class Settings:
    """Options given before the subcommand."""

    project_root: Path | None = None
    config_path: Path | None = None
    verbose: bool = False


def _version_option_callback(value: bool) -> None:
    """Handle eager --version option."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj if isinstance(ctx.obj, Settings) else Settings()


def _load(
    settings: Settings,
    project_root: Path | None,
    config_path: Path | None,
    verbose: bool,
) -> BuildcheckConfig:
    """Resolve the effective configuration; subcommand options win."""
    configure_logging(verbose or settings.verbose)
    root = require_project_root(project_root or settings.project_root or Path.cwd())
    return load_config(root, config_path or settings.config_path)


def _verify(
    settings: Settings,
    *,
    project_root: Path | None = None,
    config_path: Path | None = None,
    verbose: bool = False,
    test_prisma: bool = False,
) -> None:
    try:
        config = _load(settings, project_root, config_path, verbose)
        if test_prisma:
            print_probe(config.project_root)
            raise typer.Exit(code=0)
        run_verification(config)
    except typer.Exit:
        raise
    except (ProjectRootError, ConfigError) as e:
        typer.echo(f"❌ Erro: {e}", err=True)
        raise typer.Exit(code=1) from e
    except PipelineError as e:
        typer.echo(f"❌ {e}", err=True)
        if e.report_path is not None:
            typer.echo(f"📄 Log de erro salvo em: {e.report_path}", err=True)
        raise typer.Exit(code=1) from e


@cli.callback(invoke_without_command=True)
def _cli_callback(
    ctx: typer.Context,
    project_root: Path | None = typer.Option(
        None,
        "--project-root",
        help="Project root containing package.json (default: current directory)",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: <project-root>/buildcheck.yaml)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show buildcheck version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    """Run the verification stage when no subcommand is given."""
    _ = version
    ctx.obj = Settings(project_root=project_root, config_path=config_path, verbose=verbose)
    if ctx.invoked_subcommand is None:
        _verify(ctx.obj)


@cli.command(name="verify")
def verify_cmd(
    ctx: typer.Context,
    test_prisma: bool = typer.Option(
        False,
        "--test-prisma",
        "-t",
        help="Only print Prisma detection results and exit",
    ),
    project_root: Path | None = typer.Option(
        None,
        "--project-root",
        help="Project root containing package.json (default: current directory)",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: <project-root>/buildcheck.yaml)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
) -> None:
    """Run the check battery and write a report to the history directory.

    Exit codes:
      0 - Battery ran (failed checks are reported, not propagated)
      1 - Missing package.json, invalid config, or aborted run
    """
    _verify(
        _settings(ctx),
        project_root=project_root,
        config_path=config_path,
        verbose=verbose,
        test_prisma=test_prisma,
    )


@cli.command(name="diagnose")
def diagnose_cmd(
    ctx: typer.Context,
    project_root: Path | None = typer.Option(
        None,
        "--project-root",
        help="Project root containing package.json (default: current directory)",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: <project-root>/buildcheck.yaml)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Show debug logging",
    ),
) -> None:
    """Analyze the newest report and write a remediation document.

    Exit codes:
      0 - Diagnosis written, report was clean, or no report to diagnose
      1 - Missing package.json, invalid config, or analysis error
    """
    try:
        config = _load(_settings(ctx), project_root, config_path, verbose)
        diagnose(config)
    except (ProjectRootError, ConfigError) as e:
        typer.echo(f"❌ Erro: {e}", err=True)
        raise typer.Exit(code=1) from e
    except Exception as e:
        typer.echo(f"❌ Erro durante a análise: {e}", err=True)
        raise typer.Exit(code=1) from e


if __name__ == "__main__":
    cli()
