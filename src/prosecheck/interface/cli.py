"""CLI entry points for prosecheck - Thin Controller using Typer."""

import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from prosecheck.domain.config import ConfigurationLoader
from prosecheck.domain.constants import TOOL_NAME
from prosecheck.domain.descriptor import Descriptor
from prosecheck.domain.entities import LintMode
from prosecheck.domain.errors import ProsecheckError
from prosecheck.domain.protocols import (
    CapabilityRegistryProtocol,
    ConfigSourceProtocol,
    FileSystemProtocol,
    RuleCatalogProtocol,
    TelemetryPort,
)
from prosecheck.interface.reporters import ResultFormatter
from prosecheck.use_cases.lint_files import LintFilesUseCase
from prosecheck.use_cases.session_runner import SessionRunner

EXIT_OK = 0
EXIT_PROBLEMS = 1
EXIT_CONFIG_ERROR = 2


@dataclass(frozen=True)
class CLIDependencies:
    """Explicit dependencies for the CLI. All dependencies injected at composition root."""

    telemetry: TelemetryPort
    filesystem: FileSystemProtocol
    registry: CapabilityRegistryProtocol
    config_source: ConfigSourceProtocol
    rule_catalog: RuleCatalogProtocol
    formatter_factory: Callable[[str, bool], ResultFormatter]


class CLIAppFactory:
    """Creates the Typer app. No top-level functions."""

    @staticmethod
    def configure_logging(verbose: bool) -> None:
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
            force=True,
        )

    @staticmethod
    def load_settings(deps: CLIDependencies, config: Optional[Path]) -> ConfigurationLoader:
        if config is not None:
            config_dict = deps.config_source.load_file(str(config))
        else:
            config_dict = deps.config_source.load_config_from_fs()
        return ConfigurationLoader(config_dict, deps.registry)

    @staticmethod
    def create_app(deps: CLIDependencies) -> typer.Typer:
        """Create the Typer app with explicitly injected dependencies."""
        app = typer.Typer(
            name=TOOL_NAME,
            help="prosecheck: pluggable linter for prose in markdown and plain text.",
            add_completion=False,
        )

        @app.command()
        def lint(
            paths: Optional[list[Path]] = typer.Argument(None, help="Files or directories (default: .)"),  # noqa: B008
            fix: bool = typer.Option(False, "--fix", help="Apply auto-fixes and write them back"),
            formatter: Optional[str] = typer.Option(
                None, "--formatter", "-f", help="stylish, compact, json, checkstyle, junit or tap"
            ),
            config: Optional[Path] = typer.Option(
                None, "--config", "-c", help="Config file (.toml, .json, .yaml); default: pyproject.toml"
            ),
            max_fix_iterations: Optional[int] = typer.Option(
                None, "--max-fix-iterations", min=1, help="Upper bound on fix passes per document"
            ),
            workers: Optional[int] = typer.Option(
                None, "--workers", min=1, help="Documents processed in parallel"
            ),
            verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr"),
        ) -> None:
            """Lint documents; exit 1 when any error remains."""
            CLIAppFactory.configure_logging(verbose)
            deps.telemetry.handshake()
            try:
                settings = CLIAppFactory.load_settings(deps, config)
                descriptor: Descriptor = settings.build_descriptor()
                color = sys.stdout.isatty()
                result_formatter = deps.formatter_factory(formatter or settings.formatter, color)
                runner = SessionRunner(
                    max_fix_iterations=max_fix_iterations or settings.max_fix_iterations,
                    workers=workers or settings.workers,
                    timeout=settings.timeout,
                    telemetry=deps.telemetry,
                )
            except (ProsecheckError, ValueError) as exc:
                typer.echo(f"{TOOL_NAME}: configuration error: {exc}", err=True)
                sys.exit(EXIT_CONFIG_ERROR)

            use_case = LintFilesUseCase(deps.filesystem, runner, deps.telemetry)
            mode = LintMode.FIX if fix else LintMode.LINT
            batch = use_case.execute(descriptor, [str(p) for p in paths or []], mode)

            output = result_formatter.render(batch)
            if output:
                typer.echo(output)
            sys.exit(EXIT_PROBLEMS if batch.has_errors() else EXIT_OK)

        @app.command()
        def rules(
            config: Optional[Path] = typer.Option(
                None, "--config", "-c", help="Mark the rules enabled by this configuration"
            ),
            verbose: bool = typer.Option(False, "--verbose", "-v", help="Also print how to resolve each rule"),
        ) -> None:
            """List registered rules, their defaults and whether they are enabled."""
            try:
                enabled = {rd.rule_id for rd in CLIAppFactory.load_settings(deps, config).rule_descriptors()}
            except ProsecheckError as exc:
                typer.echo(f"{TOOL_NAME}: configuration error: {exc}", err=True)
                sys.exit(EXIT_CONFIG_ERROR)

            for rule_id, unit in deps.registry.rules():
                marker = "*" if rule_id in enabled else " "
                fixable = "fixable" if getattr(unit, "fixable", False) else ""
                description = deps.rule_catalog.get_short_description(rule_id, unit.description)
                typer.echo(
                    f"{marker} {rule_id:<24} {unit.default_severity.value:<8} {fixable:<8} {description}"
                )
                instructions = deps.rule_catalog.get_manual_instructions(rule_id)
                if verbose and instructions:
                    typer.echo(f"    {instructions}")
            typer.echo("")
            typer.echo("* enabled by the current configuration")

        return app
